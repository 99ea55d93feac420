"""
Artist persistence (raw SQL).

Every function takes a borrowed connection; the service decides how long it
is held and whether a transaction wraps it.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

LIST_ARTISTS = """
    SELECT id, name, genre
    FROM artists
    ORDER BY name ASC
"""

FIND_ARTIST_BY_NAME = """
    SELECT id, name, genre
    FROM artists
    WHERE lower(name) = lower($1)
    LIMIT 1
"""

ARTIST_NAME_TAKEN = """
    SELECT 1 AS taken
    FROM artists
    WHERE lower(name) = lower($1)
      AND ($2::bigint IS NULL OR id <> $2)
    LIMIT 1
"""

INSERT_ARTIST = """
    INSERT INTO artists (name, genre)
    VALUES ($1, $2)
    RETURNING id, name, genre
"""

UPDATE_ARTIST = """
    UPDATE artists
    SET name = COALESCE($2, name),
        genre = COALESCE($3, genre)
    WHERE id = $1
    RETURNING id, name, genre
"""


async def list_artists(conn: asyncpg.Connection) -> list[dict[str, Any]]:
    return await db.fetch_all(conn, LIST_ARTISTS)


async def find_artist_by_name(conn: asyncpg.Connection, name: str) -> dict[str, Any] | None:
    return await db.fetch_one(conn, FIND_ARTIST_BY_NAME, name)


async def name_taken(conn: asyncpg.Connection, name: str, *, exclude_id: int | None = None) -> bool:
    """
    Case-insensitive check against every artist except `exclude_id`.
    """
    row = await db.fetch_one(conn, ARTIST_NAME_TAKEN, name, exclude_id)
    return row is not None


async def insert_artist(conn: asyncpg.Connection, *, name: str, genre: str) -> dict[str, Any]:
    row = await db.fetch_one(conn, INSERT_ARTIST, name, genre)
    if row is None:
        raise RuntimeError("Failed to insert artist.")
    return row


async def update_artist(
    conn: asyncpg.Connection,
    artist_id: int,
    *,
    name: str | None = None,
    genre: str | None = None,
) -> dict[str, Any] | None:
    return await db.fetch_one(conn, UPDATE_ARTIST, artist_id, name, genre)
