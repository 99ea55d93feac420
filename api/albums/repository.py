"""
Album persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

LIST_ALBUMS = """
    SELECT id, title, release_year, artist_id
    FROM albums
    ORDER BY title ASC
"""

LIST_ALBUMS_BY_ARTIST = """
    SELECT id, title, release_year, artist_id
    FROM albums
    WHERE artist_id = $1
    ORDER BY release_year ASC, title ASC
"""

ALBUM_TITLE_TAKEN = """
    SELECT 1 AS taken
    FROM albums
    WHERE lower(title) = lower($1)
      AND ($2::bigint IS NULL OR id <> $2)
    LIMIT 1
"""

INSERT_ALBUM = """
    INSERT INTO albums (title, release_year, artist_id)
    VALUES ($1, $2, $3)
    RETURNING id, title, release_year, artist_id
"""

UPDATE_ALBUM = """
    UPDATE albums
    SET title = COALESCE($2, title),
        release_year = COALESCE($3, release_year),
        artist_id = COALESCE($4, artist_id)
    WHERE id = $1
    RETURNING id, title, release_year, artist_id
"""


async def list_albums(conn: asyncpg.Connection) -> list[dict[str, Any]]:
    return await db.fetch_all(conn, LIST_ALBUMS)


async def list_albums_by_artist(conn: asyncpg.Connection, artist_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(conn, LIST_ALBUMS_BY_ARTIST, artist_id)


async def title_taken(conn: asyncpg.Connection, title: str, *, exclude_id: int | None = None) -> bool:
    """
    Case-insensitive check against every album (any artist) except
    `exclude_id`.
    """
    row = await db.fetch_one(conn, ALBUM_TITLE_TAKEN, title, exclude_id)
    return row is not None


async def insert_album(
    conn: asyncpg.Connection,
    *,
    title: str,
    year: int,
    artist_id: int,
) -> dict[str, Any]:
    row = await db.fetch_one(conn, INSERT_ALBUM, title, year, artist_id)
    if row is None:
        raise RuntimeError("Failed to insert album.")
    return row


async def update_album(
    conn: asyncpg.Connection,
    album_id: int,
    *,
    title: str | None = None,
    year: int | None = None,
    artist_id: int | None = None,
) -> dict[str, Any] | None:
    return await db.fetch_one(conn, UPDATE_ALBUM, album_id, title, year, artist_id)
