"""
Album business logic.

Create and update run in one transaction:
1. case-insensitive title check across all albums (descriptive error first)
2. the write itself; the store enforces `albums_title_lower_key` and the
   `albums_artist_id_fkey` reference, and both violations are remapped here
"""

from __future__ import annotations

import logging

from core import errors
from core.db import Database

from . import repository, schemas

logger = logging.getLogger(__name__)


def _to_album(row: dict) -> schemas.Album:
    return schemas.Album(
        id=int(row["id"]),
        title=str(row["title"]),
        year=int(row["release_year"]),
        artist_id=int(row["artist_id"]),
    )


def _remap_violation(
    exc: errors.ConstraintViolation,
    *,
    title: str | None,
    artist_id: int | None,
) -> errors.RepositoryError:
    if exc.kind == errors.ConstraintViolation.FOREIGN_KEY and artist_id is not None:
        logger.info("album_artist_missing constraint=%s artist_id=%s", exc.constraint, artist_id)
        return errors.ArtistNotFound(artist_id)
    if exc.kind == errors.ConstraintViolation.UNIQUE and title is not None:
        logger.info("album_title_conflict constraint=%s title=%s", exc.constraint, title)
        return errors.DuplicateTitle(title)
    return exc


async def list_albums(db: Database) -> list[schemas.Album]:
    async with db.connection() as conn:
        rows = await repository.list_albums(conn)
    return [_to_album(row) for row in rows]


async def list_albums_by_artist(db: Database, artist_id: int) -> list[schemas.Album]:
    """
    Unknown artists simply have no albums.
    """
    async with db.connection() as conn:
        rows = await repository.list_albums_by_artist(conn, artist_id)
    return [_to_album(row) for row in rows]


async def create_album(db: Database, payload: schemas.AlbumCreate) -> schemas.Album:
    try:
        async with db.transaction() as conn:
            if await repository.title_taken(conn, payload.title):
                raise errors.DuplicateTitle(payload.title)
            row = await repository.insert_album(
                conn,
                title=payload.title,
                year=payload.year,
                artist_id=payload.artist_id,
            )
    except errors.ConstraintViolation as exc:
        raise _remap_violation(exc, title=payload.title, artist_id=payload.artist_id) from exc

    album = _to_album(row)
    logger.info("album_created id=%s title=%s artist_id=%s", album.id, album.title, album.artist_id)
    return album


async def update_album(
    db: Database,
    album_id: int,
    payload: schemas.AlbumUpdate,
) -> schemas.Album | None:
    """
    Apply only the supplied fields. Returns None when `album_id` is unknown.
    """
    changes = payload.changes()
    if not changes:
        raise errors.NoFieldsProvided(schemas.AlbumUpdate.FIELDS)

    title = changes.get("title")
    artist_id = changes.get("artist_id")
    try:
        async with db.transaction() as conn:
            if title is not None and await repository.title_taken(conn, title, exclude_id=album_id):
                raise errors.DuplicateTitle(title)
            row = await repository.update_album(
                conn,
                album_id,
                title=title,
                year=changes.get("year"),
                artist_id=artist_id,
            )
    except errors.ConstraintViolation as exc:
        raise _remap_violation(exc, title=title, artist_id=artist_id) from exc

    if row is None:
        return None

    album = _to_album(row)
    logger.info("album_updated id=%s fields=%s", album.id, ",".join(sorted(changes)))
    return album
