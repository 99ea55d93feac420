"""
Artist business logic.

Scope:
- listing and case-insensitive lookup by name
- create / partial update with case-insensitive name uniqueness

Uniqueness is checked up front for a descriptive error and backed by the
`artists_name_lower_key` index; a violation of that index (a concurrent
writer slipping past the pre-check) is reported the same way.
"""

from __future__ import annotations

import logging

from core import errors
from core.db import Database

from . import repository, schemas

logger = logging.getLogger(__name__)


def _to_artist(row: dict) -> schemas.Artist:
    return schemas.Artist(
        id=int(row["id"]),
        name=str(row["name"]),
        genre=str(row["genre"]),
    )


def _remap_violation(exc: errors.ConstraintViolation, name: str | None) -> errors.RepositoryError:
    if exc.kind == errors.ConstraintViolation.UNIQUE and name is not None:
        logger.info("artist_name_conflict constraint=%s name=%s", exc.constraint, name)
        return errors.DuplicateName(name)
    return exc


async def list_artists(db: Database) -> list[schemas.Artist]:
    async with db.connection() as conn:
        rows = await repository.list_artists(conn)
    return [_to_artist(row) for row in rows]


async def find_artist_by_name(db: Database, name: str) -> schemas.Artist | None:
    name = (name or "").strip()
    if not name:
        return None

    async with db.connection() as conn:
        row = await repository.find_artist_by_name(conn, name)
    return _to_artist(row) if row is not None else None


async def create_artist(db: Database, payload: schemas.ArtistCreate) -> schemas.Artist:
    try:
        async with db.transaction() as conn:
            if await repository.name_taken(conn, payload.name):
                raise errors.DuplicateName(payload.name)
            row = await repository.insert_artist(conn, name=payload.name, genre=payload.genre)
    except errors.ConstraintViolation as exc:
        raise _remap_violation(exc, payload.name) from exc

    artist = _to_artist(row)
    logger.info("artist_created id=%s name=%s", artist.id, artist.name)
    return artist


async def update_artist(
    db: Database,
    artist_id: int,
    payload: schemas.ArtistUpdate,
) -> schemas.Artist | None:
    """
    Apply only the supplied fields. Returns None when `artist_id` is unknown.
    """
    changes = payload.changes()
    if not changes:
        raise errors.NoFieldsProvided(schemas.ArtistUpdate.FIELDS)

    name = changes.get("name")
    try:
        async with db.transaction() as conn:
            if name is not None and await repository.name_taken(conn, name, exclude_id=artist_id):
                raise errors.DuplicateName(name)
            row = await repository.update_artist(
                conn,
                artist_id,
                name=name,
                genre=changes.get("genre"),
            )
    except errors.ConstraintViolation as exc:
        raise _remap_violation(exc, name) from exc

    if row is None:
        return None

    artist = _to_artist(row)
    logger.info("artist_updated id=%s fields=%s", artist.id, ",".join(sorted(changes)))
    return artist
