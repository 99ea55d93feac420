"""
Read-only aggregation of artists and their albums.
"""

from __future__ import annotations

import json
from typing import Any

from albums.schemas import Album
from core.db import Database

from . import repository, schemas


def _decode_albums(raw: Any) -> list[dict[str, Any]]:
    """
    asyncpg hands json columns back as text unless a codec is registered.
    """
    if raw is None:
        return []
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)
    return list(raw)


def _to_collection_artist(row: dict) -> schemas.CollectionArtist:
    albums = [
        Album(
            id=int(item["id"]),
            title=str(item["title"]),
            year=int(item["release_year"]),
            artist_id=int(item["artist_id"]),
        )
        for item in _decode_albums(row.get("albums"))
    ]
    return schemas.CollectionArtist(
        id=int(row["id"]),
        name=str(row["name"]),
        genre=str(row["genre"]),
        albums=albums,
    )


async def get_musical_collection(db: Database) -> list[schemas.CollectionArtist]:
    async with db.connection() as conn:
        rows = await repository.fetch_collection(conn)
    return [_to_collection_artist(row) for row in rows]
