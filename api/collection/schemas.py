"""
Musical collection response model.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from albums.schemas import Album


class CollectionArtist(BaseModel):
    id: int
    name: str
    genre: str
    albums: list[Album] = Field(default_factory=list)
