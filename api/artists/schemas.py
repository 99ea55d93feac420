"""
Artist API schemas (request/response models).
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

NAME_MAX_LENGTH = 255
GENRE_MAX_LENGTH = 255


class ArtistCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    genre: str = Field(..., min_length=1, max_length=GENRE_MAX_LENGTH)


class ArtistUpdate(BaseModel):
    """
    Partial update: each field is either supplied or left alone.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    FIELDS: ClassVar[tuple[str, ...]] = ("name", "genre")

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    genre: str | None = Field(default=None, min_length=1, max_length=GENRE_MAX_LENGTH)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class Artist(BaseModel):
    id: int
    name: str
    genre: str
