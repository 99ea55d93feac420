"""
Album API schemas (request/response models).

`year` and `artist_id` accept integer strings ("1959") as well as integers.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from core.db import MAX_BIGINT

TITLE_MAX_LENGTH = 255
MIN_RELEASE_YEAR = 1800
MAX_RELEASE_YEAR = 2100


class AlbumCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    year: int = Field(..., ge=MIN_RELEASE_YEAR, le=MAX_RELEASE_YEAR)
    artist_id: int = Field(..., ge=1, le=MAX_BIGINT)


class AlbumUpdate(BaseModel):
    """
    Partial update: each field is either supplied or left alone.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    FIELDS: ClassVar[tuple[str, ...]] = ("title", "year", "artist_id")

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    year: int | None = Field(default=None, ge=MIN_RELEASE_YEAR, le=MAX_RELEASE_YEAR)
    artist_id: int | None = Field(default=None, ge=1, le=MAX_BIGINT)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class Album(BaseModel):
    id: int
    title: str
    year: int
    artist_id: int
