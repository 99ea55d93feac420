"""
Album API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, status

from core import http
from core.db import MAX_BIGINT, Database

from . import schemas, service

router = APIRouter(prefix="/api/albums")


@router.get("")
async def list_albums(db: Database = Depends(http.get_db)):
    albums = await service.list_albums(db)
    return http.success("Albums retrieved", {"albums": albums})


@router.post("")
async def create_album(
    payload: schemas.AlbumCreate,
    db: Database = Depends(http.get_db),
):
    album = await service.create_album(db, payload)
    return http.success("Album created", {"album": album}, status_code=status.HTTP_201_CREATED)


@router.patch("/{album_id}")
async def update_album(
    payload: schemas.AlbumUpdate,
    album_id: int = Path(..., ge=1, le=MAX_BIGINT),
    db: Database = Depends(http.get_db),
):
    album = await service.update_album(db, album_id, payload)
    if album is None:
        return http.not_found("Album not found.")
    return http.success("Album updated", {"album": album})
