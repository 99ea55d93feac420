"""
Artist API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status

from albums import service as album_service
from core import http
from core.db import MAX_BIGINT, Database

from . import schemas, service

router = APIRouter(prefix="/api/artists")


@router.get("")
async def list_artists(db: Database = Depends(http.get_db)):
    artists = await service.list_artists(db)
    return http.success("Artists retrieved", {"artists": artists})


@router.get("/search")
async def find_artist(
    name: str = Query(..., min_length=1, max_length=schemas.NAME_MAX_LENGTH),
    db: Database = Depends(http.get_db),
):
    artist = await service.find_artist_by_name(db, name)
    if artist is None:
        return http.not_found("Artist not found.")
    return http.success("Artist retrieved", {"artist": artist})


@router.post("")
async def create_artist(
    payload: schemas.ArtistCreate,
    db: Database = Depends(http.get_db),
):
    artist = await service.create_artist(db, payload)
    return http.success("Artist created", {"artist": artist}, status_code=status.HTTP_201_CREATED)


@router.patch("/{artist_id}")
async def update_artist(
    payload: schemas.ArtistUpdate,
    artist_id: int = Path(..., ge=1, le=MAX_BIGINT),
    db: Database = Depends(http.get_db),
):
    artist = await service.update_artist(db, artist_id, payload)
    if artist is None:
        return http.not_found("Artist not found.")
    return http.success("Artist updated", {"artist": artist})


@router.get("/{artist_id}/albums")
async def list_artist_albums(
    artist_id: int = Path(..., ge=1, le=MAX_BIGINT),
    db: Database = Depends(http.get_db),
):
    albums = await album_service.list_albums_by_artist(db, artist_id)
    return http.success("Albums retrieved", {"albums": albums})
