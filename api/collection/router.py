"""
Musical collection endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core import http
from core.db import Database

from . import service

router = APIRouter(prefix="/api/collection")


@router.get("")
async def get_collection(db: Database = Depends(http.get_db)):
    artists = await service.get_musical_collection(db)
    return http.success("Musical collection retrieved", {"artists": artists})
