"""
Musical collection query: every artist with its albums.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

# LEFT JOIN keeps artists without albums; FILTER drops the all-NULL row
# those artists produce, and COALESCE turns the NULL aggregate into [].
COLLECTION = """
    SELECT
      ar.id,
      ar.name,
      ar.genre,
      COALESCE(
        json_agg(
          json_build_object(
            'id', al.id,
            'title', al.title,
            'release_year', al.release_year,
            'artist_id', al.artist_id
          )
          ORDER BY al.release_year, al.title
        ) FILTER (WHERE al.id IS NOT NULL),
        '[]'::json
      ) AS albums
    FROM artists ar
    LEFT JOIN albums al ON al.artist_id = ar.id
    GROUP BY ar.id, ar.name, ar.genre
    ORDER BY ar.name ASC
"""


async def fetch_collection(conn: asyncpg.Connection) -> list[dict[str, Any]]:
    return await db.fetch_all(conn, COLLECTION)
