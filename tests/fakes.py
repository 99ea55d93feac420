"""
In-memory stand-in for an asyncpg pool.

`FakePool` answers exactly the statements the repositories issue (matched by
the SQL constants themselves) and enforces the same rules as
`db/schema.sql`: case-insensitive unique names and titles, and the album ->
artist foreign key. Violations raise the real asyncpg exception classes so
`core.db.Database` translates them as it would in production.
"""

from __future__ import annotations

import copy
import json
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import asyncpg

from albums import repository as album_repository
from artists import repository as artist_repository
from collection import repository as collection_repository
from core import db


def _violation(cls: type[Exception], constraint: str, message: str) -> Exception:
    exc = cls(message)
    exc.constraint_name = constraint  # type: ignore[attr-defined]
    return exc


def _encode_args(args: tuple) -> None:
    """
    Mirror asyncpg's client-side encoder, which refuses integers that do
    not fit a bigint before anything reaches the server.
    """
    for position, value in enumerate(args, start=1):
        if isinstance(value, int) and not -db.MAX_BIGINT - 1 <= value <= db.MAX_BIGINT:
            raise asyncpg.exceptions._base.DataError(
                f"invalid input for query argument ${position}: {value} (value out of int64 range)"
            )


class FakeConnection:
    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool
        self._handlers = {
            db.HEALTH_SQL: self._health,
            artist_repository.LIST_ARTISTS: self._list_artists,
            artist_repository.FIND_ARTIST_BY_NAME: self._find_artist_by_name,
            artist_repository.ARTIST_NAME_TAKEN: self._artist_name_taken,
            artist_repository.INSERT_ARTIST: self._insert_artist,
            artist_repository.UPDATE_ARTIST: self._update_artist,
            album_repository.LIST_ALBUMS: self._list_albums,
            album_repository.LIST_ALBUMS_BY_ARTIST: self._list_albums_by_artist,
            album_repository.ALBUM_TITLE_TAKEN: self._album_title_taken,
            album_repository.INSERT_ALBUM: self._insert_album,
            album_repository.UPDATE_ALBUM: self._update_album,
            collection_repository.COLLECTION: self._collection,
        }

    # asyncpg.Connection surface

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        return self._run(sql, args)

    async def fetchrow(self, sql: str, *args: Any) -> dict[str, Any] | None:
        rows = self._run(sql, args)
        return rows[0] if rows else None

    @asynccontextmanager
    async def transaction(self):
        snapshot = copy.deepcopy(self._pool.tables)
        self._pool.transactions += 1
        try:
            yield
        except BaseException:
            self._pool.tables = snapshot
            self._pool.rollbacks += 1
            raise

    def _run(self, sql: str, args: tuple) -> list[dict[str, Any]]:
        if self._pool.broken:
            raise asyncpg.exceptions.InterfaceError("connection was closed in the middle of operation")
        _encode_args(args)
        handler = self._handlers.get(sql)
        if handler is None:
            raise AssertionError(f"Unexpected SQL: {sql}")
        self._pool.statements.append(sql)
        return handler(*args)

    # helpers

    @property
    def _artists(self) -> dict[int, dict[str, Any]]:
        return self._pool.tables["artists"]

    @property
    def _albums(self) -> dict[int, dict[str, Any]]:
        return self._pool.tables["albums"]

    def _next_id(self, table: str) -> int:
        self._pool.sequences[table] += 1
        return self._pool.sequences[table]

    def _check_artist_name(self, name: str, exclude_id: int | None) -> None:
        for row in self._artists.values():
            if row["id"] != exclude_id and row["name"].lower() == name.lower():
                raise _violation(
                    asyncpg.exceptions.UniqueViolationError,
                    "artists_name_lower_key",
                    'duplicate key value violates unique constraint "artists_name_lower_key"',
                )

    def _check_album_title(self, title: str, exclude_id: int | None) -> None:
        for row in self._albums.values():
            if row["id"] != exclude_id and row["title"].lower() == title.lower():
                raise _violation(
                    asyncpg.exceptions.UniqueViolationError,
                    "albums_title_lower_key",
                    'duplicate key value violates unique constraint "albums_title_lower_key"',
                )

    def _check_artist_exists(self, artist_id: int) -> None:
        if artist_id not in self._artists:
            raise _violation(
                asyncpg.exceptions.ForeignKeyViolationError,
                "albums_artist_id_fkey",
                'insert or update on table "albums" violates foreign key constraint "albums_artist_id_fkey"',
            )

    # statements

    def _health(self) -> list[dict[str, Any]]:
        return [{"current_time": datetime.now(timezone.utc), "postgres_version": "PostgreSQL 16.2 (fake)"}]

    def _list_artists(self) -> list[dict[str, Any]]:
        return [dict(r) for r in sorted(self._artists.values(), key=lambda r: r["name"])]

    def _find_artist_by_name(self, name: str) -> list[dict[str, Any]]:
        return [dict(r) for r in self._artists.values() if r["name"].lower() == name.lower()][:1]

    def _artist_name_taken(self, name: str, exclude_id: int | None) -> list[dict[str, Any]]:
        if self._pool.blind_prechecks:
            return []
        for row in self._artists.values():
            if row["id"] != exclude_id and row["name"].lower() == name.lower():
                return [{"taken": 1}]
        return []

    def _insert_artist(self, name: str, genre: str) -> list[dict[str, Any]]:
        self._check_artist_name(name, None)
        row = {"id": self._next_id("artists"), "name": name, "genre": genre}
        self._artists[row["id"]] = row
        return [dict(row)]

    def _update_artist(self, artist_id: int, name: str | None, genre: str | None) -> list[dict[str, Any]]:
        row = self._artists.get(artist_id)
        if row is None:
            return []
        if name is not None:
            self._check_artist_name(name, artist_id)
        row.update(
            name=name if name is not None else row["name"],
            genre=genre if genre is not None else row["genre"],
        )
        return [dict(row)]

    def _list_albums(self) -> list[dict[str, Any]]:
        return [dict(r) for r in sorted(self._albums.values(), key=lambda r: r["title"])]

    def _list_albums_by_artist(self, artist_id: int) -> list[dict[str, Any]]:
        rows = [r for r in self._albums.values() if r["artist_id"] == artist_id]
        return [dict(r) for r in sorted(rows, key=lambda r: (r["release_year"], r["title"]))]

    def _album_title_taken(self, title: str, exclude_id: int | None) -> list[dict[str, Any]]:
        if self._pool.blind_prechecks:
            return []
        for row in self._albums.values():
            if row["id"] != exclude_id and row["title"].lower() == title.lower():
                return [{"taken": 1}]
        return []

    def _insert_album(self, title: str, year: int, artist_id: int) -> list[dict[str, Any]]:
        self._check_album_title(title, None)
        self._check_artist_exists(artist_id)
        row = {"id": self._next_id("albums"), "title": title, "release_year": year, "artist_id": artist_id}
        self._albums[row["id"]] = row
        return [dict(row)]

    def _update_album(
        self,
        album_id: int,
        title: str | None,
        year: int | None,
        artist_id: int | None,
    ) -> list[dict[str, Any]]:
        row = self._albums.get(album_id)
        if row is None:
            return []
        if title is not None:
            self._check_album_title(title, album_id)
        if artist_id is not None:
            self._check_artist_exists(artist_id)
        row.update(
            title=title if title is not None else row["title"],
            release_year=year if year is not None else row["release_year"],
            artist_id=artist_id if artist_id is not None else row["artist_id"],
        )
        return [dict(row)]

    def _collection(self) -> list[dict[str, Any]]:
        result = []
        for artist in sorted(self._artists.values(), key=lambda r: r["name"]):
            albums = [r for r in self._albums.values() if r["artist_id"] == artist["id"]]
            albums.sort(key=lambda r: (r["release_year"], r["title"]))
            result.append({**artist, "albums": json.dumps(albums)})
        return result


class FakePool:
    """
    Tracks how many connections are out so tests can assert they all come
    back, including on failure paths.
    """

    def __init__(self, *, max_size: int = 5) -> None:
        self.max_size = max_size
        self.tables: dict[str, dict[int, dict[str, Any]]] = {"artists": {}, "albums": {}}
        self.sequences = {"artists": 0, "albums": 0}
        self.statements: list[str] = []
        self.in_use = 0
        self.acquired = 0
        self.transactions = 0
        self.rollbacks = 0
        self.closed = False
        self.unreachable = False
        self.broken = False
        # Simulates a concurrent writer committing between pre-check and write.
        self.blind_prechecks = False

    @asynccontextmanager
    async def acquire(self, *, timeout: float | None = None):
        if self.unreachable:
            raise ConnectionRefusedError(111, "Connect call failed ('127.0.0.1', 5432)")
        if self.in_use >= self.max_size:
            raise TimeoutError("timed out waiting for a free connection")
        self.in_use += 1
        self.acquired += 1
        try:
            yield FakeConnection(self)
        finally:
            self.in_use -= 1

    async def close(self) -> None:
        self.closed = True
