"""
Async database access (raw SQL) using asyncpg.

`Database` owns the connection pool. FastAPI creates it on startup, keeps it
on `app.state.db` and closes it on shutdown (see `api/main.py`). Services
receive it as an argument, so tests can hand in a fake pool.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Error translation happens here and only here: unique / foreign-key failures
become `ConstraintViolation`, values the store refuses to encode or cast
become `InvalidInput`, everything else the driver or the network throws
becomes `StoreUnavailable`.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import asyncpg

from . import config
from .errors import ConstraintViolation, InvalidInput, StoreUnavailable

logger = logging.getLogger(__name__)

# Largest value a bigint column or parameter accepts.
MAX_BIGINT = 2**63 - 1

# The server-side SQLSTATE class 22 error and the client-side encoder
# rejection share the name DataError; the latter subclasses InterfaceError.
_INPUT_REJECTED = (
    asyncpg.exceptions.DataError,
    asyncpg.exceptions._base.DataError,
)

_UNAVAILABLE = (
    asyncpg.exceptions.PostgresError,
    asyncpg.exceptions.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def _constraint_name(exc: Exception) -> str | None:
    return getattr(exc, "constraint_name", None)


class Database:
    def __init__(
        self,
        pool: Any,
        *,
        acquire_timeout: float | None = None,
        host: str | None = None,
        database: str | None = None,
    ) -> None:
        self._pool = pool
        self._acquire_timeout = acquire_timeout
        self.host = host
        self.database = database

    @property
    def pool(self) -> Any:
        return self._pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Borrow one connection for the duration of the block.

        The pool gets it back on every exit path; store errors raised inside
        the block come out translated.
        """
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                yield conn
        except asyncpg.exceptions.UniqueViolationError as exc:
            raise ConstraintViolation(
                ConstraintViolation.UNIQUE, constraint=_constraint_name(exc), detail=str(exc)
            ) from exc
        except asyncpg.exceptions.ForeignKeyViolationError as exc:
            raise ConstraintViolation(
                ConstraintViolation.FOREIGN_KEY, constraint=_constraint_name(exc), detail=str(exc)
            ) from exc
        except asyncpg.exceptions.IntegrityConstraintViolationError as exc:
            raise ConstraintViolation(
                ConstraintViolation.OTHER, constraint=_constraint_name(exc), detail=str(exc)
            ) from exc
        except _INPUT_REJECTED as exc:
            logger.info("store_rejected_input error=%s", exc)
            raise InvalidInput(str(exc)) from exc
        except _UNAVAILABLE as exc:
            logger.warning("store_unavailable error=%s", exc)
            raise StoreUnavailable(str(exc) or type(exc).__name__) from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        A connection with an open transaction: commit on success, roll back
        on any exception.
        """
        async with self.connection() as conn:
            async with conn.transaction():
                yield conn

    async def close(self) -> None:
        await self._pool.close()
        logger.info("db_pool_closed")


async def create_database() -> Database:
    params = config.database_params()
    host = params.pop("host", None)
    database = params.pop("database", None)
    if "dsn" not in params:
        params["host"] = host
        params["database"] = database

    pool = await asyncpg.create_pool(
        **params,
        ssl=config.database_ssl(),
        min_size=config.pool_min_size(),
        max_size=config.pool_max_size(),
        command_timeout=config.command_timeout(),
    )
    logger.info(
        "db_pool_opened host=%s database=%s max_size=%s",
        host,
        database,
        config.pool_max_size(),
    )
    return Database(
        pool,
        acquire_timeout=config.acquire_timeout(),
        host=host,
        database=database,
    )


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(conn: asyncpg.Connection, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await conn.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(conn: asyncpg.Connection, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await conn.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


HEALTH_SQL = "SELECT now() AS current_time, version() AS postgres_version"


async def check_connection(db: Database) -> dict[str, Any]:
    async with db.connection() as conn:
        row = await fetch_one(conn, HEALTH_SQL)

    row = row or {}
    return {
        "connected": True,
        "current_time": row.get("current_time"),
        "postgres_version": row.get("postgres_version"),
        "host": db.host,
        "database": db.database,
    }
