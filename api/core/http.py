"""
JSON envelope and error-to-status mapping shared by every router.

Envelope: {"status", "message", "data"?, "timestamp"}.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import errors
from .db import Database

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[errors.RepositoryError], int] = {
    errors.NoFieldsProvided: status.HTTP_400_BAD_REQUEST,
    errors.InvalidInput: status.HTTP_400_BAD_REQUEST,
    errors.DuplicateName: status.HTTP_409_CONFLICT,
    errors.DuplicateTitle: status.HTTP_409_CONFLICT,
    errors.ArtistNotFound: status.HTTP_404_NOT_FOUND,
    errors.ConstraintViolation: status.HTTP_409_CONFLICT,
    errors.StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def envelope(status_: str, message: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"status": status_, "message": message}
    if data:
        body["data"] = data
    body["timestamp"] = datetime.now(timezone.utc).isoformat()
    return body


def success(message: str, data: dict[str, Any] | None = None, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(envelope("success", message, data)))


def failure(message: str, data: dict[str, Any] | None = None, *, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(envelope("error", message, data)))


def not_found(message: str) -> JSONResponse:
    return failure(message, status_code=status.HTTP_404_NOT_FOUND)


def get_db(request: Request) -> Database:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise errors.StoreUnavailable("Database is not initialized.")
    return db


def _error_data(exc: errors.RepositoryError) -> dict[str, Any]:
    data: dict[str, Any] = {"code": exc.code}
    if exc.field is not None:
        data["field"] = exc.field
    if isinstance(exc, errors.NoFieldsProvided):
        data["allowed"] = list(exc.allowed)
    return data


async def repository_error_handler(request: Request, exc: errors.RepositoryError) -> JSONResponse:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for kind in type(exc).__mro__:
        if kind in ERROR_STATUS:
            status_code = ERROR_STATUS[kind]
            break

    if isinstance(exc, errors.StoreUnavailable):
        logger.exception("request_failed path=%s detail=%s", request.url.path, exc.detail, exc_info=exc)
    else:
        logger.info("request_rejected path=%s code=%s", request.url.path, exc.code)

    return failure(exc.message, _error_data(exc), status_code=status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    invalid: list[str] = []
    required: list[str] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        name = ".".join(loc) or "body"
        bucket = required if err.get("type") == "missing" else invalid
        if name not in bucket:
            bucket.append(name)

    logger.info("request_invalid path=%s required=%s invalid=%s", request.url.path, required, invalid)
    data: dict[str, Any] = {}
    if required:
        data["required"] = required
    if invalid:
        data["invalid"] = invalid
    return failure(
        "Invalid or missing fields.",
        data,
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(errors.RepositoryError, repository_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
