import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from albums import router as albums_router
from artists import router as artists_router
from collection import router as collection_router
from core import config, db, errors, http
from core.log import configure_logging

logger = logging.getLogger(__name__)


def create_app(database: db.Database | None = None) -> FastAPI:
    """
    Build the application. Pass `database` to skip pool creation (tests).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if database is not None:
            yield
            return

        # One pool per process, owned by the app.
        app.state.db = await db.create_database()
        try:
            yield
        finally:
            await app.state.db.close()

    app = FastAPI(title="Musical Collection API", lifespan=lifespan)
    if database is not None:
        app.state.db = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    http.register_exception_handlers(app)

    app.include_router(collection_router.router, tags=["collection"])
    app.include_router(artists_router.router, tags=["artists"])
    app.include_router(albums_router.router, tags=["albums"])

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "OK!"

    @app.get("/api/health")
    async def health():
        database_ = getattr(app.state, "db", None)
        if database_ is None:
            return http.failure("Database connection failed", status_code=500)
        try:
            status = await db.check_connection(database_)
        except errors.StoreUnavailable as exc:
            logger.exception("health_check_failed detail=%s", exc.detail)
            return http.failure("Database connection failed", status_code=500)
        return http.success("Database connection successful", {"database": status})

    return app


def run() -> None:
    import uvicorn

    configure_logging()
    host, port = config.bind_host(), config.port()
    logger.info("server_starting host=%s port=%s health=http://%s:%s/api/health", host, port, host, port)
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    run()
