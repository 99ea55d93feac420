"""
Environment-driven settings.

Every value is read through a small accessor so tests can monkeypatch the
environment without reloading modules.
"""

from __future__ import annotations

import os
import ssl
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

REQUIRED_DB_VARS = ("DB_HOST", "DB_NAME", "DB_USER", "DB_PASSWORD")

DEFAULT_DB_PORT = 5432
DEFAULT_POOL_MIN_SIZE = 1
DEFAULT_POOL_MAX_SIZE = 5
DEFAULT_COMMAND_TIMEOUT = 30
DEFAULT_ACQUIRE_TIMEOUT = 10
DEFAULT_PORT = 3000


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str | None:
    url = _env("DATABASE_URL")
    if not url:
        return None
    return _sanitize_database_url(url)


def database_params() -> dict:
    """
    Connection keyword arguments for asyncpg.

    DATABASE_URL wins when set; otherwise the individual DB_* variables are
    required and every missing one is reported at once.
    """
    url = database_url()
    if url is not None:
        parts = urlsplit(url)
        return {
            "dsn": url,
            "host": parts.hostname,
            "database": parts.path.lstrip("/") or None,
        }

    missing = [name for name in REQUIRED_DB_VARS if not _env(name)]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    return {
        "host": _env("DB_HOST"),
        "port": _env_int("DB_PORT", DEFAULT_DB_PORT),
        "database": _env("DB_NAME"),
        "user": _env("DB_USER"),
        "password": _env("DB_PASSWORD"),
    }


def database_ssl() -> ssl.SSLContext | bool:
    """
    `require` encrypts without verifying the server certificate, which is
    what managed Postgres hosts with self-signed certs need.
    """
    mode = _env("DB_SSL", "require").lower()
    if mode in ("disable", "false", "off", "0"):
        return False

    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def pool_min_size() -> int:
    return max(0, _env_int("DB_POOL_MIN_SIZE", DEFAULT_POOL_MIN_SIZE))


def pool_max_size() -> int:
    return max(1, pool_min_size(), _env_int("DB_POOL_MAX_SIZE", DEFAULT_POOL_MAX_SIZE))


def command_timeout() -> int:
    return _env_int("DB_COMMAND_TIMEOUT", DEFAULT_COMMAND_TIMEOUT)


def acquire_timeout() -> int:
    return _env_int("DB_ACQUIRE_TIMEOUT", DEFAULT_ACQUIRE_TIMEOUT)


def is_production() -> bool:
    return _env("ENVIRONMENT").lower() == "production" or bool(_env("RENDER"))


def bind_host() -> str:
    return "0.0.0.0" if is_production() else "localhost"


def port() -> int:
    return _env_int("PORT", DEFAULT_PORT)


def cors_origins() -> list[str]:
    origins = [o.strip() for o in _env("CORS_ORIGINS", "*").split(",") if o.strip()]
    return origins or ["*"]


def log_level() -> str:
    return _env("LOG_LEVEL", "INFO").upper() or "INFO"
