"""Database connection URLs.

``DATABASE_URL`` wins when set; otherwise the URL is assembled from
``PG_HOST``, ``PG_PORT``, ``PG_USER``, ``PG_PASSWORD`` and ``PG_DATABASE``.
The same database is reached through two drivers: psycopg2 for Alembic and
asyncpg for the application.
"""

import os

ASYNC_DRIVER = "postgresql+asyncpg"
SYNC_DRIVER = "postgresql"

_PART_DEFAULTS = {
    "PG_HOST": "localhost",
    "PG_PORT": "5432",
    "PG_USER": "mockexam",
    "PG_PASSWORD": "mockexam",
    "PG_DATABASE": "mockexam",
}


def _base_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    parts = {name: os.getenv(name, default) for name, default in _PART_DEFAULTS.items()}
    return (
        f"{SYNC_DRIVER}://{parts['PG_USER']}:{parts['PG_PASSWORD']}"
        f"@{parts['PG_HOST']}:{parts['PG_PORT']}/{parts['PG_DATABASE']}"
    )


def _with_driver(url: str, driver: str) -> str:
    scheme, sep, rest = url.partition("://")
    if not sep:
        raise ValueError(f"Malformed database URL: {url!r}")
    if scheme in (SYNC_DRIVER, ASYNC_DRIVER, "postgres"):
        scheme = driver
    return f"{scheme}://{rest}"


def get_sync_url() -> str:
    """psycopg2 URL used by Alembic migrations."""
    return _with_driver(_base_url(), SYNC_DRIVER)


def get_async_url() -> str:
    """asyncpg URL used by the application engine."""
    return _with_driver(_base_url(), ASYNC_DRIVER)
