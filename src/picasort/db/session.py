"""
picasort.db.session

Async SQLAlchemy engine helpers.

Responsibilities:
- Build connection URLs for the maintenance DB (as the superuser), for the
  provisioned target DB (as the superuser or the role) and for the API.
- Create async engines with the isolation level each caller needs.
"""

from __future__ import annotations

from typing import Any, Literal

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import Pool

from picasort.settings import Settings

DRIVER = "postgresql+asyncpg"


def admin_url(settings: Settings, *, database: str | None = None) -> URL:
    # Superuser connection; defaults to the maintenance database.
    return URL.create(
        DRIVER,
        username=settings.db_admin_user,
        password=settings.db_admin_password,
        host=settings.db_host,
        port=settings.db_port,
        database=database or settings.db_maintenance_name,
    )


def role_url(settings: Settings, *, password: str) -> URL:
    return URL.create(
        DRIVER,
        username=settings.db_user,
        password=password,
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
    )


def app_url(settings: Settings, *, password: str | None = None) -> URL:
    if settings.database_url:
        return make_url(settings.database_url)
    if password is None:
        raise ValueError("database_url is unset and no role password was given")
    # The API runs as the provisioned role, never as the superuser.
    return role_url(settings, password=password)


def create_engine(
    url: URL | str,
    *,
    isolation_level: Literal["AUTOCOMMIT", "READ COMMITTED"] | None = None,
    poolclass: type[Pool] | None = None,
) -> AsyncEngine:
    kwargs: dict[str, Any] = {"pool_pre_ping": True}
    if poolclass is not None:
        kwargs["poolclass"] = poolclass
    if isolation_level is not None:
        # CREATE DATABASE refuses to run inside a transaction block.
        kwargs["isolation_level"] = isolation_level
    return create_async_engine(url, **kwargs)


# --- Module Notes -----------------------------------------------------------
# Provisioning engines are short-lived and disposed by the caller; the API keeps
# one engine for the process lifetime on `app.state`.
