"""
picasort.api.deps

FastAPI dependency wiring.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from picasort.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app is built with an explicit Settings instance; see `create_app`.
    return request.app.state.settings


def engine_from_app(request: Request) -> AsyncEngine:
    return request.app.state.engine


async def db_connection(
    engine: AsyncEngine = Depends(engine_from_app),
) -> AsyncIterator[AsyncConnection]:
    async with engine.connect() as conn:
        yield conn


# --- Module Notes -----------------------------------------------------------
# Tests replace `db_connection` through `app.dependency_overrides` to run `/readyz`
# without a server.
