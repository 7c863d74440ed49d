"""
picasort.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Liveness check (`/healthz`).
- Readiness check (`/readyz`): DB connectivity plus, on PostgreSQL, the presence of
  the extensions provisioning is expected to have enabled.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from picasort.api.deps import db_connection, settings_dep
from picasort.provisioning.verify import missing_extensions
from picasort.settings import Settings

router = APIRouter()


class ReadinessResponse(BaseModel):
    status: str
    missing_extensions: list[str] = Field(default_factory=list)


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", response_model=ReadinessResponse)
async def readyz(
    conn: AsyncConnection = Depends(db_connection),
    settings: Settings = Depends(settings_dep),
) -> ReadinessResponse:
    await conn.execute(text("SELECT 1"))
    if conn.dialect.name != "postgresql":
        return ReadinessResponse(status="ready")

    missing = await missing_extensions(conn, settings.db_extensions)
    return ReadinessResponse(
        status="degraded" if missing else "ready",
        missing_extensions=list(missing),
    )


# --- Module Notes -----------------------------------------------------------
# Non-PostgreSQL databases (SQLite in tests) skip the extension check and report
# ready once `SELECT 1` succeeds.
