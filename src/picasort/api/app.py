"""
picasort.api.app

FastAPI app factory for the Picasort service.

Responsibilities:
- Build the FastAPI application and register routers.
- Create and dispose the application DB engine, connected as the provisioned role.
"""

from __future__ import annotations

from fastapi import FastAPI
from sqlalchemy.engine import URL

from picasort import __version__
from picasort.api.routers.health import router as health_router
from picasort.db.session import app_url, create_engine
from picasort.observability.logging import configure_logging, get_logger
from picasort.provisioning.secrets import read_secret
from picasort.settings import Settings

log = get_logger(__name__)


def database_url(settings: Settings) -> URL:
    if settings.database_url:
        return app_url(settings)
    return app_url(settings, password=read_secret(settings.db_password_file))


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    app = FastAPI(title="Picasort", version=__version__)
    app.state.settings = settings
    app.include_router(health_router, tags=["health"])

    @app.on_event("startup")
    async def _startup() -> None:
        url = database_url(settings)
        log.info("startup", env=settings.env, db_user=url.username, db_name=url.database)
        app.state.engine = create_engine(url)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()
        log.info("shutdown")

    return app


# --- Module Notes -----------------------------------------------------------
# A missing or empty secret file fails startup with `SecretFileError`; the engine
# itself connects lazily, so an unreachable server only shows up on `/readyz`.
