"""
picasort.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings for provisioning, the API and logging.
- Keep the provisioning target (role, database, extensions) in one place.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PICASORT_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "picasort"
    log_level: str = "INFO"
    # JSON lines for log collectors; set false for a readable console format.
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Server-level connection used for provisioning (superuser on the maintenance DB).
    db_host: str = "localhost"
    db_port: int = 5432
    db_admin_user: str = "postgres"
    db_admin_password: str | None = Field(default=None, repr=False)
    db_maintenance_name: str = "postgres"

    # Provisioning target.
    db_user: str = "picasort"
    db_name: str = "picasort"
    db_password_file: str = "/run/secrets/db_password"
    db_extensions: tuple[str, ...] = ("postgis", "vector")

    # Application database for the API; when unset the API connects as the
    # provisioned role with the password from `db_password_file`.
    database_url: str | None = Field(default=None, repr=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Secrets (admin password, DSNs with credentials) are excluded from repr so that
# `log.info("startup", settings=...)` style calls cannot leak them.
