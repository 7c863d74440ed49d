"""
picasort.provisioning.verify

Post-conditions of a bootstrap run.

Responsibilities:
- Check the application role can log in with the secret password.
- Check the role holds every database-level privilege on the application DB.
- Report configured extensions missing from the application DB.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.pool import NullPool

from picasort.db.session import admin_url, create_engine, role_url
from picasort.observability.logging import get_logger
from picasort.provisioning.bootstrap import ConnectionFactory
from picasort.provisioning.errors import VerificationError
from picasort.provisioning.statements import BootstrapTarget
from picasort.settings import Settings

log = get_logger(__name__)

# has_database_privilege() with a comma list is true if ANY is held; check each one.
DATABASE_PRIVILEGES = ("CREATE", "CONNECT", "TEMPORARY")


@dataclass(frozen=True, slots=True)
class VerificationReport:
    role_can_login: bool
    has_privileges: bool
    missing_extensions: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.role_can_login and self.has_privileges and not self.missing_extensions


async def installed_extensions(conn: AsyncConnection) -> set[str]:
    rows = await conn.execute(text("SELECT extname FROM pg_extension"))
    return {row[0] for row in rows}


async def missing_extensions(conn: AsyncConnection, wanted: Iterable[str]) -> tuple[str, ...]:
    have = await installed_extensions(conn)
    return tuple(ext for ext in wanted if ext not in have)


async def role_has_privileges(conn: AsyncConnection, *, role: str, database: str) -> bool:
    checks = " AND ".join(
        f"has_database_privilege(CAST(:role AS name), CAST(:db AS text), '{priv}')"
        for priv in DATABASE_PRIVILEGES
    )
    result = await conn.execute(text(f"SELECT {checks}"), {"role": role, "db": database})
    return bool(result.scalar())


class BootstrapVerifier:
    def __init__(
        self,
        *,
        target: BootstrapTarget,
        admin_connect: ConnectionFactory,
        role_connect: ConnectionFactory,
    ) -> None:
        self._target = target
        self._admin_connect = admin_connect
        self._role_connect = role_connect

    async def verify(self) -> VerificationReport:
        t = self._target
        can_login = await self._check_login()

        try:
            async with self._admin_connect() as conn:
                privileged = await role_has_privileges(conn, role=t.role, database=t.database)
                missing = await missing_extensions(conn, t.extensions)
        except (SQLAlchemyError, OSError) as exc:
            raise VerificationError(f"cannot inspect database {t.database}: {exc}") from exc

        report = VerificationReport(
            role_can_login=can_login,
            has_privileges=privileged,
            missing_extensions=missing,
        )
        log.info(
            "verify.complete",
            ok=report.ok,
            role_can_login=report.role_can_login,
            has_privileges=report.has_privileges,
            missing_extensions=list(report.missing_extensions),
        )
        return report

    async def _check_login(self) -> bool:
        try:
            async with self._role_connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            # asyncpg raises OSError directly when nothing is listening.
            log.warning("verify.login_failed", role=self._target.role, error=type(exc).__name__)
            return False
        return True


async def verify_bootstrap(
    settings: Settings, *, target: BootstrapTarget
) -> VerificationReport:
    admin_engine = create_engine(
        admin_url(settings, database=settings.db_name), poolclass=NullPool
    )
    role_engine = create_engine(role_url(settings, password=target.password), poolclass=NullPool)
    try:
        verifier = BootstrapVerifier(
            target=target,
            admin_connect=admin_engine.connect,
            role_connect=role_engine.connect,
        )
        return await verifier.verify()
    finally:
        await admin_engine.dispose()
        await role_engine.dispose()


# --- Module Notes -----------------------------------------------------------
# `missing_extensions` is also used by `/readyz`, which reports the same gaps as a
# "degraded" status instead of failing.
