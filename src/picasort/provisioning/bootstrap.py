"""
picasort.provisioning.bootstrap

Database bootstrap routine.

Responsibilities:
- Ensure the application role exists (created WITH LOGIN and the secret password).
- Ensure the application database exists, owned by that role, with full privileges.
- Enable the configured extensions (postgis, vector) on the application database.
- Stop at the first failing statement (no retries, no rollback of earlier steps).
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.pool import NullPool

from picasort.db.session import admin_url, create_engine
from picasort.observability.logging import get_logger
from picasort.provisioning import statements
from picasort.provisioning.errors import BootstrapStepError
from picasort.provisioning.statements import BootstrapTarget, Statement
from picasort.settings import Settings

log = get_logger(__name__)

ConnectionFactory = Callable[[], AbstractAsyncContextManager[AsyncConnection]]


@dataclass(frozen=True, slots=True)
class BootstrapReport:
    role_created: bool
    database_created: bool
    extensions: tuple[str, ...]
    statements_executed: int


class DatabaseBootstrapper:
    """
    Runs the provisioning plan over two connections:
    - `admin_connect`: superuser on the maintenance DB (role/database DDL)
    - `target_connect`: superuser on the application DB (extensions)

    Each statement runs on the connection named by `Statement.database`. Both must
    be in autocommit mode; CREATE DATABASE cannot run in a transaction.
    """

    def __init__(
        self,
        *,
        target: BootstrapTarget,
        admin_connect: ConnectionFactory,
        target_connect: ConnectionFactory,
    ) -> None:
        self._target = target
        self._factories: dict[str, ConnectionFactory] = {
            "admin": admin_connect,
            "target": target_connect,
        }
        self._open: dict[str, AsyncConnection] = {}
        self._executed = 0

    async def run(self) -> BootstrapReport:
        t = self._target
        log.info("bootstrap.start", role=t.role, database=t.database)

        async with self._connection("admin"):
            role_created = await self._ensure_role()
            database_created = await self._ensure_database()
            await self._execute(statements.grant_privileges(t))

        log.info("bootstrap.extensions", database=t.database, extensions=list(t.extensions))
        extension_stmts = [statements.enable_extension(ext) for ext in t.extensions]
        for database in dict.fromkeys(stmt.database for stmt in extension_stmts):
            async with self._connection(database):
                for stmt in extension_stmts:
                    if stmt.database == database:
                        await self._execute(stmt)

        report = BootstrapReport(
            role_created=role_created,
            database_created=database_created,
            extensions=t.extensions,
            statements_executed=self._executed,
        )
        log.info(
            "bootstrap.complete",
            role_created=report.role_created,
            database_created=report.database_created,
            statements=report.statements_executed,
        )
        return report

    @asynccontextmanager
    async def _connection(self, database: str) -> AsyncIterator[AsyncConnection]:
        # Statement errors are already BootstrapStepError by the time they reach
        # here; what is left comes from opening (or closing) the connection. A
        # server that is not listening yet surfaces as a bare OSError from asyncpg.
        step = f"connect:{database}"
        try:
            async with self._factories[database]() as conn:
                self._open[database] = conn
                try:
                    yield conn
                finally:
                    del self._open[database]
        except (SQLAlchemyError, OSError) as exc:
            message = _error_message(exc)
            log.error("bootstrap.connect_failed", step=step, error=message)
            raise BootstrapStepError(step, message) from None

    async def _ensure_role(self) -> bool:
        if await self._lookup(statements.role_exists(self._target)):
            log.info("bootstrap.role_exists", role=self._target.role)
            return False
        for stmt in statements.create_role(self._target):
            await self._execute(stmt)
        log.info("bootstrap.role_created", role=self._target.role)
        return True

    async def _ensure_database(self) -> bool:
        if await self._lookup(statements.database_exists(self._target)):
            log.info("bootstrap.database_exists", database=self._target.database)
            return False
        await self._execute(statements.create_database(self._target))
        log.info("bootstrap.database_created", database=self._target.database)
        return True

    async def _lookup(self, stmt: Statement) -> bool:
        result = await self._execute(stmt)
        return result.scalar() is not None

    async def _execute(self, stmt: Statement):
        conn = self._open.get(stmt.database)
        if conn is None:
            raise RuntimeError(f"{stmt.step} needs an open {stmt.database} connection")
        try:
            result = await conn.execute(text(stmt.sql), dict(stmt.params))
        except SQLAlchemyError as exc:
            message = _error_message(exc)
            log.error("bootstrap.step_failed", step=stmt.step, error=message)
            raise BootstrapStepError(stmt.step, message) from None
        self._executed += 1
        return result


def _error_message(exc: BaseException) -> str:
    # The driver's message only; str() of a SQLAlchemy error includes the SQL and
    # its parameters.
    if isinstance(exc, SQLAlchemyError):
        orig = getattr(exc, "orig", None)
        return str(orig) if orig is not None else exc.__class__.__name__
    return str(exc) or exc.__class__.__name__


def target_from_settings(settings: Settings, *, password: str) -> BootstrapTarget:
    return BootstrapTarget(
        role=settings.db_user,
        database=settings.db_name,
        password=password,
        extensions=tuple(settings.db_extensions),
    )


async def run_bootstrap(settings: Settings, *, password: str) -> BootstrapReport:
    target = target_from_settings(settings, password=password)

    # NullPool: each connection is closed on release, so session settings die with it.
    admin_engine = create_engine(
        admin_url(settings), isolation_level="AUTOCOMMIT", poolclass=NullPool
    )
    target_engine = create_engine(
        admin_url(settings, database=settings.db_name),
        isolation_level="AUTOCOMMIT",
        poolclass=NullPool,
    )
    try:
        bootstrapper = DatabaseBootstrapper(
            target=target,
            admin_connect=admin_engine.connect,
            target_connect=target_engine.connect,
        )
        return await bootstrapper.run()
    finally:
        await admin_engine.dispose()
        await target_engine.dispose()


# --- Module Notes -----------------------------------------------------------
# The database step is guarded by a pg_database lookup like the role step, so a
# second run against a provisioned server succeeds and changes nothing.
