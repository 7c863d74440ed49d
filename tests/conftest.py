"""
tests.conftest

In-memory stand-in for a PostgreSQL server, enough to exercise provisioning.

The fake understands the catalog lookups and DDL that the bootstrap issues and keeps
roles/databases/extensions between connections, so repeated runs can be tested.
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

from picasort.provisioning.statements import PASSWORD_SETTING, ROLE_SETTING


class FakeResult:
    def __init__(self, rows: list[tuple[Any, ...]]) -> None:
        self._rows = rows

    def scalar(self) -> Any:
        return self._rows[0][0] if self._rows else None

    def __iter__(self):
        return iter(self._rows)


class FakeConnection:
    dialect = SimpleNamespace(name="postgresql")

    def __init__(self, server: FakeServer, database: str) -> None:
        self._server = server
        self._database = database
        self._settings: dict[str, str] = {}

    async def execute(self, clause: Any, params: dict[str, Any] | None = None) -> FakeResult:
        sql = str(clause)
        params = params or {}
        self._server.executed.append((self._database, sql, dict(params)))
        for fragment in self._server.fail_on:
            if fragment in sql:
                raise ProgrammingError(sql, params, Exception(f'error near "{fragment}"'))
        return FakeResult(self._dispatch(sql, params))

    def _dispatch(self, sql: str, params: dict[str, Any]) -> list[tuple[Any, ...]]:
        s = self._server
        if "FROM pg_roles" in sql:
            return [(1,)] if params["name"] in s.roles else []
        if "FROM pg_database" in sql:
            return [(1,)] if params["name"] in s.databases else []
        if "set_config" in sql:
            name = ROLE_SETTING if ROLE_SETTING in sql else PASSWORD_SETTING
            self._settings[name] = params.get("role", params.get("password", ""))
            return [(self._settings[name],)]
        if sql.startswith("DO $bootstrap$"):
            role = self._settings[ROLE_SETTING]
            if role in s.roles:
                raise ProgrammingError(sql, {}, Exception(f'role "{role}" already exists'))
            s.roles[role] = self._settings[PASSWORD_SETTING]
            return []
        if sql.startswith("CREATE DATABASE"):
            name, owner = re.match(r'CREATE DATABASE "(.+)" OWNER "(.+)"', sql).groups()
            if name in s.databases:
                raise ProgrammingError(sql, {}, Exception(f'database "{name}" already exists'))
            s.databases[name] = owner
            s.extensions.setdefault(name, set())
            return []
        if sql.startswith("GRANT ALL PRIVILEGES"):
            db, role = re.match(r'GRANT ALL PRIVILEGES ON DATABASE "(.+)" TO "(.+)"', sql).groups()
            s.grants.add((role, db))
            return []
        if sql.startswith("CREATE EXTENSION IF NOT EXISTS"):
            ext = re.match(r'CREATE EXTENSION IF NOT EXISTS "(.+)"', sql).group(1)
            s.extensions.setdefault(self._database, set()).add(ext)
            return []
        if "FROM pg_extension" in sql:
            return [(ext,) for ext in sorted(s.extensions.get(self._database, set()))]
        if "has_database_privilege" in sql:
            return [((params["role"], params["db"]) in s.grants,)]
        if sql == "SELECT 1":
            return [(1,)]
        raise AssertionError(f"unexpected SQL: {sql}")


class FakeServer:
    def __init__(self) -> None:
        self.roles: dict[str, str] = {}
        self.databases: dict[str, str] = {"postgres": "postgres"}
        self.extensions: dict[str, set[str]] = {"postgres": {"plpgsql"}}
        self.grants: set[tuple[str, str]] = set()
        self.executed: list[tuple[str, str, dict[str, Any]]] = []
        # Any statement containing one of these fragments fails.
        self.fail_on: list[str] = []
        # Simulates a server that is not accepting TCP connections yet.
        self.listening = True

    def connector(self, database: str):
        @asynccontextmanager
        async def connect() -> AsyncIterator[FakeConnection]:
            self._accept()
            if database not in self.databases:
                raise OperationalError(
                    "connect", {}, Exception(f'database "{database}" does not exist')
                )
            yield FakeConnection(self, database)

        return connect

    def login_connector(self, role: str, password: str, database: str):
        @asynccontextmanager
        async def connect() -> AsyncIterator[FakeConnection]:
            self._accept()
            if self.roles.get(role) != password:
                raise OperationalError(
                    "connect", {}, Exception(f'password authentication failed for "{role}"')
                )
            yield FakeConnection(self, database)

        return connect

    def _accept(self) -> None:
        # asyncpg lets the socket error through unwrapped.
        if not self.listening:
            raise ConnectionRefusedError(111, "Connect call failed ('127.0.0.1', 5432)")

    def statements_for(self, database: str) -> list[str]:
        return [sql for db, sql, _ in self.executed if db == database]


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer()
