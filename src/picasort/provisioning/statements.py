"""
picasort.provisioning.statements

SQL for each provisioning step.

Responsibilities:
- Describe the bootstrap target (role, database, extensions, password).
- Build the statements for each step with safe identifier quoting.
- Render the plan for dry runs without exposing the password.

Notes:
- DDL such as CREATE ROLE does not accept bind parameters. The password is handed
  to the server through `set_config()` and quoted there with `format('%L')`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from sqlalchemy.dialects.postgresql.asyncpg import PGDialect_asyncpg

# NAMEDATALEN - 1
MAX_IDENTIFIER_BYTES = 63

# Session-level settings used to pass values into the CREATE ROLE DO block.
ROLE_SETTING = "picasort.bootstrap_role"
PASSWORD_SETTING = "picasort.bootstrap_password"

# asyncpg uses numeric_dollar binds, so identifiers are not %-escaped.
_preparer = PGDialect_asyncpg().identifier_preparer


def quote_ident(name: str) -> str:
    # Always quoted, so mixed case and reserved words are taken literally.
    return _preparer.quote_identifier(name)


def validate_identifier(name: str, *, kind: str) -> str:
    if not name:
        raise ValueError(f"{kind} name must not be empty")
    if "\x00" in name:
        raise ValueError(f"{kind} name must not contain NUL bytes")
    if len(name.encode("utf-8")) > MAX_IDENTIFIER_BYTES:
        raise ValueError(f"{kind} name {name!r} exceeds {MAX_IDENTIFIER_BYTES} bytes")
    return name


@dataclass(frozen=True, slots=True)
class BootstrapTarget:
    role: str
    database: str
    password: str = field(repr=False)
    extensions: tuple[str, ...] = ("postgis", "vector")

    def __post_init__(self) -> None:
        validate_identifier(self.role, kind="role")
        validate_identifier(self.database, kind="database")
        for ext in self.extensions:
            validate_identifier(ext, kind="extension")


@dataclass(frozen=True, slots=True)
class Statement:
    step: str
    sql: str
    params: Mapping[str, Any] = field(default_factory=dict)
    # Which connection runs it: the maintenance DB or the provisioned DB.
    database: Literal["admin", "target"] = "admin"
    secret_params: frozenset[str] = frozenset()
    # Lookups only read catalogs; they gate the step that follows them.
    lookup: bool = False

    def render(self) -> str:
        where = "maintenance database" if self.database == "admin" else "target database"
        lines = [f"-- {self.step} (on {where})"]
        for key, value in self.params.items():
            shown = "********" if key in self.secret_params else repr(value)
            lines.append(f"--   :{key} = {shown}")
        lines.append(f"{self.sql};")
        return "\n".join(lines)


def role_exists(target: BootstrapTarget) -> Statement:
    return Statement(
        step="check_role",
        sql="SELECT 1 FROM pg_roles WHERE rolname = :name",
        params={"name": target.role},
        lookup=True,
    )


def create_role(target: BootstrapTarget) -> list[Statement]:
    return [
        Statement(
            step="create_role",
            sql=f"SELECT set_config('{ROLE_SETTING}', :role, false)",
            params={"role": target.role},
        ),
        Statement(
            step="create_role",
            sql=f"SELECT set_config('{PASSWORD_SETTING}', :password, false)",
            params={"password": target.password},
            secret_params=frozenset({"password"}),
        ),
        Statement(
            step="create_role",
            sql=(
                "DO $bootstrap$ BEGIN "
                "EXECUTE format('CREATE ROLE %I WITH LOGIN PASSWORD %L', "
                f"current_setting('{ROLE_SETTING}'), current_setting('{PASSWORD_SETTING}')); "
                "END $bootstrap$"
            ),
        ),
        Statement(
            step="create_role",
            sql=f"SELECT set_config('{PASSWORD_SETTING}', '', false)",
        ),
    ]


def database_exists(target: BootstrapTarget) -> Statement:
    return Statement(
        step="check_database",
        sql="SELECT 1 FROM pg_database WHERE datname = :name",
        params={"name": target.database},
        lookup=True,
    )


def create_database(target: BootstrapTarget) -> Statement:
    return Statement(
        step="create_database",
        sql=f"CREATE DATABASE {quote_ident(target.database)} OWNER {quote_ident(target.role)}",
    )


def grant_privileges(target: BootstrapTarget) -> Statement:
    return Statement(
        step="grant_privileges",
        sql=(
            f"GRANT ALL PRIVILEGES ON DATABASE {quote_ident(target.database)} "
            f"TO {quote_ident(target.role)}"
        ),
    )


def enable_extension(name: str) -> Statement:
    return Statement(
        step=f"enable_extension:{name}",
        sql=f"CREATE EXTENSION IF NOT EXISTS {quote_ident(name)}",
        database="target",
    )


def plan(target: BootstrapTarget) -> list[Statement]:
    """Every statement a run against a fresh server executes, in order."""

    stmts: list[Statement] = [role_exists(target), *create_role(target)]
    stmts += [database_exists(target), create_database(target), grant_privileges(target)]
    stmts += [enable_extension(ext) for ext in target.extensions]
    return stmts


def render_plan(target: BootstrapTarget) -> str:
    return "\n\n".join(stmt.render() for stmt in plan(target))


# --- Module Notes -----------------------------------------------------------
# Builders return plain data and never touch a connection, so `--dry-run` and the
# tests share the exact SQL the bootstrap executes.
