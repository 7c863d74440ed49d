"""
picasort.provisioning.__main__

Entrypoint for provisioning via `python -m picasort.provisioning`.

Responsibilities:
- Read the role password from the secret file.
- Run the bootstrap (or print it with --dry-run) and optionally verify it.
- Map provisioning failures to a non-zero exit status.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from picasort.observability.logging import configure_logging, get_logger
from picasort.provisioning.bootstrap import run_bootstrap, target_from_settings
from picasort.provisioning.errors import ProvisioningError, VerificationError
from picasort.provisioning.secrets import read_secret
from picasort.provisioning.statements import render_plan
from picasort.provisioning.verify import verify_bootstrap
from picasort.settings import Settings, get_settings

log = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="picasort-bootstrap",
        description="Create the Picasort role and database and enable its extensions.",
    )
    parser.add_argument(
        "--secret-file",
        default=None,
        help="file holding the role password (default: PICASORT_DB_PASSWORD_FILE)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="print the SQL that would run and exit without connecting",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="check login, privileges and extensions after provisioning",
    )
    return parser.parse_args(argv)


async def provision(settings: Settings, args: argparse.Namespace) -> None:
    password = read_secret(args.secret_file or settings.db_password_file)
    target = target_from_settings(settings, password=password)

    if args.dry_run:
        print(render_plan(target))
        return

    await run_bootstrap(settings, password=password)

    if args.verify:
        report = await verify_bootstrap(settings, target=target)
        if not report.ok:
            raise VerificationError(
                "verification failed: "
                f"login={report.role_can_login} privileges={report.has_privileges} "
                f"missing_extensions={list(report.missing_extensions)}"
            )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    try:
        asyncio.run(provision(settings, args))
    except ProvisioningError as exc:
        log.error("provisioning.failed", error=str(exc), kind=type(exc).__name__)
        return 1
    except ValueError as exc:
        # Invalid role/database/extension names from configuration.
        log.error("provisioning.invalid_config", error=str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())


# --- Module Notes -----------------------------------------------------------
# Exit status is the contract with the container runtime: 0 lets dependent
# services start, 1 stops the stack with the failing step in the last log line.
