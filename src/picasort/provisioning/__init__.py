"""
picasort.provisioning

PostgreSQL provisioning for Picasort: application role, database and extensions.

Run as `python -m picasort.provisioning` (or `picasort-bootstrap`) on first
container start.
"""

from picasort.provisioning.bootstrap import BootstrapReport, DatabaseBootstrapper, run_bootstrap
from picasort.provisioning.errors import (
    BootstrapStepError,
    ProvisioningError,
    SecretFileError,
    VerificationError,
)
from picasort.provisioning.statements import BootstrapTarget

__all__ = [
    "BootstrapReport",
    "BootstrapStepError",
    "BootstrapTarget",
    "DatabaseBootstrapper",
    "ProvisioningError",
    "SecretFileError",
    "VerificationError",
    "run_bootstrap",
]

# --- Module Notes -----------------------------------------------------------
# `__main__` is the supported entrypoint; the classes are exported for tests and
# for callers that bring their own connections.
