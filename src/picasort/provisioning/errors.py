"""
picasort.provisioning.errors

Failure types raised while provisioning the database.
"""

from __future__ import annotations


class ProvisioningError(Exception):
    pass


class SecretFileError(ProvisioningError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot read secret file {path}: {reason}")
        self.path = path
        self.reason = reason


class BootstrapStepError(ProvisioningError):
    """A provisioning statement failed; the run stops at this step."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step} failed: {message}")
        self.step = step
        self.message = message


class VerificationError(ProvisioningError):
    pass


# --- Module Notes -----------------------------------------------------------
# Every failure the CLI expects derives from `ProvisioningError`; anything else is a
# bug and keeps its traceback.
