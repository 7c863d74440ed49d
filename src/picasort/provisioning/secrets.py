"""
picasort.provisioning.secrets

Reading credentials from container secret mounts (e.g. `/run/secrets/<name>`).
"""

from __future__ import annotations

from pathlib import Path

from picasort.provisioning.errors import SecretFileError


def read_secret(path: str | Path) -> str:
    """
    Return the secret stored at `path`.

    Secret files are usually written with a trailing newline by `echo` or editors;
    only line terminators are stripped, other whitespace is part of the value.
    """

    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SecretFileError(str(p), "file not found") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise SecretFileError(str(p), str(exc)) from exc

    value = raw.rstrip("\r\n")
    if not value:
        raise SecretFileError(str(p), "file is empty")
    return value


# --- Module Notes -----------------------------------------------------------
# Only line endings are stripped; surrounding spaces are part of the password.
