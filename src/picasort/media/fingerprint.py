"""
picasort.media.fingerprint

Content fingerprints for image files.

The fingerprint is the SHA-256 of the file bytes, lowercase hex. Two files with the
same fingerprint are byte-identical copies regardless of name or storage location.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

CHUNK_SIZE = 8192


def file_fingerprint(path: str | Path, *, chunk_size: int = CHUNK_SIZE) -> str:
    # Missing or unreadable files raise OSError; there is no fingerprint for them.
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        while chunk := fh.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()


# --- Module Notes -----------------------------------------------------------
# Fingerprints identify duplicate files regardless of name or location.
