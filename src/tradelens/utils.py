"""Shared helpers — hashing, timestamps, file names."""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path, PurePath


def sha256_file(path: Path) -> str:
    """Return the hex SHA-256 digest of *path*."""
    h = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def utcnow_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def file_base_name(file_name: str) -> str:
    """Strip the directory and the last extension: ``"a/b.v2.xlsx"`` -> ``"b.v2"``.

    A bare ``".xlsx"`` becomes ``""``; a trailing dot (``"book."``) is kept.
    """
    name = PurePath(file_name).name
    stem, dot, ext = name.rpartition(".")
    return stem if dot and ext else name
