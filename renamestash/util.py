"""Helper functions: hashing, atomic writes, safe reads, timezone offset."""

from __future__ import annotations

import hashlib
import os
import tempfile
import time
from pathlib import Path
from typing import Optional


def sha1_hash(data: bytes) -> str:
    """Compute SHA-1 hex digest of data."""
    return hashlib.sha1(data).hexdigest()


def is_hex_sha(s: str) -> bool:
    """True if s is a full 40-char hex object id."""
    return len(s) == 40 and all(c in "0123456789abcdef" for c in s.lower())


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write bytes to file atomically (temp, fsync, then replace)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
    try:
        os.write(fd, data)
        os.fsync(fd)
        os.close(fd)
        os.replace(tmp, path)
    except Exception:
        try:
            os.close(fd)
        except OSError:
            pass
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def write_text_atomic(path: Path, text: str) -> None:
    """Write text to file atomically."""
    write_bytes_atomic(path, text.encode("utf-8", errors="surrogateescape"))


def read_text_safe(path: Path) -> Optional[str]:
    """Read file as text; return None if not found or unreadable."""
    try:
        return path.read_text(encoding="utf-8", errors="surrogateescape")
    except (FileNotFoundError, OSError):
        return None


def timezone_offset_utc() -> str:
    """Return local timezone offset as string e.g. +0530 or -0800."""
    if time.localtime().tm_isdst > 0 and time.daylight:
        offset_sec = -time.altzone
    else:
        offset_sec = -time.timezone
    sign = "+" if offset_sec >= 0 else "-"
    abs_sec = abs(offset_sec)
    hours = abs_sec // 3600
    minutes = (abs_sec % 3600) // 60
    return f"{sign}{hours:02d}{minutes:02d}"
