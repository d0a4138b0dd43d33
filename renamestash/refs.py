"""Refs: resolve loose and packed refs, update and delete them."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

from .constants import PACKED_REFS_FILE
from .errors import InvalidRefError
from .util import is_hex_sha, read_text_safe, write_text_atomic


def _ref_path(repo_git: Path, refname: str) -> Path:
    """Path to loose ref file, e.g. .git/refs/stash."""
    return repo_git / refname


def _read_packed_refs(repo_git: Path) -> Dict[str, str]:
    """Read .git/packed-refs; return refname -> sha."""
    raw = read_text_safe(repo_git / PACKED_REFS_FILE)
    if raw is None:
        return {}
    result: Dict[str, str] = {}
    for line in raw.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("^"):
            continue  # header, or peeled tag line for the previous ref
        parts = line.split(None, 1)
        if len(parts) == 2 and is_hex_sha(parts[0]):
            result[parts[1]] = parts[0].lower()
    return result


def resolve_ref(repo_git: Path, refname: str, _depth: int = 0) -> Optional[str]:
    """Resolve ref to object hash; None if it does not exist. Loose refs win over packed-refs."""
    if _depth > 5:
        raise InvalidRefError(f"symbolic ref loop at {refname}")
    content = read_text_safe(_ref_path(repo_git, refname))
    if content is None:
        return _read_packed_refs(repo_git).get(refname)
    content = content.strip()
    if is_hex_sha(content):
        return content.lower()
    if content.startswith("ref: "):
        return resolve_ref(repo_git, content[5:].strip(), _depth + 1)
    raise InvalidRefError(f"ref {refname} has invalid content: {content!r}")


def update_ref(repo_git: Path, refname: str, new_hash: str) -> None:
    """Point loose ref at new_hash via <ref>.lock, created exclusively and renamed into place."""
    if not is_hex_sha(new_hash):
        raise InvalidRefError(f"invalid hash: {new_hash}")
    path = _ref_path(repo_git, refname)
    path.parent.mkdir(parents=True, exist_ok=True)
    lock_path = path.parent / (path.name + ".lock")
    try:
        fd = os.open(lock_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
    except FileExistsError:
        raise InvalidRefError(f"ref {refname} is locked ({lock_path} exists)") from None
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(new_hash.lower() + "\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(lock_path, path)
    except Exception:
        lock_path.unlink(missing_ok=True)
        raise


def delete_ref(repo_git: Path, refname: str) -> None:
    """Remove ref from loose storage and from packed-refs."""
    path = _ref_path(repo_git, refname)
    if path.exists():
        path.unlink()
    packed = repo_git / PACKED_REFS_FILE
    raw = read_text_safe(packed)
    if raw is None:
        return
    kept = []
    skip_peeled = False
    found = False
    for line in raw.splitlines(keepends=True):
        stripped = line.strip()
        if stripped.startswith("^"):
            if not skip_peeled:
                kept.append(line)
            continue
        parts = stripped.split(None, 1)
        skip_peeled = len(parts) == 2 and parts[1] == refname
        if skip_peeled:
            found = True
            continue
        kept.append(line)
    if found:
        write_text_atomic(packed, "".join(kept))
