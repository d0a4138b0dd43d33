"""Loose object database: store/load by hash under objects/<aa>/<bb...>."""

from __future__ import annotations

import zlib
from pathlib import Path

from .errors import ObjectNotFoundError
from .objects import GitObject
from .util import is_hex_sha, write_bytes_atomic


class ObjectDB:
    """Loose object storage under .git/objects/<aa>/<bb...>."""

    def __init__(self, objects_dir: Path) -> None:
        self.objects_dir = Path(objects_dir)

    def _object_path(self, sha: str) -> Path:
        """Path to loose object file. sha must be full 40-char hex."""
        if not is_hex_sha(sha):
            raise ValueError(f"invalid full sha: {sha}")
        sha = sha.lower()
        return self.objects_dir / sha[:2] / sha[2:]

    def exists(self, sha: str) -> bool:
        return self._object_path(sha).is_file()

    def store(self, obj: GitObject) -> str:
        """Write object if missing; return full 40-char hash."""
        sha = obj.hash_id()
        path = self._object_path(sha)
        if path.exists():
            return sha
        write_bytes_atomic(path, obj.serialize())
        return sha

    def load_raw(self, sha: str) -> bytes:
        """Return uncompressed object bytes (type size\\0content). Raises ObjectNotFoundError."""
        path = self._object_path(sha)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise ObjectNotFoundError(f"object {sha} not found") from None
        except OSError as e:
            raise ObjectNotFoundError(f"object {sha} unreadable: {e}") from e
        return zlib.decompress(data)
