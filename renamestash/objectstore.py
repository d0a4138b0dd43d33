"""Unified object store: loose + packed objects (packs are read-only)."""

from __future__ import annotations

import zlib
from pathlib import Path
from typing import List, Optional

from .errors import IdxError, ObjectNotFoundError, PackError
from .objects import GitObject
from .odb import ObjectDB
from .pack import PackFile, PackIndex
from .util import is_hex_sha


class ObjectStore:
    """Object database: loose objects + pack files (read)."""

    def __init__(self, objects_dir: Path) -> None:
        self.objects_dir = Path(objects_dir)
        self._loose = ObjectDB(self.objects_dir)
        self._packs: Optional[List[PackFile]] = None

    @property
    def packs(self) -> List[PackFile]:
        """Packs under objects/pack, scanned on first use."""
        if self._packs is None:
            self._packs = self._scan_packs()
        return self._packs

    def _scan_packs(self) -> List[PackFile]:
        packs: List[PackFile] = []
        pack_dir = self.objects_dir / "pack"
        if not pack_dir.is_dir():
            return packs
        for idx_path in sorted(pack_dir.glob("*.idx")):
            pack_path = idx_path.with_suffix(".pack")
            if not pack_path.is_file():
                continue
            try:
                packs.append(PackFile(pack_path, PackIndex(idx_path)))
            except (IdxError, PackError, OSError):
                # a broken pack must not hide objects that live elsewhere
                continue
        return packs

    def exists(self, sha: str) -> bool:
        """True if object exists (loose or packed)."""
        if not is_hex_sha(sha):
            return False
        sha = sha.lower()
        return self._loose.exists(sha) or any(p.contains(sha) for p in self.packs)

    def load_raw(self, sha: str) -> bytes:
        """Raw object bytes (type size\\0content). Raises ObjectNotFoundError."""
        if not is_hex_sha(sha):
            raise ObjectNotFoundError(f"invalid object id {sha!r}")
        sha = sha.lower()
        try:
            return self._loose.load_raw(sha)
        except ObjectNotFoundError:
            pass
        except zlib.error as e:
            raise ObjectNotFoundError(f"object {sha} is corrupt: {e}") from e
        for pack in self.packs:
            try:
                raw = pack.read_raw(sha, self.load_raw)
            except (PackError, zlib.error, OSError) as e:
                raise ObjectNotFoundError(f"object {sha} unreadable in {pack.path.name}: {e}") from e
            if raw is not None:
                return raw
        raise ObjectNotFoundError(f"object {sha} not found")

    def load(self, sha: str) -> GitObject:
        """Load and parse object. Raises ObjectNotFoundError."""
        raw = self.load_raw(sha)
        try:
            return GitObject.from_raw(raw)
        except ValueError as e:
            raise ObjectNotFoundError(f"object {sha} is malformed: {e}") from e

    def store(self, obj: GitObject) -> str:
        """Write object as a loose object; return full 40-char hash."""
        return self._loose.store(obj)
