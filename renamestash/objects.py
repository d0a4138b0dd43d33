"""Git objects: GitObject, Blob, Tree, Signature, Commit with serialization/parsing."""

from __future__ import annotations

import zlib
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .constants import OBJ_BLOB, OBJ_COMMIT, OBJ_TREE
from .util import sha1_hash

# Commit text may be in any encoding; surrogateescape keeps the bytes exact.
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _object_header(obj_type: str, content: bytes) -> bytes:
    """Header: '<type> <size>\\0'."""
    return f"{obj_type} {len(content)}\0".encode()


def split_raw(raw: bytes) -> Tuple[str, bytes]:
    """Split raw object bytes (type size\\0content) into (type, content)."""
    null_idx = raw.find(b"\0")
    if null_idx == -1:
        raise ValueError("invalid object: no null byte in header")
    parts = raw[:null_idx].decode().split(" ", 1)
    if len(parts) != 2:
        raise ValueError("invalid object header")
    content = raw[null_idx + 1 :]
    if int(parts[1]) != len(content):
        raise ValueError("invalid object: size mismatch")
    return parts[0], content


class GitObject:
    """Base git object (blob, tree, commit)."""

    def __init__(self, obj_type: str, content: bytes) -> None:
        self.type = obj_type
        self.content = content

    def raw(self) -> bytes:
        """Uncompressed representation: header + content."""
        return _object_header(self.type, self.content) + self.content

    def hash_id(self) -> str:
        """SHA-1 of uncompressed representation."""
        return sha1_hash(self.raw())

    def serialize(self) -> bytes:
        """Compressed bytes for loose storage: zlib(header + content)."""
        return zlib.compress(self.raw())

    @classmethod
    def from_raw(cls, raw: bytes) -> "GitObject":
        """Parse uncompressed object bytes into the matching GitObject subclass."""
        obj_type, content = split_raw(raw)
        if obj_type == OBJ_BLOB:
            return Blob(content)
        if obj_type == OBJ_TREE:
            return Tree.from_content(content)
        if obj_type == OBJ_COMMIT:
            return Commit.from_content(content)
        return cls(obj_type, content)

    @classmethod
    def deserialize(cls, data: bytes) -> "GitObject":
        """Parse compressed loose-object bytes."""
        return cls.from_raw(zlib.decompress(data))


class Blob(GitObject):
    """Blob object: raw file content."""

    def __init__(self, content: bytes) -> None:
        super().__init__(OBJ_BLOB, content)


class Tree(GitObject):
    """Tree object: list of (mode, name, sha) entries."""

    def __init__(self, entries: Optional[List[Tuple[str, str, str]]] = None) -> None:
        self.entries: List[Tuple[str, str, str]] = list(entries or [])
        super().__init__(OBJ_TREE, self._serialize_entries())

    def _serialize_entries(self) -> bytes:
        # Git orders entries by name, comparing directories as if suffixed with '/'
        def key(e: Tuple[str, str, str]) -> bytes:
            name = e[1].encode()
            return name + b"/" if e[0].startswith("04") else name

        out = b""
        for mode, name, obj_hash in sorted(self.entries, key=key):
            out += f"{mode} {name}\0".encode() + bytes.fromhex(obj_hash)
        return out

    @classmethod
    def from_content(cls, content: bytes) -> "Tree":
        tree = cls()
        i = 0
        while i < len(content):
            null_idx = content.find(b"\0", i)
            if null_idx == -1:
                break
            mode, _, name = content[i:null_idx].decode(_ENCODING, _ERRORS).partition(" ")
            sha_bin = content[null_idx + 1 : null_idx + 21]
            if len(sha_bin) != 20:
                break
            tree.entries.append((mode, name, sha_bin.hex()))
            i = null_idx + 21
        tree.content = content  # preserve exact bytes for correct hash
        return tree


@dataclass(frozen=True)
class Signature:
    """Author or committer line: 'Name <email>' plus timestamp and tz offset."""

    identity: str
    timestamp: int
    tz_offset: str

    def to_header(self) -> str:
        return f"{self.identity} {self.timestamp} {self.tz_offset}"

    @classmethod
    def parse(cls, text: str) -> "Signature":
        """Parse 'Name <email> 1700000000 +0100'."""
        parts = text.rsplit(" ", 2)
        if len(parts) != 3:
            raise ValueError(f"invalid signature: {text!r}")
        try:
            timestamp = int(parts[1])
        except ValueError:
            raise ValueError(f"invalid signature timestamp: {text!r}") from None
        return cls(parts[0], timestamp, parts[2])


class Commit(GitObject):
    """Commit object: tree, parents, author, committer, extra headers, message.

    Extra headers (``encoding``, ``gpgsig``, ``mergetag`` ...) are kept in
    order as (name, value) pairs; multi-line values are joined with '\\n'.
    """

    def __init__(
        self,
        tree_hash: str,
        parent_hashes: Sequence[str],
        author: Signature,
        committer: Signature,
        message: str,
        extra_headers: Sequence[Tuple[str, str]] = (),
    ) -> None:
        self.tree_hash = tree_hash
        self.parent_hashes = list(parent_hashes)
        self.author = author
        self.committer = committer
        self.message = message
        self.extra_headers = list(extra_headers)
        super().__init__(OBJ_COMMIT, self._serialize_commit())

    def _serialize_commit(self) -> bytes:
        lines = [f"tree {self.tree_hash}"]
        for p in self.parent_hashes:
            lines.append(f"parent {p}")
        lines.append(f"author {self.author.to_header()}")
        lines.append(f"committer {self.committer.to_header()}")
        for name, value in self.extra_headers:
            # continuation lines are prefixed with a single space
            lines.append(f"{name} " + value.replace("\n", "\n "))
        lines.append("")
        # Git stores commit message with trailing newline
        msg = self.message if self.message.endswith("\n") else self.message + "\n"
        lines.append(msg)
        return "\n".join(lines).encode(_ENCODING, _ERRORS)

    @classmethod
    def from_content(cls, content: bytes) -> "Commit":
        """Parse commit content; keep the exact bytes so the hash is unchanged."""
        text = content.decode(_ENCODING, _ERRORS)
        header_text, sep, message = text.partition("\n\n")
        if not sep and header_text.endswith("\n"):
            header_text = header_text[:-1]
        tree_hash = ""
        parent_hashes: List[str] = []
        author: Optional[Signature] = None
        committer: Optional[Signature] = None
        extra: List[Tuple[str, str]] = []
        for line in header_text.split("\n"):
            if line.startswith(" ") and extra:
                name, value = extra[-1]
                extra[-1] = (name, value + "\n" + line[1:])
                continue
            name, _, value = line.partition(" ")
            if name == "tree":
                tree_hash = value
            elif name == "parent":
                parent_hashes.append(value)
            elif name == "author":
                author = Signature.parse(value)
            elif name == "committer":
                committer = Signature.parse(value)
            elif name:
                extra.append((name, value))
        if not tree_hash or author is None or committer is None:
            raise ValueError("invalid commit: missing tree, author or committer")
        if message.endswith("\n"):
            message = message[:-1]
        commit = cls.__new__(cls)
        commit.tree_hash = tree_hash
        commit.parent_hashes = parent_hashes
        commit.author = author
        commit.committer = committer
        commit.extra_headers = extra
        commit.message = message
        commit.content = content  # keep exact bytes for correct hash
        commit.type = OBJ_COMMIT
        return commit
