"""Reflog: read, append, rewrite and delete the append-only log of a ref."""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import TYPE_CHECKING, List, NamedTuple, Optional, Sequence

from .constants import LOGS_DIR
from .util import is_hex_sha, read_text_safe, timezone_offset_utc, write_text_atomic

if TYPE_CHECKING:
    from .repo import Repository

_WHITESPACE_RUN = re.compile(r"[ \t\n\r\f\v]+")


class ReflogEntry(NamedTuple):
    """One reflog line: old new who timestamp tz<TAB>message."""

    old: str
    new: str
    who: str
    timestamp: int
    tz: str
    message: str

    def to_line(self) -> str:
        head = f"{self.old} {self.new} {self.who} {self.timestamp} {self.tz}"
        return f"{head}\t{self.message}\n" if self.message else head + "\n"


def reflog_path_for_ref(repo: "Repository", refname: str) -> Path:
    """Path to reflog file for ref, e.g. refs/stash -> .git/logs/refs/stash."""
    return repo.git_dir / LOGS_DIR / refname


def normalize_reflog_message(message: str) -> str:
    """Collapse whitespace runs (newlines included) to one space and trim, as git does."""
    return _WHITESPACE_RUN.sub(" ", message).strip(" ")


def parse_reflog_line(raw: str) -> Optional[ReflogEntry]:
    """Parse one reflog line (no trailing newline); None if malformed."""
    head, _, msg = raw.partition("\t")
    old_h, _, rest = head.partition(" ")
    new_h, _, rest = rest.partition(" ")
    who, _, stamp = rest.rpartition(">")
    parts = stamp.split()
    if not is_hex_sha(old_h) or not is_hex_sha(new_h) or not who or len(parts) != 2:
        return None
    try:
        ts = int(parts[0])
    except ValueError:
        return None
    return ReflogEntry(old_h.lower(), new_h.lower(), who + ">", ts, parts[1], msg)


def read_reflog_lines(repo: "Repository", refname: str) -> List[str]:
    """Raw reflog lines in file order, without newlines, malformed ones included."""
    content = read_text_safe(reflog_path_for_ref(repo, refname))
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def read_reflog(repo: "Repository", refname: str) -> List[ReflogEntry]:
    """Read reflog entries in file order (oldest first). Skips malformed lines."""
    entries = (parse_reflog_line(line) for line in read_reflog_lines(repo, refname))
    return [e for e in entries if e is not None]


def make_reflog_entry(
    old: str,
    new: str,
    message: str,
    who: str,
    timestamp: Optional[int] = None,
    tz: Optional[str] = None,
) -> ReflogEntry:
    """Build a reflog entry stamped with the current time unless given."""
    if timestamp is None:
        timestamp = int(time.time())
    if tz is None:
        tz = timezone_offset_utc()
    return ReflogEntry(old, new, who, timestamp, tz, normalize_reflog_message(message))


def append_reflog(repo: "Repository", refname: str, entry: ReflogEntry) -> None:
    """Append one reflog line. Creates log dir if missing. OSError propagates."""
    path = reflog_path_for_ref(repo, refname)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8", errors="surrogateescape") as f:
        f.write(entry.to_line())


def write_reflog(repo: "Repository", refname: str, lines: Sequence[str]) -> None:
    """Replace the whole reflog atomically with raw lines (no trailing newlines)."""
    write_text_atomic(reflog_path_for_ref(repo, refname), "".join(line + "\n" for line in lines))


def delete_reflog(repo: "Repository", refname: str) -> None:
    path = reflog_path_for_ref(repo, refname)
    if path.exists():
        path.unlink()
