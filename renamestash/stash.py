"""Stash list primitives: traverse entries, read and write stash commits, drop and install entries.

The list lives in ``refs/stash`` (stash@{0}) and its reflog, one line per
entry, oldest first in the file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

from .config import reflog_identity
from .constants import OBJ_COMMIT, OBJ_TREE, SHA1_HEX_LEN, STASH_REF, ZEROS
from .errors import InvalidRefError, ObjectNotFoundError
from .objects import Commit, Signature
from .reflog import (
    append_reflog,
    delete_reflog,
    make_reflog_entry,
    parse_reflog_line,
    read_reflog,
    read_reflog_lines,
    write_reflog,
)
from .refs import delete_ref, resolve_ref, update_ref
from .repo import Repository


@dataclass(frozen=True)
class StashEntry:
    """One stash entry: its position, the reflog message and the commit it references."""

    position: int
    message: str
    commit_id: str

    @property
    def ref(self) -> str:
        return f"stash@{{{self.position}}}"


def iter_stash_entries(repo: Repository) -> Iterator[StashEntry]:
    """Yield stash@{0}, stash@{1}, ... (newest first). Stop pulling to stop reading."""
    repo.require_repo()
    if resolve_ref(repo.git_dir, STASH_REF) is None:
        return
    for i, entry in enumerate(reversed(read_reflog(repo, STASH_REF))):
        yield StashEntry(i, entry.message, entry.new)


def read_stash_commit(repo: Repository, commit_id: str) -> Commit:
    """Load a stash commit and check that its tree and parents are readable."""
    obj = repo.load_object(commit_id)
    if obj.type != OBJ_COMMIT or not isinstance(obj, Commit):
        raise ObjectNotFoundError(f"object {commit_id} is a {obj.type}, not a commit")
    tree = repo.load_object(obj.tree_hash)
    if tree.type != OBJ_TREE:
        raise ObjectNotFoundError(f"tree {obj.tree_hash} of {commit_id} is a {tree.type}")
    for parent in obj.parent_hashes:
        if not repo.has_object(parent):
            raise ObjectNotFoundError(f"parent {parent} of {commit_id} not found")
    return obj


def store_commit(repo: Repository, commit: Commit) -> str:
    """Write commit and confirm it can be found again; return its id."""
    sha = repo.store_object(commit)
    if not repo.has_object(sha):
        raise ObjectNotFoundError(f"commit {sha} not found after write")
    return sha


def create_commit(
    repo: Repository,
    author: Signature,
    committer: Signature,
    message: str,
    tree_hash: str,
    parent_hashes: Sequence[str],
    extra_headers: Sequence[Tuple[str, str]] = (),
) -> str:
    """Create and store a commit object. Does not update refs.

    For callers recording new stash entries; a rename stores its rebuilt
    commit through store_commit directly.
    """
    commit = Commit(tree_hash, parent_hashes, author, committer, message, extra_headers)
    return store_commit(repo, commit)


def drop_stash_entry(repo: Repository, position: int) -> None:
    """Remove stash@{position}; later entries move up by one.

    The reflog line is removed and the old id of the next newer line is
    re-chained; every other line is written back byte for byte. The ref
    follows the newest remaining entry, and both go away when the list empties.
    """
    lines = read_reflog_lines(repo, STASH_REF)
    parsed = [(i, parse_reflog_line(line)) for i, line in enumerate(lines)]
    entries = [(i, e) for i, e in parsed if e is not None]
    idx = len(entries) - 1 - position
    if position < 0 or idx < 0:
        raise InvalidRefError(f"stash@{{{position}}} does not exist")
    if len(entries) == 1:
        delete_ref(repo.git_dir, STASH_REF)
        delete_reflog(repo, STASH_REF)
        return
    previous = entries[idx - 1][1].new if idx > 0 else ZEROS
    if idx + 1 < len(entries):
        newer = entries[idx + 1][0]
        lines[newer] = previous + lines[newer][SHA1_HEX_LEN:]
    del lines[entries[idx][0]]
    write_reflog(repo, STASH_REF, lines)
    if position == 0:
        update_ref(repo.git_dir, STASH_REF, previous)


def set_stash_head(repo: Repository, commit_id: str, message: str) -> None:
    """Install commit_id as stash@{0}, logging message as its reflog line."""
    old = resolve_ref(repo.git_dir, STASH_REF) or ZEROS
    entry = make_reflog_entry(old, commit_id, message, reflog_identity(repo))
    append_reflog(repo, STASH_REF, entry)
    update_ref(repo.git_dir, STASH_REF, commit_id)
