"""Rename a stash entry: locate it, rebuild its commit with a new message, swap it in.

A commit's id depends on its message, so an entry is renamed by writing a new
commit and moving the stash list onto it. The new commit is stored before the
old entry is removed; the rewritten entry always lands at stash@{0}.

No locking is done: another process pushing or dropping stashes between the
locate and the swap can make the wrong entry move.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    ENCODING_HEADER,
    SIGNATURE_HEADERS,
    STAGE_DONE,
    STAGE_INSTALL,
    STAGE_LOCATE,
    STAGE_RECONSTRUCT,
    STAGE_RECONSTRUCTED,
    STAGE_REMOVE,
)
from .errors import (
    InvalidRefError,
    ObjectNotFoundError,
    StashNotFoundError,
    StoreReadError,
    StoreWriteError,
)
from .objects import Commit
from .repo import Repository
from .stash import (
    StashEntry,
    drop_stash_entry,
    iter_stash_entries,
    read_stash_commit,
    set_stash_head,
    store_commit,
)


@dataclass(frozen=True)
class StashRename:
    """Outcome of a rename: the entry that was replaced and the commit that replaced it."""

    original: StashEntry
    new_commit_id: str
    message: str
    stage: str = STAGE_DONE


def locate_entry(repo: Repository, position: int) -> StashEntry:
    """Return stash@{position}. Raises StashNotFoundError, or StoreReadError if the list is unreadable."""
    if position >= 0:
        try:
            for entry in iter_stash_entries(repo):
                if entry.position == position:
                    return entry
        except (InvalidRefError, OSError) as e:
            raise StoreReadError(f"cannot read the stash list: {e}", STAGE_LOCATE) from e
    raise StashNotFoundError(f"stash@{{{position}}} does not exist", STAGE_LOCATE)


def rebuild_commit(commit: Commit, message: str) -> Commit:
    """Same tree, parents, author, committer and headers as commit, with message.

    Signatures and the ``encoding`` header are dropped: neither describes the
    new UTF-8 message.
    """
    headers = [
        (k, v)
        for k, v in commit.extra_headers
        if k not in SIGNATURE_HEADERS and k != ENCODING_HEADER
    ]
    return Commit(
        commit.tree_hash,
        commit.parent_hashes,
        commit.author,
        commit.committer,
        message,
        headers,
    )


def _read_original(repo: Repository, entry: StashEntry) -> Commit:
    try:
        return read_stash_commit(repo, entry.commit_id)
    except (ObjectNotFoundError, OSError) as e:
        raise StoreReadError(f"cannot read {entry.ref}: {e}", STAGE_RECONSTRUCT) from e


def rewrite_entry(repo: Repository, entry: StashEntry, message: str) -> StashRename:
    """Replace entry with a copy carrying message, installed as stash@{0}."""
    replacement = rebuild_commit(_read_original(repo, entry), message)
    try:
        new_id = store_commit(repo, replacement)
    except (ObjectNotFoundError, OSError) as e:
        raise StoreWriteError(f"cannot write new commit: {e}", STAGE_RECONSTRUCT) from e

    try:
        drop_stash_entry(repo, entry.position)
    except (InvalidRefError, OSError) as e:
        raise StoreWriteError(
            f"cannot remove {entry.ref}: {e}", STAGE_REMOVE, indeterminate=True, commit_id=new_id
        ) from e

    try:
        set_stash_head(repo, new_id, message)
    except (InvalidRefError, OSError) as e:
        raise StoreWriteError(
            f"cannot install {new_id} as stash@{{0}}: {e}",
            STAGE_INSTALL,
            indeterminate=True,
            commit_id=new_id,
        ) from e

    return StashRename(entry, new_id, message)


def rename_stash(repo: Repository, position: int, message: str, dry_run: bool = False) -> StashRename:
    """Rename stash@{position} to message.

    With dry_run nothing is written: the result carries the id the new commit
    would get and stage "reconstructed".
    """
    entry = locate_entry(repo, position)
    if dry_run:
        replacement = rebuild_commit(_read_original(repo, entry), message)
        return StashRename(entry, replacement.hash_id(), message, stage=STAGE_RECONSTRUCTED)
    return rewrite_entry(repo, entry, message)
