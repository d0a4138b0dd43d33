"""Custom exceptions for renamestash."""

from __future__ import annotations

from typing import Optional


class RenameStashError(Exception):
    """Base exception for renamestash."""

    pass


class NotARepositoryError(RenameStashError):
    """Raised when a path is not inside a git repository."""

    pass


class ObjectNotFoundError(RenameStashError):
    """Raised when an object is not found in loose storage or any pack."""

    pass


class InvalidRefError(RenameStashError):
    """Raised when a ref name or hash is malformed."""

    pass


class PackError(RenameStashError):
    """Raised when a pack file is invalid or unsupported."""

    pass


class IdxError(RenameStashError):
    """Raised when a pack index file is invalid or unsupported."""

    pass


class StashRewriteError(RenameStashError):
    """A stash rewrite failed at a named stage.

    ``indeterminate`` is True when the failure happened after the stash list
    started changing, so the list may be missing the entry being rewritten.
    """

    def __init__(
        self,
        message: str,
        stage: str,
        indeterminate: bool = False,
        commit_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.indeterminate = indeterminate
        self.commit_id = commit_id

    def __str__(self) -> str:
        text = f"{self.stage}: {self.args[0]}"
        if self.indeterminate:
            text += " (stash list left in an indeterminate state"
            if self.commit_id:
                text += f"; restore with: git stash store -m <message> {self.commit_id}"
            text += ")"
        return text


class StashNotFoundError(StashRewriteError):
    """Raised when the target position has no stash entry."""

    pass


class StoreReadError(StashRewriteError):
    """Raised when the stash commit, its tree, or its parents cannot be read."""

    pass


class StoreWriteError(StashRewriteError):
    """Raised when writing the new commit or updating the stash list fails."""

    pass
