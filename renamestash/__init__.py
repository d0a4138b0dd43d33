"""renamestash: change the message of a git stash entry in place of git's missing `stash rename`."""

from .errors import RenameStashError, StashNotFoundError, StoreReadError, StoreWriteError
from .rename import rename_stash
from .repo import Repository

__all__ = [
    "Repository",
    "RenameStashError",
    "StashNotFoundError",
    "StoreReadError",
    "StoreWriteError",
    "rename_stash",
]
