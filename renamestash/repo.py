"""Repository: ties paths, the object store and refs together."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .errors import NotARepositoryError
from .objects import GitObject
from .objectstore import ObjectStore
from .util import read_text_safe


def _looks_like_git_dir(path: Path) -> bool:
    return (path / "HEAD").is_file() and (path / "objects").is_dir() and (path / "refs").is_dir()


def _resolve_git_dir(path: Path) -> Optional[Path]:
    """Find the git dir for a work tree, a `.git` file (linked work tree) or a bare repo."""
    dot_git = path / ".git"
    if dot_git.is_dir():
        return dot_git
    if dot_git.is_file():
        content = read_text_safe(dot_git) or ""
        if content.startswith("gitdir:"):
            target = Path(content[len("gitdir:") :].strip())
            return (path / target).resolve() if not target.is_absolute() else target
        return None
    if _looks_like_git_dir(path):
        return path
    return None


def _common_dir(git_dir: Path) -> Path:
    """Linked work trees share refs/stash, objects and config through commondir."""
    content = read_text_safe(git_dir / "commondir")
    if not content or not content.strip():
        return git_dir
    target = Path(content.strip())
    return (git_dir / target).resolve() if not target.is_absolute() else target


class Repository:
    """Git repository: git dir, object store, refs."""

    def __init__(self, path: Union[str, Path] = ".") -> None:
        self.path = Path(path).resolve()
        found = _resolve_git_dir(self.path)
        self.git_dir = _common_dir(found) if found is not None else self.path / ".git"
        self.objects_dir = self.git_dir / "objects"
        self.odb = ObjectStore(self.objects_dir)

    @classmethod
    def discover(cls, start: Union[str, Path] = ".") -> "Repository":
        """Open the repository containing start, walking up parent directories."""
        start = Path(start).resolve()
        if not start.exists():
            raise NotARepositoryError(f"no such path: {start}")
        for candidate in (start, *start.parents):
            if _resolve_git_dir(candidate) is not None:
                repo = cls(candidate)
                repo.require_repo()
                return repo
        raise NotARepositoryError(f"not a git repository (or any parent): {start}")

    def require_repo(self) -> None:
        """Raise NotARepositoryError if not a git repo."""
        if not self.git_dir.is_dir() or not self.objects_dir.is_dir():
            raise NotARepositoryError(f"not a git repository: {self.path}")

    def store_object(self, obj: GitObject) -> str:
        """Store object in ODB; return full hash."""
        return self.odb.store(obj)

    def load_object(self, sha: str) -> GitObject:
        """Load object by full hash (loose or packed)."""
        return self.odb.load(sha)

    def has_object(self, sha: str) -> bool:
        return self.odb.exists(sha)
