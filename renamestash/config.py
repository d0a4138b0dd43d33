"""Git-like configuration: read repository and global config (INI format)."""

from __future__ import annotations

import configparser
import os
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from .constants import DEFAULT_IDENTITY
from .util import read_text_safe

if TYPE_CHECKING:
    from .repo import Repository

CONFIG_FILENAME = "config"


def _parse_key(key: str) -> tuple[str, str]:
    """Return (section, option) for 'section.option'."""
    section, sep, option = key.rpartition(".")
    if not sep or not section.strip() or not option.strip():
        raise ValueError(f"invalid config key: {key!r} (expected section.option)")
    return section.strip(), option.strip()


def _new_parser() -> configparser.ConfigParser:
    # git config allows duplicate keys, bare boolean keys, inline comments and '%'
    return configparser.ConfigParser(
        strict=False,
        allow_no_value=True,
        interpolation=None,
        inline_comment_prefixes=("#", ";"),
    )


def global_config_paths() -> List[Path]:
    """Global config files in the order git reads them (later wins)."""
    override = os.environ.get("GIT_CONFIG_GLOBAL")
    if override is not None:
        return [Path(override)] if override else []
    paths: List[Path] = []
    xdg = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    paths.append(Path(xdg) / "git" / "config")
    paths.append(Path.home() / ".gitconfig")
    return paths


def read_config_file(path: Path) -> configparser.ConfigParser:
    """Read one config file. Return empty parser if missing or unparsable."""
    cfg = _new_parser()
    content = read_text_safe(path)
    if content:
        try:
            cfg.read_string(content)
        except configparser.Error:
            return _new_parser()
    return cfg


def read_config(repo: "Repository") -> configparser.ConfigParser:
    """Read .git/config. Does not raise."""
    return read_config_file(repo.git_dir / CONFIG_FILENAME)


def get_value(repo: "Repository", key: str) -> Optional[str]:
    """Get config value for key (section.option); repo config wins over global."""
    section, option = _parse_key(key)
    configs = [read_config(repo)]
    configs.extend(read_config_file(p) for p in reversed(global_config_paths()))
    for cfg in configs:
        if cfg.has_section(section) and cfg.has_option(section, option):
            value = cfg.get(section, option)
            if value is None:
                return "true"
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] == '"':
                value = value[1:-1]
            return value
    return None


def get_user_identity(repo: "Repository") -> Optional[str]:
    """Return 'Name <email>' from GIT_COMMITTER_* env or user.name/user.email, else None."""
    name = os.environ.get("GIT_COMMITTER_NAME") or get_value(repo, "user.name")
    email = os.environ.get("GIT_COMMITTER_EMAIL") or get_value(repo, "user.email")
    if name is not None and email is not None:
        return f"{name} <{email}>"
    return None


def reflog_identity(repo: "Repository") -> str:
    """Identity written into reflog lines."""
    return get_user_identity(repo) or DEFAULT_IDENTITY
