"""CLI: argparse and the rename command."""

from __future__ import annotations

import argparse
import re
import sys
from typing import List, Optional

from .errors import NotARepositoryError, RenameStashError
from .rename import rename_stash
from .repo import Repository

_STASH_REF = re.compile(r"^(?:(?:refs/)?stash@\{(\d+)\}|(\d+))$")


def stash_position(value: str) -> int:
    """argparse type: '2' or 'stash@{2}' -> 2."""
    match = _STASH_REF.match(value.strip())
    if not match:
        raise argparse.ArgumentTypeError(f"invalid stash {value!r} (expected N or stash@{{N}})")
    return int(match.group(1) or match.group(2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-rename-stash",
        description="Change the message of a stash entry. The renamed entry becomes stash@{0}.",
    )
    parser.add_argument(
        "-r", "--repository", default=".", help="Repository path (default: current directory)"
    )
    parser.add_argument("-m", "--message", required=True, help="The new message")
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="Show what would change without writing anything"
    )
    parser.add_argument("stash", type=stash_position, help="The stash to rename: N or stash@{N}")
    return parser


def cmd_rename(args: argparse.Namespace) -> int:
    try:
        repo = Repository.discover(args.repository)
    except NotARepositoryError as e:
        print(f"Error: {e}")
        return 1
    result = rename_stash(repo, args.stash, args.message, dry_run=args.dry_run)
    old_id = result.original.commit_id[:7]
    new_id = result.new_commit_id[:7]
    if args.dry_run:
        print(f"Would rename {result.original.ref} ({old_id}) -> stash@{{0}} ({new_id}): {result.message}")
    else:
        print(f"Renamed {result.original.ref} ({old_id}) -> stash@{{0}} ({new_id}): {result.message}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return cmd_rename(args)
    except RenameStashError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
