#!/usr/bin/env python3
"""Thin wrapper: run the git-rename-stash CLI. Usage: python main.py -m <message> <stash>."""

import sys

if __name__ == "__main__":
    from renamestash.cli import main
    sys.exit(main())
