"""Constants for renamestash: ref paths, object types, rewrite stages."""

from __future__ import annotations

# Stash list: the ref points at stash@{0}, its reflog holds one line per entry
STASH_REF = "refs/stash"
PACKED_REFS_FILE = "packed-refs"
LOGS_DIR = "logs"

# Object types
OBJ_BLOB = "blob"
OBJ_TREE = "tree"
OBJ_COMMIT = "commit"
OBJ_TAG = "tag"

# Git file modes
MODE_FILE = "100644"
MODE_DIR = "040000"

# Commit headers that sign the exact commit bytes; they cannot survive a rewrite
SIGNATURE_HEADERS = ("gpgsig", "gpgsig-sha256")

# New messages are written as UTF-8, so a declared legacy encoding is not carried over
ENCODING_HEADER = "encoding"

# SHA-1 hex length and the all-zero id used as "no previous value" in reflogs
SHA1_HEX_LEN = 40
ZEROS = "0" * SHA1_HEX_LEN

# Identity used when neither env nor config provide one
DEFAULT_IDENTITY = "git-rename-stash <rename-stash@localhost>"

# Rewrite stages, in order. Errors name the stage that failed.
STAGE_LOCATE = "locate"
STAGE_RECONSTRUCT = "reconstruct"
STAGE_RECONSTRUCTED = "reconstructed"
STAGE_REMOVE = "remove"
STAGE_INSTALL = "install"
STAGE_DONE = "done"
