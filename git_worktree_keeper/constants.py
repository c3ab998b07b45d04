"""Shared constants for git-worktree-keeper."""

from pathlib import Path


# Managed root layout: <root>/<repo-name>/<branch>
DEFAULT_WORKTREES_DIRNAME = ".worktrees"
WORKTREES_ROOT_ENV = "WT_ROOT"


def default_worktrees_root() -> Path:
    """Return the managed root used when nothing else is configured."""
    return Path.home() / DEFAULT_WORKTREES_DIRNAME


# Ref prefixes
LOCAL_BRANCH_PREFIX = "refs/heads/"
REMOTE_BRANCH_PREFIX = "refs/remotes/"

# Per-worktree link file written by git into each linked worktree
LINK_FILE_NAME = ".git"
LINK_FILE_PREFIX = "gitdir:"

# Admin layout inside the owning repository: <repo>/.git/worktrees/<name>
ADMIN_DIR_NAME = ".git"
ADMIN_WORKTREES_DIR_NAME = "worktrees"

# Prefix for all user-facing diagnostics
MESSAGE_PREFIX = "wt: "

# Column definitions for `wt list`
LIST_COLUMNS = ["", "BRANCH", "HEAD", "STATE", "PATH"]
HEAD_WIDTH = 8
DETACHED_LABEL = "(detached)"
