"""Git-related services for git-worktree-keeper."""

from .operations import GitOperations
from .worktrees import (
    WorktreeService,
    branch_checked_out_elsewhere,
    find_by_branch,
    find_by_path,
    parse_porcelain,
)

__all__ = [
    "GitOperations",
    "WorktreeService",
    "branch_checked_out_elsewhere",
    "find_by_branch",
    "find_by_path",
    "parse_porcelain",
]
