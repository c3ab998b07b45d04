"""Data models for git-worktree-keeper."""

from .worktree import Worktree
from .results import (
    ActionKind,
    PruneAction,
    PrunePlan,
    PruneReport,
    RemovalReport,
    SkippedWorktree,
    TargetOutcome,
)

__all__ = [
    "Worktree",
    "ActionKind",
    "PruneAction",
    "PrunePlan",
    "PruneReport",
    "RemovalReport",
    "SkippedWorktree",
    "TargetOutcome",
]
