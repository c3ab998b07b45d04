"""Core functionality for git-worktree-keeper."""

from .worktree_keeper import WorktreeKeeper
from .remover import RemoveEngine
from .pruner import PruneEngine

__all__ = ["WorktreeKeeper", "RemoveEngine", "PruneEngine"]
