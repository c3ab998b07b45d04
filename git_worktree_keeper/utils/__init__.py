"""Utility functions for git-worktree-keeper.

This package provides utility modules:
- paths: canonicalization and managed-root directory housekeeping
"""

from .paths import canonical, is_within, cwd_is_within, remove_empty_parents

__all__ = [
    "canonical",
    "is_within",
    "cwd_is_within",
    "remove_empty_parents",
]
