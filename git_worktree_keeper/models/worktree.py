"""Worktree data models."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Worktree:
    """One entry of `git worktree list --porcelain`."""

    path: Path
    head: str = ""
    branch: Optional[str] = None  # None when detached or bare
    bare: bool = False
    detached: bool = False
    locked: bool = False
    prunable: bool = False  # git flagged the metadata as stale
    is_main: bool = False  # First entry: the primary/administrative tree

    @property
    def short_head(self) -> str:
        """Abbreviated commit, or '-' for the all-zero head of an unborn/bare entry."""
        if not self.head or set(self.head) == {"0"}:
            return "-"
        return self.head[:8]

    def __str__(self) -> str:
        """String representation of worktree."""
        branch = self.branch or "(detached)"
        main_marker = " (main)" if self.is_main else ""
        status = "prunable" if self.prunable else "active"
        return f"{branch} @ {self.path}{main_marker} [{status}]"
