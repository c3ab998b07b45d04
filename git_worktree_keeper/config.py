"""Configuration handling for git-worktree-keeper"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from git_worktree_keeper.constants import WORKTREES_ROOT_ENV, default_worktrees_root


@dataclass
class Config:
    """Configuration for git-worktree-keeper with validation."""

    # Managed root: <root>/<repo-name>/<branch>
    worktrees_root: Optional[Path] = None

    # Remote used for merged/gone detection
    remote_name: str = "origin"
    fallback_base_branches: List[str] = field(default_factory=lambda: ["main", "master"])

    # Execution modes
    dry_run: bool = False
    force: bool = False
    include_gone: bool = False
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._resolve_worktrees_root()
        self._validate_remote_name()
        self._validate_fallback_base_branches()

    def _resolve_worktrees_root(self):
        """Fill in the managed root from the environment or the default."""
        if self.worktrees_root is None:
            env_root = os.environ.get(WORKTREES_ROOT_ENV)
            self.worktrees_root = Path(env_root) if env_root else default_worktrees_root()
        self.worktrees_root = Path(self.worktrees_root).expanduser()
        if not self.worktrees_root.is_absolute():
            raise ValueError(f"worktrees_root must be absolute, got '{self.worktrees_root}'")

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_fallback_base_branches(self):
        """Validate fallback_base_branches list."""
        if not isinstance(self.fallback_base_branches, list):
            raise ValueError("fallback_base_branches must be a list")
        if not self.fallback_base_branches:
            raise ValueError("fallback_base_branches cannot be empty")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "worktrees_root": str(self.worktrees_root),
            "remote_name": self.remote_name,
            "fallback_base_branches": self.fallback_base_branches,
            "dry_run": self.dry_run,
            "force": self.force,
            "include_gone": self.include_gone,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        known_fields = {
            "worktrees_root",
            "remote_name",
            "fallback_base_branches",
            "dry_run",
            "force",
            "include_gone",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
