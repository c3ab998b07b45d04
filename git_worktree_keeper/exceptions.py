"""Custom exceptions for git-worktree-keeper"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class WorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class UsageError(WorktreeKeeperError):
    """Exception raised for a malformed invocation."""
    pass


class NotFoundError(WorktreeKeeperError):
    """Exception raised when a branch or path does not resolve to a worktree."""
    pass


class PreconditionError(WorktreeKeeperError):
    """Exception raised when a worktree may not be touched in its current state."""
    pass


class AmbiguousWorktreeError(PreconditionError):
    """Exception raised when more than one worktree has the same branch checked out."""

    def __init__(self, name: str, paths: list):
        self.name = name
        self.paths = paths
        listing = "\n".join(f"  - {p}" for p in paths)
        super().__init__(
            f"ambiguous name '{name}'; multiple worktrees match; specify a path instead",
            detail=listing,
        )


class MalformedListing(WorktreeKeeperError):
    """Exception raised when the worktree listing cannot be parsed."""
    pass


class ToolInvocationError(WorktreeKeeperError):
    """Exception raised when git reports failure for a requested action."""

    def __init__(self, operation: str, message: Optional[str] = None, status=None):
        self.operation = operation
        self.status = status

        error_msg = operation
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg, detail=message)

    @classmethod
    def from_command_error(cls, operation: str, error) -> "ToolInvocationError":
        """Build from a git.exc.GitCommandError, keeping git's own stderr."""
        stderr = (error.stderr if hasattr(error, "stderr") and error.stderr else "").strip()
        if stderr.startswith("stderr:"):
            stderr = stderr[len("stderr:"):].strip().strip("'").strip()
        status = error.status if hasattr(error, "status") else None
        return cls(operation, stderr or "unknown error", status=status)


@dataclass
class DiscoveryWarning:
    """A worktree directory that could not be resolved during discovery."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"warning: {self.reason}: {self.path}"
