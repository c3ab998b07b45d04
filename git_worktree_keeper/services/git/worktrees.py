"""Worktree listing parsing and lookup for git-worktree-keeper."""

import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from git_worktree_keeper.constants import LOCAL_BRANCH_PREFIX
from git_worktree_keeper.exceptions import AmbiguousWorktreeError, MalformedListing
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


def parse_porcelain(output: str) -> List[Worktree]:
    """Parse `git worktree list --porcelain` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        (bare | detached | locked [reason] | prunable [reason])
        (blank line between worktrees)

    Unknown keys are ignored. The first entry is always the main worktree.

    Raises:
        MalformedListing: If a record carries fields but no worktree path
    """
    worktrees: List[Worktree] = []
    current: Optional[dict] = None

    def flush():
        nonlocal current
        if current is None:
            return
        if "path" not in current:
            raise MalformedListing(
                "malformed worktree listing: record without a worktree path",
                detail=repr(current),
            )
        worktrees.append(
            Worktree(
                path=current["path"],
                head=current.get("head", ""),
                branch=current.get("branch"),
                bare=current.get("bare", False),
                detached=current.get("detached", False),
                locked=current.get("locked", False),
                prunable=current.get("prunable", False),
                is_main=not worktrees,
            )
        )
        current = None

    for raw_line in output.splitlines():
        line = raw_line.rstrip("\r")
        if not line.strip():
            flush()
            continue

        key, _, value = line.partition(" ")
        if key == "worktree":
            # A new path always starts a new record, even without a blank line
            flush()
            current = {"path": Path(value)}
            continue

        if current is None:
            current = {}

        if key == "HEAD":
            current["head"] = value
        elif key == "branch":
            if value.startswith(LOCAL_BRANCH_PREFIX):
                value = value[len(LOCAL_BRANCH_PREFIX):]
            current["branch"] = value
        elif key in ("bare", "detached", "locked", "prunable"):
            current[key] = True

    flush()

    logger.debug(f"Parsed {len(worktrees)} worktrees")
    return worktrees


def _canonical(path: Union[str, Path]) -> str:
    return os.path.realpath(os.fspath(path))


def find_all_by_branch(worktrees: Iterable[Worktree], name: str) -> List[Worktree]:
    return [wt for wt in worktrees if wt.branch == name]


def find_by_branch(worktrees: Sequence[Worktree], name: str) -> Optional[Worktree]:
    """Return the worktree with branch `name` checked out, or None.

    Raises:
        AmbiguousWorktreeError: If more than one worktree has the branch
    """
    matches = find_all_by_branch(worktrees, name)
    if len(matches) > 1:
        raise AmbiguousWorktreeError(name, [str(m.path) for m in matches])
    return matches[0] if matches else None


def find_by_path(worktrees: Iterable[Worktree], path: Union[str, Path]) -> Optional[Worktree]:
    """Return the worktree rooted at path, comparing canonicalized paths."""
    target = _canonical(path)
    for wt in worktrees:
        if _canonical(wt.path) == target:
            return wt
    return None


def branch_checked_out_elsewhere(
    worktrees: Iterable[Worktree], name: str, excluding_path: Union[str, Path]
) -> bool:
    """True if a worktree other than excluding_path has branch `name` checked out."""
    excluded = _canonical(excluding_path)
    return any(wt.branch == name and _canonical(wt.path) != excluded for wt in worktrees)


class WorktreeService:
    """Service for reading a repository's worktree set."""

    def __init__(self, git_ops: GitOperations):
        """Initialize the worktree service.

        Args:
            git_ops: Gateway bound to the repository
        """
        self.git_ops = git_ops

    def get_worktrees(self) -> List[Worktree]:
        """Fresh listing of all worktrees. Never cached."""
        return parse_porcelain(self.git_ops.list_worktrees())
