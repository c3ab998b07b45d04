"""Removal of one or more worktrees and their branches."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from git_worktree_keeper.config import Config
from git_worktree_keeper.exceptions import (
    NotFoundError,
    PreconditionError,
    WorktreeKeeperError,
)
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.results import RemovalReport, TargetOutcome
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.services.git import (
    GitOperations,
    WorktreeService,
    branch_checked_out_elsewhere,
    find_by_branch,
    find_by_path,
)
from git_worktree_keeper.utils.paths import canonical, cwd_is_within, is_within, remove_empty_parents

logger = get_logger(__name__)


@dataclass
class ResolvedTarget:
    """A removal target pinned to its worktree and owning repository."""

    worktree: Worktree
    path: Path  # canonical worktree root
    admin_repo: Path
    worktrees: List[Worktree]


class RemoveEngine:
    """Validates and removes worktrees, one target at a time.

    Every target is attempted even when earlier ones fail; failures are
    collected into the report in target order.
    """

    def __init__(self, config: Union[Config, dict], repo: Optional[Union[str, Path]] = None):
        if isinstance(config, dict):
            config = Config.from_dict(config)
        self.config = config
        self.repo = Path(repo) if repo else None

    def _git(self, path: Path) -> GitOperations:
        return GitOperations(path, self.config)

    def remove(self, targets: Sequence[str], force: bool = False) -> RemovalReport:
        """Remove every target, accumulating per-target outcomes."""
        report = RemovalReport()
        for target in targets:
            try:
                message = self.remove_one(target, force=force)
            except WorktreeKeeperError as e:
                logger.debug(f"Cannot remove {target}: {e}")
                report.add(TargetOutcome(target=target, ok=False, message=e.message))
            else:
                report.add(TargetOutcome(target=target, ok=True, message=message))
        return report

    def remove_one(self, target: str, force: bool = False) -> str:
        """Resolve, validate and remove a single target.

        Returns:
            Description of what was removed

        Raises:
            WorktreeKeeperError: If the target cannot be resolved, fails
                validation, or git refuses the removal
        """
        resolved = self.resolve(target)
        git_ops = self._git(resolved.admin_repo)
        self.validate(resolved, git_ops, force=force)
        return self.execute(git_ops, resolved.worktree, force_worktree=force, force_branch=force)

    def resolve(self, target: str) -> ResolvedTarget:
        """Resolve a branch name or path to a registered worktree.

        Branch lookup runs first, against the repository given explicitly or
        found from the current directory; then path lookup.
        """
        repo_root = None
        try:
            repo_root = GitOperations.find_repo(self.repo)
        except NotFoundError:
            if self.repo is not None:
                raise

        candidate = Path(target).expanduser()

        if repo_root is not None:
            worktrees = WorktreeService(self._git(repo_root)).get_worktrees()
            wt = find_by_branch(worktrees, target)
            if wt is None and candidate.exists():
                wt = find_by_path(worktrees, candidate)
            if wt is not None:
                return ResolvedTarget(
                    worktree=wt,
                    path=canonical(wt.path),
                    admin_repo=worktrees[0].path,
                    worktrees=worktrees,
                )

        if candidate.exists():
            return self._resolve_path(candidate)

        if repo_root is not None:
            raise NotFoundError(f"no worktree found for branch: {target}")
        raise NotFoundError("not a git repository; use --repo or run inside one")

    def _resolve_path(self, candidate: Path) -> ResolvedTarget:
        """Resolve a path outside any known repository context; it must be a worktree root."""
        path = canonical(candidate)
        try:
            toplevel = GitOperations.find_repo(path)
        except NotFoundError:
            raise NotFoundError(f"not a worktree root: {candidate}")
        if canonical(toplevel) != path:
            raise NotFoundError(f"not a worktree root: {candidate}")

        worktrees = WorktreeService(self._git(path)).get_worktrees()
        wt = find_by_path(worktrees, path)
        if wt is None:
            raise NotFoundError(f"not a registered worktree: {candidate}")
        return ResolvedTarget(worktree=wt, path=path, admin_repo=worktrees[0].path, worktrees=worktrees)

    def validate(self, resolved: ResolvedTarget, git_ops: GitOperations, force: bool = False) -> None:
        """Check every removal precondition.

        Raises:
            PreconditionError: On the first violated precondition
        """
        wt = resolved.worktree
        path = resolved.path

        if wt.is_main:
            raise PreconditionError(f"cannot remove the primary worktree: {path}")

        if wt.branch:
            if not git_ops.has_local_branch(wt.branch):
                raise PreconditionError(f"local branch not found: {wt.branch}")
            if branch_checked_out_elsewhere(resolved.worktrees, wt.branch, path):
                raise PreconditionError(
                    f"branch '{wt.branch}' is checked out in another worktree; remove that worktree first"
                )

        if cwd_is_within(path):
            raise PreconditionError(f"cannot remove {path}: current directory is inside the worktree")

        if force:
            return

        if git_ops.is_dirty(path):
            raise PreconditionError(f"worktree has local changes; use --force to remove: {path}")
        if wt.branch and not git_ops.is_branch_merged(wt.branch):
            raise PreconditionError(f"branch '{wt.branch}' has unpushed commits; use --force to remove")

    def execute(
        self,
        git_ops: GitOperations,
        worktree: Worktree,
        force_worktree: bool = False,
        force_branch: bool = False,
    ) -> str:
        """Remove the worktree, tidy empty managed parents, then delete its branch.

        The branch is only deleted once the worktree is gone, since git refuses
        to delete a branch that is still checked out.

        Raises:
            ToolInvocationError: If git refuses either step
        """
        path = canonical(worktree.path)
        git_ops.remove_worktree(path, force=force_worktree)

        root = self.config.worktrees_root
        if is_within(path.parent, root):
            remove_empty_parents(path.parent, root)

        if worktree.branch:
            git_ops.delete_branch(worktree.branch, force=force_branch)
            return f"removed worktree and branch '{worktree.branch}' ({path})"
        return f"removed worktree ({path})"
