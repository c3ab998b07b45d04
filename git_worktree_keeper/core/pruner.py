"""Pruning of stale, merged, upstream-gone and orphaned worktrees.

Pruning is split in two: `plan` reads git and the filesystem and returns a
PrunePlan without touching anything, `apply` executes a plan. Dry-run is
`plan` alone, so what it reports is exactly what `apply` would do. Every run
recomputes the plan from scratch, which makes a second run a no-op.
"""

import shutil
from pathlib import Path
from typing import List, Optional, Set, Union

from git_worktree_keeper.config import Config
from git_worktree_keeper.core.remover import RemoveEngine
from git_worktree_keeper.exceptions import ToolInvocationError, WorktreeKeeperError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.results import (
    ActionKind,
    PruneAction,
    PrunePlan,
    PruneReport,
    SkippedWorktree,
    TargetOutcome,
)
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.services.discovery import RepoDiscovery
from git_worktree_keeper.services.git import GitOperations, WorktreeService
from git_worktree_keeper.utils.paths import canonical, cwd_is_within, is_within, remove_empty_parents

logger = get_logger(__name__)


class PruneEngine:
    """Plans and applies prune runs, scoped to one repository or global."""

    def __init__(self, config: Union[Config, dict], repo: Optional[Union[str, Path]] = None):
        if isinstance(config, dict):
            config = Config.from_dict(config)
        self.config = config
        self.repo = Path(repo) if repo else None
        self.root = Path(config.worktrees_root)

    def _git(self, path: Path) -> GitOperations:
        return GitOperations(path, self.config)

    def run(self, dry_run: Optional[bool] = None, include_gone: Optional[bool] = None) -> PruneReport:
        """Plan, then apply unless in dry-run."""
        dry_run = self.config.dry_run if dry_run is None else dry_run
        include_gone = self.config.include_gone if include_gone is None else include_gone

        # Dry-run never fetches
        plan = self.plan(include_gone=include_gone, fetch=include_gone and not dry_run)
        if dry_run:
            return PruneReport(plan=plan, dry_run=True, errors=list(plan.errors))
        return self.apply(plan)

    # Plan

    def plan(self, include_gone: bool = False, fetch: bool = False) -> PrunePlan:
        """Compute every prune action without performing any of them.

        Args:
            include_gone: Also plan removal of worktrees whose upstream is gone
            fetch: Fetch each referenced remote once before checking upstreams

        Raises:
            NotFoundError: If an explicit repository is not a git repository
        """
        if self.repo is not None:
            repo_root = GitOperations.find_repo(self.repo)
            return self.plan_repo(repo_root, include_gone=include_gone, fetch=fetch)

        plan = PrunePlan()
        if not self.root.is_dir():
            logger.debug(f"Managed root {self.root} does not exist; nothing to prune")
            return plan

        discovery = RepoDiscovery(self.root).discover()
        plan.warnings.extend(str(w) for w in discovery.warnings)

        # Strictly sequential: one repository at a time
        for repo in discovery.repos:
            if not repo.exists():
                # Its worktrees were already collected as orphans
                continue
            try:
                plan.extend(self.plan_repo(repo, include_gone=include_gone, fetch=fetch))
            except WorktreeKeeperError as e:
                logger.debug(f"Cannot plan prune for {repo}: {e}")
                plan.errors.append(f"cannot prune {repo}: {e.message}")

        for orphan in discovery.orphans:
            if cwd_is_within(orphan):
                plan.skipped.append(
                    SkippedWorktree(orphan, None, "current directory is inside the worktree")
                )
                continue
            plan.actions.append(
                PruneAction(kind=ActionKind.ORPHAN, path=orphan, detail="backing repository is gone")
            )

        return plan

    def plan_repo(self, repo_root: Path, include_gone: bool = False, fetch: bool = False) -> PrunePlan:
        """Plan stale, merged and (optionally) gone cleanup for one repository."""
        plan = PrunePlan()
        worktrees = WorktreeService(self._git(repo_root)).get_worktrees()
        if not worktrees:
            return plan

        admin = worktrees[0].path
        git_ops = self._git(admin)
        linked = worktrees[1:]

        for wt in linked:
            if wt.prunable and not wt.locked:
                plan.actions.append(
                    PruneAction(
                        kind=ActionKind.STALE,
                        path=wt.path,
                        repo=admin,
                        branch=wt.branch,
                        detail="worktree directory is missing",
                    )
                )

        candidates = [wt for wt in linked if wt.branch and not wt.prunable]
        planned: Set[str] = set()

        if not git_ops.has_remote():
            logger.info(f"No '{self.config.remote_name}' remote in {admin}; skipping merged worktrees")
        else:
            base = git_ops.base_ref()
            if base is None:
                plan.warnings.append(
                    f"warning: cannot determine default branch for {admin}; skipping merged worktrees"
                )
            else:
                base_branch = base.split("/", 1)[1]
                merged = git_ops.merged_branches(base)
                for wt in candidates:
                    if wt.branch in merged and wt.branch != base_branch:
                        self._plan_removal(plan, git_ops, wt, ActionKind.MERGED, admin, f"merged into {base}")
                        planned.add(wt.branch)

        if include_gone:
            remaining = [wt for wt in candidates if wt.branch not in planned]
            if fetch:
                plan.errors.extend(self._fetch_remotes(git_ops, remaining))
            for wt in remaining:
                if git_ops.is_upstream_gone(wt.branch):
                    upstream = git_ops.upstream_for(wt.branch) or "upstream"
                    self._plan_removal(
                        plan, git_ops, wt, ActionKind.GONE, admin, f"{upstream} is gone", require_merged=True
                    )

        return plan

    def _plan_removal(
        self,
        plan: PrunePlan,
        git_ops: GitOperations,
        wt: Worktree,
        kind: ActionKind,
        admin: Path,
        detail: str,
        require_merged: bool = False,
    ) -> bool:
        """Add a removal action unless the worktree must be left alone.

        With require_merged, a branch that explicit removal would refuse as
        unmerged is skipped too; its upstream no longer holds its commits.
        """
        path = canonical(wt.path)
        reason = None
        if wt.locked:
            reason = "worktree is locked"
        elif cwd_is_within(path):
            reason = "current directory is inside the worktree"
        elif git_ops.is_dirty(path):
            # Prune never discards local changes, force or not
            reason = "worktree has local changes"
        elif require_merged and not git_ops.is_branch_merged(wt.branch):
            reason = "branch has unpushed commits"

        if reason:
            logger.info(f"Skipping {wt.branch} ({kind.value}) at {path}: {reason}")
            plan.skipped.append(SkippedWorktree(path, wt.branch, reason))
            return False

        plan.actions.append(PruneAction(kind=kind, path=path, repo=admin, branch=wt.branch, detail=detail))
        return True

    @staticmethod
    def _fetch_remotes(git_ops: GitOperations, worktrees: List[Worktree]) -> List[str]:
        """Fetch each remote referenced by the worktrees' branches exactly once."""
        remotes: List[str] = []
        for wt in worktrees:
            remote = git_ops.branch_remote(wt.branch)
            if remote and remote not in remotes:
                remotes.append(remote)

        errors = []
        for remote in remotes:
            try:
                git_ops.fetch_remote(remote)
            except ToolInvocationError as e:
                errors.append(e.message)
        return errors

    # Apply

    def apply(self, plan: PrunePlan) -> PruneReport:
        """Execute a plan. A failing action never stops the rest."""
        report = PruneReport(plan=plan, dry_run=False, errors=list(plan.errors))
        remover = RemoveEngine(self.config)
        pruned_repos: Set[Path] = set()

        for action in plan.actions:
            try:
                message = self._apply_action(action, remover, pruned_repos)
            except WorktreeKeeperError as e:
                logger.debug(f"Prune action failed for {action.path}: {e}")
                report.outcomes.append(TargetOutcome(target=str(action.path), ok=False, message=e.message))
            except OSError as e:
                report.outcomes.append(
                    TargetOutcome(
                        target=str(action.path),
                        ok=False,
                        message=f"cannot remove {action.path}: {e.strerror or e}",
                    )
                )
            else:
                report.outcomes.append(TargetOutcome(target=str(action.path), ok=True, message=message))

        return report

    def _apply_action(self, action: PruneAction, remover: RemoveEngine, pruned_repos: Set[Path]) -> str:
        if action.kind is ActionKind.ORPHAN:
            shutil.rmtree(action.path)
            logger.info(f"Removed orphaned directory {action.path}")
            remove_empty_parents(action.path.parent, self.root)
            return f"removed {action.describe()}"

        git_ops = self._git(action.repo)

        if action.kind is ActionKind.STALE:
            # One `git worktree prune` clears every stale entry of the repository
            if action.repo not in pruned_repos:
                git_ops.prune_worktrees()
                pruned_repos.add(action.repo)
            if is_within(action.path.parent, self.root):
                remove_empty_parents(action.path.parent, self.root)
            return f"pruned {action.describe()}"

        # Branches were checked for unpushed commits while planning, so deletion
        # is forced. Worktree removal is not: git still refuses a tree that
        # became dirty after planning.
        remover.execute(
            git_ops,
            Worktree(path=action.path, branch=action.branch),
            force_worktree=False,
            force_branch=True,
        )
        return f"removed {action.describe()}"
