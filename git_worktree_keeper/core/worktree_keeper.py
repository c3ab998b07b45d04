"""Core functionality for git-worktree-keeper"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from git_worktree_keeper.config import Config
from git_worktree_keeper.core.linker import link_files
from git_worktree_keeper.core.pruner import PruneEngine
from git_worktree_keeper.core.remover import RemoveEngine
from git_worktree_keeper.exceptions import NotFoundError, PreconditionError, UsageError, WorktreeKeeperError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.results import PruneReport, RemovalReport, TargetOutcome
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.services.git import GitOperations, WorktreeService, find_by_branch
from git_worktree_keeper.utils.paths import cwd_is_within, remove_empty_parents

logger = get_logger(__name__)


@dataclass
class WorktreeRow:
    """One line of `wt list`."""

    worktree: Worktree
    state: str
    is_current: bool


class WorktreeKeeper:
    """Main class for managing git worktrees under the managed root."""

    def __init__(self, config: Union[Config, dict], repo: Optional[Union[str, Path]] = None):
        """Initialize WorktreeKeeper.

        Args:
            config: Configuration dict or Config object
            repo: Explicit repository path; when None the repository is found from cwd
        """
        if isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.repo = Path(repo) if repo else None
        self.root = Path(self.config.worktrees_root)

    def _open(self) -> Tuple[GitOperations, List[Worktree]]:
        """Locate the repository and read a fresh worktree listing."""
        repo_root = GitOperations.find_repo(self.repo)
        git_ops = GitOperations(repo_root, self.config)
        return git_ops, WorktreeService(git_ops).get_worktrees()

    @staticmethod
    def repo_name(worktrees: Sequence[Worktree]) -> str:
        """Name of the repository's namespace under the managed root."""
        name = worktrees[0].path.name if worktrees else ""
        if name.endswith(".git") and len(name) > len(".git"):
            name = name[: -len(".git")]
        return name or "repo"

    def destination_for(self, worktrees: Sequence[Worktree], branch: str) -> Path:
        return self.root / self.repo_name(worktrees) / branch

    # Create

    def create(self, name: str, base: Optional[str] = None, create_branch: bool = False) -> Tuple[Path, bool]:
        """Create a worktree for `name` under the managed root.

        Returns:
            (path, created) where created tells whether a new branch was made

        Raises:
            UsageError: If base is given without create_branch
            PreconditionError: If the branch is already checked out, the
                destination exists, or the branch to create already exists
        """
        if base and not create_branch:
            raise UsageError("a start point requires --create")

        git_ops, worktrees = self._open()
        existing = find_by_branch(worktrees, name)
        if existing is not None:
            raise PreconditionError(f"branch '{name}' is already checked out at {existing.path}")

        dest = self.destination_for(worktrees, name)
        if dest.exists():
            raise PreconditionError(f"path already exists: {dest}")

        if create_branch and git_ops.has_local_branch(name):
            raise PreconditionError(f"cannot create branch '{name}': already exists; use 'wt new {name}'")

        self._add(git_ops, name, dest, base=base, create_branch=create_branch)
        return dest, create_branch

    def switch(self, name: str) -> Tuple[Path, Optional[bool]]:
        """Return the worktree for branch `name`, creating one if needed.

        Returns:
            (path, created) where created is None if the worktree already
            existed, True if a new branch was made, False if an existing
            branch was checked out
        """
        git_ops, worktrees = self._open()
        existing = find_by_branch(worktrees, name)
        if existing is not None:
            return existing.path, None

        is_branch = git_ops.has_local_branch(name) or git_ops.has_remote_branch(name)
        if not is_branch and git_ops.rev_resolves(name):
            raise PreconditionError(f"'{name}' is not a branch; use 'wt new {name}' for tags and commits")

        dest = self.destination_for(worktrees, name)
        if dest.exists():
            raise PreconditionError(f"path already exists: {dest}")

        create_branch = not is_branch
        self._add(git_ops, name, dest, create_branch=create_branch)
        return dest, create_branch

    def _add(
        self, git_ops: GitOperations, name: str, dest: Path, base: Optional[str] = None, create_branch: bool = False
    ) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            if create_branch:
                git_ops.add_worktree(name, dest, base)
            else:
                git_ops.checkout_worktree(name, dest)
        except WorktreeKeeperError:
            remove_empty_parents(dest.parent, self.root)
            raise

    # Queries

    def list_worktrees(self) -> List[WorktreeRow]:
        git_ops, worktrees = self._open()
        rows = []
        for wt in worktrees:
            rows.append(
                WorktreeRow(
                    worktree=wt,
                    state=self.worktree_state(git_ops, wt),
                    is_current=cwd_is_within(wt.path),
                )
            )
        return rows

    def porcelain(self) -> str:
        return GitOperations(GitOperations.find_repo(self.repo), self.config).list_worktrees()

    @staticmethod
    def worktree_state(git_ops: GitOperations, wt: Worktree) -> str:
        """Compact state: '*' dirty, '+N'/'-N' ahead/behind, then flags."""
        if wt.bare:
            return "bare"

        state = ""
        if not wt.prunable and git_ops.is_dirty(wt.path):
            state += "*"
        if wt.branch:
            counts = git_ops.ahead_behind(wt.branch)
            if counts:
                ahead, behind = counts
                if ahead:
                    state += f"+{ahead}"
                if behind:
                    state += f"-{behind}"

        flags = [name for name, on in (("detached", wt.detached), ("locked", wt.locked), ("prunable", wt.prunable)) if on]
        if state and flags:
            state += ","
        state += ",".join(flags)
        return state or "-"

    def locate(self, name: str) -> Path:
        """Path of the worktree with branch `name` checked out.

        Raises:
            NotFoundError: If no worktree has the branch
            AmbiguousWorktreeError: If more than one does
        """
        _, worktrees = self._open()
        wt = find_by_branch(worktrees, name)
        if wt is None:
            raise NotFoundError(f"no worktree found for branch: {name}")
        return wt.path

    # Mutations

    def remove(self, targets: Sequence[str], force: Optional[bool] = None) -> RemovalReport:
        force = self.config.force if force is None else force
        return RemoveEngine(self.config, repo=self.repo).remove(targets, force=force)

    def prune(self, dry_run: Optional[bool] = None, include_gone: Optional[bool] = None) -> PruneReport:
        return PruneEngine(self.config, repo=self.repo).run(dry_run=dry_run, include_gone=include_gone)

    def link(self, files: Sequence[str], force: Optional[bool] = None) -> List[TargetOutcome]:
        force = self.config.force if force is None else force
        _, worktrees = self._open()
        return link_files(worktrees, files, force=force)
