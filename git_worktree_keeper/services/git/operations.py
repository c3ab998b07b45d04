"""Git operations gateway"""

import os
from pathlib import Path
from typing import Optional, Set, Tuple, Union, TYPE_CHECKING

import git

from git_worktree_keeper.constants import LOCAL_BRANCH_PREFIX, REMOTE_BRANCH_PREFIX
from git_worktree_keeper.exceptions import NotFoundError, ToolInvocationError
from git_worktree_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)


class GitOperations:
    """Thin wrapper over the git commands the keeper needs.

    Every call blocks until git exits. Queries return plain values; mutations
    raise ToolInvocationError carrying git's own stderr.
    """

    def __init__(self, repo_path: Union[str, Path], config: Optional[Union["Config", dict]] = None):
        """Initialize the service.

        Args:
            repo_path: Path to the repository (administrative root or any worktree of it)
            config: Configuration dictionary or Config object
        """
        self.repo_path = Path(repo_path)
        config = config or {}
        self.remote_name = config.get("remote_name", "origin")
        self.fallback_base_branches = config.get("fallback_base_branches", ["main", "master"])

    def _get_repo(self):
        """Get a fresh git.Repo instance.

        GitPython repos are lightweight - they don't clone, just open the existing repo.

        Returns:
            git.Repo: A fresh repository instance

        Raises:
            NotFoundError: If repo_path is not a git repository
        """
        try:
            return git.Repo(self.repo_path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise NotFoundError(f"not a git repository: {self.repo_path}") from e

    @staticmethod
    def find_repo(path: Optional[Union[str, Path]] = None) -> Path:
        """Return the top-level directory of the repository containing path (or cwd).

        Raises:
            NotFoundError: If path is not inside a git repository
        """
        where = str(path) if path else os.getcwd()
        try:
            toplevel = git.Git(where).rev_parse("--show-toplevel")
        except (git.exc.GitCommandError, git.exc.GitCommandNotFound) as e:
            logger.debug(f"No repository at {where}: {e}")
            raise NotFoundError("not a git repository; use --repo or run inside one") from e
        return Path(toplevel.strip())

    def _check(self, *args) -> bool:
        """Run a git query and report whether it exited 0."""
        try:
            self._get_repo().git.execute(["git", *args])
            return True
        except git.exc.GitCommandError:
            return False

    def _query(self, *args) -> Optional[str]:
        """Run a git query and return stdout, or None if it failed."""
        try:
            return self._get_repo().git.execute(["git", *args])
        except git.exc.GitCommandError as e:
            logger.debug(f"git {' '.join(args)} failed: {e}")
            return None

    def _mutate(self, operation: str, *args) -> str:
        """Run a mutating git command, raising ToolInvocationError on failure."""
        try:
            output = self._get_repo().git.execute(["git", *args])
        except git.exc.GitCommandError as e:
            error = ToolInvocationError.from_command_error(operation, e)
            logger.error(f"git {' '.join(args)} failed (exit {error.status}): {error.detail}")
            raise error from e
        logger.debug(f"git {' '.join(args)} succeeded")
        return output

    # Refs and remotes

    def ref_exists(self, refname: str) -> bool:
        return self._check("show-ref", "--verify", "--quiet", refname)

    def has_local_branch(self, name: str) -> bool:
        return self.ref_exists(f"{LOCAL_BRANCH_PREFIX}{name}")

    def has_remote_branch(self, name: str) -> bool:
        return self.ref_exists(f"{REMOTE_BRANCH_PREFIX}{self.remote_name}/{name}")

    def rev_resolves(self, rev: str) -> bool:
        return self._check("rev-parse", "--verify", "--quiet", rev)

    def has_remote(self, name: Optional[str] = None) -> bool:
        """Check whether the given (or configured) remote exists."""
        return self._check("remote", "get-url", name or self.remote_name)

    def fetch_remote(self, name: str) -> None:
        """Fetch and prune remote-tracking refs of a single remote."""
        logger.info(f"Fetching {name} in {self.repo_path}")
        self._mutate(f"cannot fetch from '{name}'", "fetch", "--prune", "--quiet", name)

    def base_ref(self) -> Optional[str]:
        """Resolve the remote integration branch, e.g. 'origin/main'.

        Tries <remote>/HEAD first, then each fallback branch name.
        """
        prefix = f"{REMOTE_BRANCH_PREFIX}{self.remote_name}/"
        head_ref = self._query("symbolic-ref", "--quiet", f"{prefix}HEAD")
        if head_ref:
            head_ref = head_ref.strip()
            if head_ref.startswith(prefix) and self.ref_exists(head_ref):
                return f"{self.remote_name}/{head_ref[len(prefix):]}"

        for name in self.fallback_base_branches:
            if self.ref_exists(f"{prefix}{name}"):
                return f"{self.remote_name}/{name}"

        logger.debug(f"Cannot determine default branch for {self.repo_path}")
        return None

    def merged_branches(self, base: str) -> Set[str]:
        """Local branches whose tips are reachable from base."""
        output = self._query("branch", "--format=%(refname:short)", f"--merged={base}")
        if not output:
            return set()
        return {line.strip() for line in output.splitlines() if line.strip()}

    def upstream_for(self, branch: str) -> Optional[str]:
        """Short name of the branch's configured upstream, e.g. 'origin/feature'."""
        output = self._query(
            "for-each-ref", "--format=%(upstream:short)", f"{LOCAL_BRANCH_PREFIX}{branch}"
        )
        upstream = (output or "").strip()
        return upstream or None

    def branch_remote(self, branch: str) -> Optional[str]:
        """Remote configured for a branch, or None for untracked/local-tracking branches."""
        output = self._query("config", "--get", f"branch.{branch}.remote")
        remote = (output or "").strip()
        if not remote or remote == ".":
            return None
        return remote

    def is_upstream_gone(self, branch: str) -> bool:
        """True if the branch tracks a remote branch that no longer exists."""
        if self.branch_remote(branch) is None:
            return False
        upstream = self.upstream_for(branch)
        if upstream is None:
            # Configured but git can no longer name it: the remote ref is gone
            return True
        return not self.rev_resolves(upstream)

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        return self._check("merge-base", "--is-ancestor", ancestor, descendant)

    def is_branch_merged(self, branch: str) -> bool:
        """Merged into its upstream when that resolves, otherwise into HEAD."""
        branch_ref = f"{LOCAL_BRANCH_PREFIX}{branch}"
        upstream = self.upstream_for(branch)
        if upstream and self.rev_resolves(upstream):
            return self.is_ancestor(branch_ref, upstream)
        return self.is_ancestor(branch_ref, "HEAD")

    def ahead_behind(self, branch: str) -> Optional[Tuple[int, int]]:
        """(ahead, behind) relative to the branch's upstream, or None."""
        output = self._query("rev-list", "--left-right", "--count", f"{branch}@{{upstream}}...{branch}")
        if not output:
            return None
        parts = output.split()
        if len(parts) != 2:
            return None
        try:
            behind, ahead = int(parts[0]), int(parts[1])
        except ValueError:
            return None
        return ahead, behind

    # Worktrees

    def list_worktrees(self) -> str:
        """Raw `git worktree list --porcelain` output."""
        return self._mutate("cannot list worktrees", "worktree", "list", "--porcelain")

    def is_dirty(self, worktree_path: Union[str, Path]) -> bool:
        """Check for uncommitted changes.

        Runs inside the worktree itself, not the administrative root, since
        status reflects the working directory git is invoked in. A worktree
        whose status cannot be read counts as dirty.
        """
        try:
            status = self._get_repo().git.execute(
                ["git", "-C", str(worktree_path), "status", "--porcelain", "--untracked-files=normal"]
            )
        except git.exc.GitCommandError as e:
            logger.warning(f"Could not check worktree status for {worktree_path}: {e}")
            return True
        return bool(status.strip())

    def add_worktree(self, branch: str, dest: Path, base: Optional[str] = None) -> None:
        """Create a new branch checked out at dest."""
        args = ["worktree", "add", "--quiet", "-b", branch, str(dest)]
        if base:
            args.append(base)
        self._mutate("cannot create worktree", *args)
        logger.info(f"Created worktree for new branch {branch} at {dest}")

    def checkout_worktree(self, ref: str, dest: Path) -> None:
        """Check out an existing branch or ref at dest."""
        self._mutate("cannot create worktree", "worktree", "add", "--quiet", str(dest), ref)
        logger.info(f"Checked out {ref} at {dest}")

    def remove_worktree(self, path: Union[str, Path], force: bool = False) -> None:
        args = ["worktree", "remove"]
        if force:
            args.append("--force")
        args.append(str(path))
        self._mutate(f"cannot remove worktree: {path}", *args)
        logger.info(f"Removed worktree at {path}")

    def delete_branch(self, branch: str, force: bool = False) -> None:
        flag = "-D" if force else "-d"
        action = "force-delete" if force else "delete"
        self._mutate(
            f"worktree removed but cannot {action} branch '{branch}'",
            "branch", flag, "--quiet", branch,
        )
        logger.info(f"Deleted branch {branch}")

    def prune_worktrees(self, dry_run: bool = False) -> str:
        """Prune stale worktree metadata; returns git's verbose report."""
        args = ["worktree", "prune", "--verbose"]
        if dry_run:
            args.append("--dry-run")
        try:
            _, _, stderr = self._get_repo().git.execute(["git", *args], with_extended_output=True)
        except git.exc.GitCommandError as e:
            raise ToolInvocationError.from_command_error("cannot prune worktree metadata", e) from e
        logger.info(f"Pruned worktree metadata in {self.repo_path}")
        return stderr.strip()
