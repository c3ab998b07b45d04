"""Repository discovery under the managed root.

Used when prune runs without a repository: nothing tells us which
repositories own the directories under the root, so each worktree's link file
is read to find its way back to the owning repository.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set, Union

from git_worktree_keeper.constants import (
    ADMIN_DIR_NAME,
    ADMIN_WORKTREES_DIR_NAME,
    LINK_FILE_NAME,
    LINK_FILE_PREFIX,
)
from git_worktree_keeper.exceptions import DiscoveryWarning
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class DiscoveryResult:
    """Repositories and orphaned worktree directories found under the managed root."""

    repos: List[Path] = field(default_factory=list)
    orphans: List[Path] = field(default_factory=list)
    warnings: List[DiscoveryWarning] = field(default_factory=list)


def read_link_file(link_file: Path) -> Optional[Path]:
    """Return the admin directory a worktree's `.git` file points at.

    Relative targets are resolved against the worktree directory. Returns
    None if the file is unreadable or not a `gitdir:` line.
    """
    try:
        content = link_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {link_file}: {e}")
        return None

    lines = content.splitlines()
    if not lines or not lines[0].startswith(LINK_FILE_PREFIX):
        return None
    target = lines[0][len(LINK_FILE_PREFIX):].strip()
    if not target:
        return None

    gitdir = Path(target)
    if not gitdir.is_absolute():
        gitdir = link_file.parent / gitdir
    return gitdir


def repo_from_gitdir(gitdir: Path) -> Optional[Path]:
    """Map <repo>/.git/worktrees/<name> to <repo>."""
    worktrees_dir = gitdir.parent
    if worktrees_dir.name != ADMIN_WORKTREES_DIR_NAME:
        return None
    admin_dir = worktrees_dir.parent
    if admin_dir.name != ADMIN_DIR_NAME:
        return None
    return admin_dir.parent


class RepoDiscovery:
    """Walks the managed root without invoking git."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def discover(self) -> DiscoveryResult:
        """Enumerate owning repositories and orphaned worktree directories.

        A single unreadable worktree never aborts the walk; it becomes a
        warning and the directory is left alone.
        """
        repos: Set[Path] = set()
        result = DiscoveryResult()

        if not self.root.is_dir():
            logger.debug(f"Managed root {self.root} does not exist")
            return result

        self._scan(self.root, repos, result)
        result.repos = sorted(repos)
        result.orphans.sort()
        logger.debug(
            f"Discovered {len(result.repos)} repos, {len(result.orphans)} orphans, "
            f"{len(result.warnings)} warnings under {self.root}"
        )
        return result

    def _scan(self, directory: Path, repos: Set[Path], result: DiscoveryResult) -> None:
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            self._warn(result, directory, f"cannot read directory ({e.strerror or e})")
            return

        for entry in entries:
            # Symlinked directories are not followed; the root only holds real dirs
            if entry.is_symlink() or not entry.is_dir():
                continue

            link_file = entry / LINK_FILE_NAME
            if link_file.is_file():
                self._resolve_worktree(entry, link_file, repos, result)
            elif link_file.is_dir():
                # A standalone clone placed under the root; not ours to manage
                logger.debug(f"Skipping repository directory {entry}")
            else:
                # Repo namespace or an intermediate directory of a slash-named branch
                self._scan(entry, repos, result)

    def _resolve_worktree(
        self, worktree_dir: Path, link_file: Path, repos: Set[Path], result: DiscoveryResult
    ) -> None:
        gitdir = read_link_file(link_file)
        if gitdir is None:
            self._warn(result, link_file, "cannot parse link file, skipping")
            return

        if not gitdir.exists():
            logger.debug(f"Orphaned worktree {worktree_dir}: {gitdir} does not exist")
            result.orphans.append(worktree_dir)
            return

        repo = repo_from_gitdir(gitdir)
        if repo is None:
            self._warn(result, link_file, f"link file points outside a repository ({gitdir})")
            return

        repos.add(repo.resolve())

    @staticmethod
    def _warn(result: DiscoveryResult, path: Path, reason: str) -> None:
        warning = DiscoveryWarning(path=path, reason=reason)
        logger.debug(str(warning))
        result.warnings.append(warning)
