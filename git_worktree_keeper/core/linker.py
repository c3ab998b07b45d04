"""Symlinking shared files from the primary worktree into linked worktrees."""

import os
import shutil
from pathlib import Path, PurePath
from typing import List, Sequence

from git_worktree_keeper.exceptions import NotFoundError, UsageError
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.results import TargetOutcome
from git_worktree_keeper.models.worktree import Worktree

logger = get_logger(__name__)


def validate_link_path(file: str) -> None:
    """Reject absolute paths and paths escaping the worktree."""
    path = PurePath(file)
    if path.is_absolute():
        raise UsageError(f"path must be relative: {file}")
    if ".." in path.parts:
        raise UsageError(f"path must not contain '..': {file}")


def _is_expected_link(dest: Path, source: Path) -> bool:
    try:
        return Path(os.readlink(dest)) == source
    except OSError:
        return False


def _remove_dest(dest: Path) -> None:
    if dest.is_dir() and not dest.is_symlink():
        shutil.rmtree(dest)
    else:
        dest.unlink()


def link_files(worktrees: Sequence[Worktree], files: Sequence[str], force: bool = False) -> List[TargetOutcome]:
    """Link each file from the primary worktree into every linked worktree.

    Correct links are left as they are. Other existing destinations are
    skipped unless force is set, in which case they are replaced.

    Raises:
        UsageError: If a path is absolute or contains '..'
        NotFoundError: If a source does not exist in the primary worktree
    """
    if not worktrees:
        raise NotFoundError("no worktrees found")
    primary = worktrees[0].path

    for file in files:
        validate_link_path(file)
        if not (primary / file).exists():
            raise NotFoundError(f"not found in primary worktree: {file}")

    outcomes: List[TargetOutcome] = []
    for wt in worktrees[1:]:
        for file in files:
            source = primary / file
            dest = wt.path / file
            target = f"{file} ({wt.path})"

            if os.path.lexists(dest):
                if _is_expected_link(dest, source):
                    logger.debug(f"{dest} already links to {source}")
                    continue
                if not force:
                    outcomes.append(TargetOutcome(target, True, f"skipped {target}: already exists"))
                    continue
                try:
                    _remove_dest(dest)
                except OSError as e:
                    outcomes.append(TargetOutcome(target, False, f"cannot remove {target}: {e.strerror or e}"))
                    continue

            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                dest.symlink_to(source, target_is_directory=source.is_dir())
            except OSError as e:
                outcomes.append(TargetOutcome(target, False, f"cannot link {target}: {e.strerror or e}"))
                continue
            logger.info(f"Linked {source} -> {dest}")
            outcomes.append(TargetOutcome(target, True, f"linked {target}"))

    return outcomes
