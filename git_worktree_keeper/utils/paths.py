"""Path helpers shared by removal and pruning."""

import os
from pathlib import Path
from typing import List, Optional, Union

from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


def canonical(path: Union[str, Path]) -> Path:
    """Resolve symlinks and relative segments without requiring the path to exist."""
    return Path(os.path.realpath(os.fspath(path)))


def is_within(path: Union[str, Path], root: Union[str, Path]) -> bool:
    """True if path equals root or lies beneath it (after canonicalization)."""
    path, root = canonical(path), canonical(root)
    return path == root or root in path.parents


def current_dir() -> Optional[Path]:
    try:
        return canonical(os.getcwd())
    except OSError:
        # cwd was deleted underneath us
        return None


def cwd_is_within(path: Union[str, Path]) -> bool:
    cwd = current_dir()
    return cwd is not None and is_within(cwd, path)


def remove_empty_parents(start: Union[str, Path], root: Union[str, Path]) -> List[Path]:
    """Remove start and its ancestors while empty, stopping below root.

    Never removes root itself, a directory outside root, a non-empty
    directory, or a directory containing the current working directory.

    Returns:
        Directories removed, deepest first
    """
    root = canonical(root)
    directory = canonical(start)
    removed = []

    while directory != root and root in directory.parents:
        if cwd_is_within(directory):
            break
        try:
            if any(directory.iterdir()):
                break
            directory.rmdir()
        except FileNotFoundError:
            # Already gone; keep climbing
            pass
        except OSError as e:
            logger.debug(f"Cannot remove {directory}: {e}")
            break
        else:
            removed.append(directory)
            logger.info(f"Removed empty directory {directory}")
        directory = directory.parent

    return removed
