"""Logging setup for wt.

stdout is reserved for the paths that `wt new`, `wt switch` and `wt path`
print for the shell, so every handler writes to stderr or to the debug log.
"""
import logging
import sys
from pathlib import Path

LOG_DIR = Path.home() / '.git-worktree-keeper'
LOG_FILE_NAME = 'wt.log'
DEBUG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEBUG_DATEFMT = '%Y-%m-%d %H:%M:%S'
CONSOLE_FORMAT = '[%(name)s] %(message)s'


class ColoredFormatter(logging.Formatter):
    """Colors the level name when stderr is a terminal."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        if sys.stderr.isatty() and record.levelname in self.COLORS:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
        return super().format(record)


def level_for(verbose: bool = False, debug: bool = False) -> int:
    """WARNING by default, INFO with -v, DEBUG with --debug."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure the root logger for one wt invocation.

    Args:
        verbose: Show INFO messages (which git commands ran, what was removed)
        debug: Show DEBUG messages with timestamps and also write them to
            ~/.git-worktree-keeper/wt.log, overwritten on each run
    """
    level = level_for(verbose, debug)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if debug:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_DIR / LOG_FILE_NAME, mode='w')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(fmt=DEBUG_FORMAT, datefmt=DEBUG_DATEFMT))
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if debug:
        console_handler.setFormatter(ColoredFormatter(fmt=DEBUG_FORMAT, datefmt=DEBUG_DATEFMT))
    else:
        console_handler.setFormatter(ColoredFormatter(fmt=CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    # GitPython logs each command it spawns at DEBUG
    logging.getLogger('git').setLevel(logging.DEBUG if debug else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a wt module, named without the package prefix.

    'git_worktree_keeper.services.git.operations' becomes 'git.operations',
    which keeps console lines like '[core.pruner] ...' short.
    """
    for prefix in ('git_worktree_keeper.', 'services.'):
        if name.startswith(prefix):
            name = name[len(prefix):]
    return logging.getLogger(name)
