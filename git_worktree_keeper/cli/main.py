"""Command-line interface for git-worktree-keeper"""

import sys

from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.config import Config
from git_worktree_keeper.core import WorktreeKeeper
from git_worktree_keeper.exceptions import AmbiguousWorktreeError, UsageError, WorktreeKeeperError
from git_worktree_keeper.logging_config import get_logger, setup_logging
from git_worktree_keeper.services.display_service import DisplayService

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _run_new(keeper, args, display):
    path, created = keeper.create(args.name, base=args.base, create_branch=args.create)
    display.message(f"creating branch '{args.name}'" if created else f"checking out '{args.name}'")
    display.print_path(path)
    return EXIT_OK


def _run_switch(keeper, args, display):
    path, created = keeper.switch(args.name)
    if created is not None:
        display.message(f"creating branch '{args.name}'" if created else f"checking out '{args.name}'")
    display.print_path(path)
    return EXIT_OK


def _run_list(keeper, args, display):
    if args.porcelain:
        display.print_raw(keeper.porcelain())
    else:
        display.display_worktree_table(keeper.list_worktrees())
    return EXIT_OK


def _run_rm(keeper, args, display):
    report = keeper.remove(args.targets, force=args.force)
    display.display_removal_report(report)
    return EXIT_OK if report.ok else EXIT_FAILURE


def _run_path(keeper, args, display):
    display.print_path(keeper.locate(args.name))
    return EXIT_OK


def _run_prune(keeper, args, display):
    report = keeper.prune(dry_run=args.dry_run, include_gone=args.gone)
    display.display_prune_report(report)
    return EXIT_OK if report.ok else EXIT_FAILURE


def _run_link(keeper, args, display):
    outcomes = keeper.link(args.files, force=args.force)
    if not outcomes:
        display.message("no linked worktrees")
    display.display_outcomes(outcomes)
    return EXIT_OK if all(o.ok for o in outcomes) else EXIT_FAILURE


COMMANDS = {
    "new": _run_new,
    "switch": _run_switch,
    "list": _run_list,
    "rm": _run_rm,
    "path": _run_path,
    "prune": _run_prune,
    "link": _run_link,
}


def main(argv=None):
    """Main entry point for the application."""
    # argparse exits with status 2 on a malformed invocation
    parsed_args = parse_args(argv)

    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)
    display = DisplayService(verbose=parsed_args.verbose, debug=parsed_args.debug)

    try:
        config = Config(
            dry_run=getattr(parsed_args, "dry_run", False),
            force=getattr(parsed_args, "force", False),
            include_gone=getattr(parsed_args, "gone", False),
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
        )
        if parsed_args.debug:
            for key, value in config.to_dict().items():
                logger.debug(f"config {key}: {value}")

        keeper = WorktreeKeeper(config, repo=parsed_args.repo)
        return COMMANDS[parsed_args.command](keeper, parsed_args, display)
    except UsageError as e:
        display.error(e.message)
        return EXIT_USAGE
    except AmbiguousWorktreeError as e:
        display.error(e.message)
        for path in e.paths:
            display.message(f"  {path}")
        return EXIT_FAILURE
    except WorktreeKeeperError as e:
        display.error(e.message)
        return EXIT_FAILURE
    except ValueError as e:
        # Config validation
        display.error(str(e))
        return EXIT_USAGE
    except KeyboardInterrupt:
        display.error("operation cancelled by user")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
