"""Command-line argument parsing for git-worktree-keeper."""

import argparse
from git_worktree_keeper.__version__ import __version__


def _add_repo_argument(parser):
    parser.add_argument("--repo", metavar="PATH", help="Repository path (default: the repository containing cwd)")


def build_parser():
    """Build the `wt` argument parser."""
    parser = argparse.ArgumentParser(
        prog="wt",
        description="Git worktree manager",
        epilog="Worktrees are created under ~/.worktrees/<repo>/<branch> (override with WT_ROOT).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"wt {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    new = subparsers.add_parser(
        "new",
        aliases=["n"],
        help="Create a worktree for a branch or ref",
        description="Create a worktree for a branch or ref. By default checks out an existing "
        "branch or ref; use --create to make a new branch from HEAD or from BASE.",
        epilog="Examples:\n  wt new feat/login\n  wt new -c feat/login\n  wt new -c feat/login develop",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    new.add_argument("name", help="Branch name or ref")
    new.add_argument("base", nargs="?", help="Start point for the created branch (requires --create)")
    new.add_argument("-c", "--create", action="store_true", help="Create a new branch")
    _add_repo_argument(new)

    switch = subparsers.add_parser(
        "switch",
        aliases=["s"],
        help="Switch to a worktree, creating one if needed",
        description="Print the worktree for a branch. If none exists, check the branch out "
        "into a new worktree, creating the branch from HEAD if it does not exist.",
        epilog='Examples:\n  cd "$(wt switch feat/login)"',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    switch.add_argument("name", help="Worktree branch name")
    _add_repo_argument(switch)

    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List worktrees")
    list_parser.add_argument("--porcelain", action="store_true", help="Machine-readable output")
    _add_repo_argument(list_parser)

    remove = subparsers.add_parser(
        "rm",
        aliases=["remove"],
        help="Remove worktrees by branch name or path",
        description="Remove linked worktrees by branch name or worktree root path, and delete "
        "their local branches. Every target is attempted; failures are reported at the end.",
        epilog="Examples:\n  wt rm feat/login\n  wt rm feat/a feat/b feat/c\n  wt rm feat/login --force",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    remove.add_argument("targets", nargs="+", metavar="TARGET", help="Branch names or worktree paths")
    remove.add_argument(
        "--force", action="store_true", help="Remove dirty worktrees and force-delete unmerged branches"
    )
    _add_repo_argument(remove)

    path = subparsers.add_parser("path", aliases=["p"], help="Print the path to a worktree")
    path.add_argument("name", help="Worktree branch name")
    _add_repo_argument(path)

    prune = subparsers.add_parser(
        "prune",
        help="Clean up stale, merged and orphaned worktrees",
        description="Remove stale worktree metadata, worktrees whose branch is merged into the "
        "default branch, and orphaned directories whose repository is gone. Without --repo, "
        "every repository under the managed root is pruned.",
        epilog="Examples:\n  wt prune\n  wt prune --gone\n  wt prune --dry-run\n  wt prune --repo /path/to/repo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    prune.add_argument("-n", "--dry-run", action="store_true", help="Show what would be done without doing it")
    prune.add_argument(
        "--gone", action="store_true", help="Also remove worktrees whose upstream branch is gone"
    )
    _add_repo_argument(prune)

    link = subparsers.add_parser(
        "link",
        aliases=["ln"],
        help="Link files from the primary worktree into linked worktrees",
    )
    link.add_argument("files", nargs="+", metavar="FILE", help="Files or directories to link")
    link.add_argument(
        "--force", action="store_true", help="Replace existing destinations that are not correct symlinks"
    )
    _add_repo_argument(link)

    return parser


COMMAND_ALIASES = {
    "n": "new",
    "s": "switch",
    "ls": "list",
    "remove": "rm",
    "p": "path",
    "ln": "link",
}


def parse_args(argv=None):
    """Parse command-line arguments, normalizing command aliases."""
    args = build_parser().parse_args(argv)
    args.command = COMMAND_ALIASES.get(args.command, args.command)
    return args
