"""Display and formatting service for worktree information"""
from pathlib import Path
from typing import List, Sequence, Union, TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.text import Text

from git_worktree_keeper.constants import DETACHED_LABEL, HEAD_WIDTH, LIST_COLUMNS, MESSAGE_PREFIX
from git_worktree_keeper.logging_config import get_logger
from git_worktree_keeper.models.results import PruneReport, RemovalReport, TargetOutcome

if TYPE_CHECKING:
    from git_worktree_keeper.core.worktree_keeper import WorktreeRow

# stdout carries paths and tables only; everything else goes to stderr
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)
logger = get_logger(__name__)


class DisplayService:
    def __init__(self, verbose: bool = False, debug: bool = False):
        self.verbose = verbose
        self.debug_mode = debug

    def message(self, text: str) -> None:
        """Write a `wt: `-prefixed diagnostic to stderr."""
        err_console.print(Text(f"{MESSAGE_PREFIX}{text}"), soft_wrap=True)

    def error(self, text: str) -> None:
        err_console.print(Text(f"{MESSAGE_PREFIX}{text}", style="red"), soft_wrap=True)

    def print_path(self, path: Union[str, Path]) -> None:
        """Write exactly one path to stdout, unwrapped and unstyled."""
        console.print(Text(str(path)), soft_wrap=True)

    def print_raw(self, text: str) -> None:
        console.print(Text(text), soft_wrap=True, end="" if text.endswith("\n") else "\n")

    def display_worktree_table(self, rows: Sequence["WorktreeRow"]) -> None:
        """Display a table of worktrees; rich sizes the columns to the terminal."""
        table = Table(box=None, pad_edge=False, show_edge=False)
        table.add_column(LIST_COLUMNS[0], width=1, no_wrap=True)
        table.add_column(LIST_COLUMNS[1], min_width=14, max_width=24, overflow="ellipsis", no_wrap=True)
        table.add_column(LIST_COLUMNS[2], width=HEAD_WIDTH, no_wrap=True)
        table.add_column(LIST_COLUMNS[3], max_width=12, overflow="ellipsis", no_wrap=True)
        table.add_column(LIST_COLUMNS[4], overflow="fold")

        for row in rows:
            wt = row.worktree
            table.add_row(
                "*" if row.is_current else "",
                wt.branch or DETACHED_LABEL,
                wt.short_head,
                row.state,
                str(wt.path),
                style="bold" if row.is_current else None,
            )

        console.print(table)

    def display_removal_report(self, report: RemovalReport) -> None:
        """One line per target, failures included, in target order."""
        for outcome in report.outcomes:
            if outcome.ok:
                self.message(outcome.message)
            else:
                self.error(outcome.message)

        failed = len(report.failures)
        if failed and len(report.outcomes) > 1:
            self.error(f"{failed} worktree(s) could not be removed")

    def display_prune_report(self, report: PruneReport) -> None:
        plan = report.plan

        for warning in plan.warnings:
            self.message(warning)

        for skipped in plan.skipped:
            label = f"{skipped.branch} " if skipped.branch else ""
            self.message(f"skipped {label}({skipped.path}): {skipped.reason}")

        if report.dry_run:
            for action in plan.actions:
                self.message(f"would remove {action.describe()}")
            if plan.actions:
                self.message(f"would remove {len(plan.actions)} item(s) (dry run)")
        else:
            for outcome in report.outcomes:
                if outcome.ok:
                    self.message(outcome.message)
                else:
                    self.error(outcome.message)
            removed = sum(1 for o in report.outcomes if o.ok)
            if removed:
                self.message(f"pruned {removed} item(s)")

        for error in report.errors:
            self.error(error)

    def display_outcomes(self, outcomes: List[TargetOutcome]) -> None:
        for outcome in outcomes:
            if outcome.ok:
                self.message(outcome.message)
            else:
                self.error(outcome.message)
