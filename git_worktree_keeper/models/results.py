"""Per-invocation result structures for removal and pruning.

None of these are persisted; they live for one command and are what the
display service renders.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


@dataclass
class TargetOutcome:
    """Result of acting on a single target."""

    target: str
    ok: bool
    message: str


@dataclass
class RemovalReport:
    """Ordered outcomes of a multi-target removal."""

    outcomes: List[TargetOutcome] = field(default_factory=list)

    def add(self, outcome: TargetOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def failures(self) -> List[TargetOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def successes(self) -> List[TargetOutcome]:
        return [o for o in self.outcomes if o.ok]


class ActionKind(Enum):
    """Cleanup classes handled by prune."""
    STALE = "stale"
    MERGED = "merged"
    GONE = "gone"
    ORPHAN = "orphan"


@dataclass(frozen=True)
class PruneAction:
    """One planned prune action. Data only; applying it is the engine's job."""

    kind: ActionKind
    path: Path
    repo: Optional[Path] = None  # None for orphan directories
    branch: Optional[str] = None
    detail: str = ""

    def describe(self) -> str:
        if self.kind is ActionKind.ORPHAN:
            return f"orphaned directory {self.path}"
        if self.kind is ActionKind.STALE:
            return f"stale metadata for {self.path}"
        return f"{self.branch} ({self.kind.value}) {self.path}"


@dataclass
class SkippedWorktree:
    """A worktree that matched a cleanup class but was left alone."""

    path: Path
    branch: Optional[str]
    reason: str


@dataclass
class PrunePlan:
    """Everything prune intends to do, computed without mutating anything."""

    actions: List[PruneAction] = field(default_factory=list)
    skipped: List[SkippedWorktree] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.actions

    def extend(self, other: "PrunePlan") -> None:
        self.actions.extend(other.actions)
        self.skipped.extend(other.skipped)
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)


@dataclass
class PruneReport:
    """Plan plus what happened when (and if) it was applied."""

    plan: PrunePlan
    dry_run: bool = False
    outcomes: List[TargetOutcome] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and all(o.ok for o in self.outcomes)

    @property
    def failures(self) -> List[TargetOutcome]:
        return [o for o in self.outcomes if not o.ok]
