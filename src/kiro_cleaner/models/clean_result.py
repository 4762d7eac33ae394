"""Cleanup plan and result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from kiro_cleaner.models.file_entry import FileEntry

# Display order for candidate reasons.
REASON_ORDER = ("log", "cache", "index", "chat", "history", "temp")


@dataclass(frozen=True, slots=True)
class CleanupCandidate:
    """File selected for deletion and why."""

    entry: FileEntry
    reason: str
    size: int


@dataclass(slots=True)
class CleanupPlan:
    """Ordered list of candidates with their total size.

    ``safe_to_delete`` is False when at least one candidate would be
    refused by the default safety policy.
    """

    candidates: list[CleanupCandidate] = field(default_factory=list)
    total_bytes: int = 0
    safe_to_delete: bool = True
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def by_reason(self) -> list[tuple[str, int, int]]:
        """Return (reason, count, bytes) tuples in display order."""
        counts: dict[str, int] = {}
        sizes: dict[str, int] = {}
        for candidate in self.candidates:
            counts[candidate.reason] = counts.get(candidate.reason, 0) + 1
            sizes[candidate.reason] = sizes.get(candidate.reason, 0) + candidate.size
        ordered = [r for r in REASON_ORDER if r in counts]
        ordered += sorted(r for r in counts if r not in REASON_ORDER)
        return [(r, counts[r], sizes[r]) for r in ordered]


@dataclass(frozen=True, slots=True)
class DeletionFailure:
    """A candidate that could not be removed."""

    path: Path
    message: str


@dataclass(frozen=True, slots=True)
class ItemOutcome:
    """Per-candidate outcome: status is 'deleted', 'skipped' or 'failed'."""

    path: Path
    status: str
    message: str = ""


@dataclass(slots=True)
class CleanupResult:
    """Result of executing a cleanup plan."""

    freed_bytes: int = 0
    files_removed: int = 0
    skipped: int = 0
    dry_run: bool = False
    errors: list[DeletionFailure] = field(default_factory=list)
    outcomes: list[ItemOutcome] = field(default_factory=list)
