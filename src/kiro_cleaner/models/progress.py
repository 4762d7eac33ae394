"""Scan progress snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable


@dataclass(slots=True)
class ScanProgress:
    """Counters describing how far a scan has come.

    Counters only grow during a scan.  ``is_complete`` flips to True
    exactly once, on the final snapshot.
    """

    phase: str = "files"
    scanned_files: int = 0
    scanned_dirs: int = 0
    total_size: int = 0
    current_path: str = ""
    category_counts: dict[str, int] = field(default_factory=dict)
    category_sizes: dict[str, int] = field(default_factory=dict)
    is_complete: bool = False

    def snapshot(self) -> ScanProgress:
        """Return an independent copy safe to hand to observers."""
        return replace(
            self,
            category_counts=dict(self.category_counts),
            category_sizes=dict(self.category_sizes),
        )


ProgressCallback = Callable[[ScanProgress], None]


class ProgressReporter:
    """Owns a ScanProgress and pushes snapshots to an optional observer."""

    def __init__(self, phase: str, on_progress: ProgressCallback | None = None) -> None:
        self._progress = ScanProgress(phase=phase)
        self._on_progress = on_progress

    @property
    def progress(self) -> ScanProgress:
        return self._progress.snapshot()

    def visit_dir(self, path: str) -> None:
        self._check_open()
        self._progress.scanned_dirs += 1
        self._progress.current_path = path
        self._emit()

    def visit_file(self, path: str, size: int, category: str) -> None:
        self._check_open()
        p = self._progress
        p.scanned_files += 1
        p.total_size += size
        p.current_path = path
        p.category_counts[category] = p.category_counts.get(category, 0) + 1
        p.category_sizes[category] = p.category_sizes.get(category, 0) + size
        self._emit()

    def finish(self) -> None:
        """Mark the scan complete and emit the final snapshot."""
        self._check_open()
        self._progress.is_complete = True
        self._emit()

    def _check_open(self) -> None:
        if self._progress.is_complete:
            raise RuntimeError("Scan progress already complete")

    def _emit(self) -> None:
        if self._on_progress is not None:
            self._on_progress(self._progress.snapshot())
