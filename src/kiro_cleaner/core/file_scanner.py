"""Walks the storage roots and classifies every file."""

from __future__ import annotations

import logging
from pathlib import Path

from kiro_cleaner.core.classifier import PathClassifier
from kiro_cleaner.core.locator import find_storage_roots
from kiro_cleaner.models.file_entry import FileCategory, FileEntry
from kiro_cleaner.models.progress import ProgressCallback, ProgressReporter
from kiro_cleaner.models.scan_result import ScanResult
from kiro_cleaner.utils import bytes_to_human, walk_tree

log = logging.getLogger(__name__)

_MiB = 1024 * 1024

# (category, threshold, message template); None means the total size.
_RECOMMENDATIONS: tuple[tuple[FileCategory | None, int, str], ...] = (
    (FileCategory.TEMP, 10 * _MiB, "Found {size} of temporary files, consider cleaning them"),
    (FileCategory.LOG, 50 * _MiB, "Found {size} of log files, consider cleaning old logs"),
    (FileCategory.CACHE, 100 * _MiB, "Found {size} of cache files, consider cleaning them"),
    (None, 500 * _MiB, "Total storage use is {size}, consider cleaning regularly"),
)


class FileScanner:
    """Collects classified FileEntry objects from one or more roots."""

    def __init__(self, roots: list[Path] | None = None, classifier: PathClassifier | None = None) -> None:
        self._roots = roots
        self._classifier = classifier or PathClassifier()

    @property
    def roots(self) -> list[Path]:
        if self._roots is None:
            self._roots = find_storage_roots()
        return self._roots

    def scan(self, on_progress: ProgressCallback | None = None) -> list[FileEntry]:
        """Walk every root and classify each file.

        Unreadable entries are skipped.  Exactly one complete progress
        snapshot is emitted at the end.
        """
        reporter = ProgressReporter("files", on_progress)
        entries: list[FileEntry] = []

        for root in self.roots:
            for item in walk_tree(root):
                if item.is_dir:
                    reporter.visit_dir(str(item.path))
                    continue
                entry = self._classifier.entry_for(item, root)
                entries.append(entry)
                reporter.visit_file(str(item.path), item.size, entry.category.value)

        reporter.finish()
        log.info("Scanned %d files under %d roots", len(entries), len(self.roots))
        return entries


def summarize(entries: list[FileEntry]) -> ScanResult:
    """Total the entries per category and derive recommendations."""
    result = ScanResult(entries=list(entries))
    for entry in entries:
        result.total_bytes += entry.size
        result.category_sizes[entry.category] = result.category_sizes.get(entry.category, 0) + entry.size
        result.category_counts[entry.category] = result.category_counts.get(entry.category, 0) + 1

    for category, threshold, template in _RECOMMENDATIONS:
        size = result.total_bytes if category is None else result.size_of(category)
        if size > threshold:
            result.recommendations.append(template.format(size=bytes_to_human(size)))
    return result
