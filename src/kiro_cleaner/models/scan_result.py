"""Storage scan result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field

from kiro_cleaner.models.file_entry import FileCategory, FileEntry


@dataclass(slots=True)
class ScanResult:
    """Classified files found under the storage roots, with totals."""

    entries: list[FileEntry] = field(default_factory=list)
    total_bytes: int = 0
    category_sizes: dict[FileCategory, int] = field(default_factory=dict)
    category_counts: dict[FileCategory, int] = field(default_factory=dict)
    recommendations: list[str] = field(default_factory=list)

    def size_of(self, category: FileCategory) -> int:
        return self.category_sizes.get(category, 0)

    def count_of(self, category: FileCategory) -> int:
        return self.category_counts.get(category, 0)
