"""Data models for folder-sizer.

This module defines the immutable dataclasses passed between the scan engine,
its workers and whoever polls a scan handle.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class FolderInfo:
    """Total size of one immediate child of the scan root.

    The size is a best-effort total: entries that could not be read while
    walking the subtree contribute nothing.
    """

    path: Path
    size: int

    @property
    def name(self) -> str:
        """Final path component, falling back to the full path for roots."""
        return self.path.name or str(self.path)


@dataclass(slots=True, frozen=True)
class ScanProgress:
    """Point-in-time copy of a scan's progress counters.

    ``completed`` counts units of work that have been dispatched, so it can
    reach ``total`` before the last unit has finished.
    """

    completed: int
    total: int
    current_path: str

    @property
    def fraction(self) -> float:
        """Dispatched share of the work in the range [0, 1]."""
        if self.total <= 0:
            return 0.0
        return min(self.completed / self.total, 1.0)


@dataclass(slots=True, frozen=True)
class ScanResult:
    """Final, fully built outcome of one scan.

    Entries are ordered by size, largest first. Folders whose subtree could
    not be opened are absent. A cancelled scan only holds the folders that
    finished before cancellation reached them.
    """

    entries: tuple[FolderInfo, ...]
    elapsed_seconds: float
    scanned_root: Path
    cancelled: bool = False

    @property
    def total_size(self) -> int:
        """Sum of all ranked folder sizes."""
        return sum(entry.size for entry in self.entries)

    def top(self, limit: int) -> Sequence[FolderInfo]:
        """Return the ``limit`` largest folders.

        Args:
            limit: Display limit chosen by the consumer

        Returns:
            Up to ``limit`` entries, largest first

        Raises:
            ValueError: If limit is negative
        """
        if limit < 0:
            msg = f"limit must be non-negative, got: {limit}"
            raise ValueError(msg)
        return self.entries[:limit]

    def share(self, entry: FolderInfo) -> float:
        """Percentage of the ranked total taken by ``entry``."""
        total = self.total_size
        if total == 0:
            return 0.0
        return entry.size / total * 100.0
