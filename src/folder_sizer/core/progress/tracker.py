"""Thread-safe progress counters shared by scan workers and observers."""

from __future__ import annotations

import threading
from pathlib import Path

from folder_sizer.types.models import ScanProgress


class ProgressTracker:
    """Lock-guarded ``(completed, total, current_path)`` triple.

    Workers report through ``mark_started``; observers read through
    ``snapshot``, which always returns a consistent copy. ``completed`` counts
    dispatched units, so it is incremented when a unit begins rather than when
    it finishes.
    """

    def __init__(self) -> None:
        """Initialize an empty tracker."""
        self._lock: threading.Lock = threading.Lock()
        self._completed: int = 0
        self._total: int = 0
        self._current_path: str = ""
        self._total_set: bool = False

    def set_total(self, total: int) -> None:
        """Record how many units of work the scan will dispatch.

        Args:
            total: Number of immediate subdirectories of the scan root

        Raises:
            ValueError: If total is negative
            RuntimeError: If the total has already been set
        """
        if total < 0:
            msg = f"total must be non-negative, got: {total}"
            raise ValueError(msg)
        with self._lock:
            if self._total_set:
                msg = "Progress total can only be set once per scan"
                raise RuntimeError(msg)
            self._total = total
            self._total_set = True

    def mark_started(self, path: Path | str) -> None:
        """Record that a worker is about to measure ``path``.

        Args:
            path: Folder the worker is starting on

        Raises:
            RuntimeError: If the total is unset or every unit was already started
        """
        with self._lock:
            if not self._total_set:
                msg = "Progress total must be set before work is dispatched"
                raise RuntimeError(msg)
            if self._completed >= self._total:
                msg = f"More units started than the {self._total} announced"
                raise RuntimeError(msg)
            self._completed += 1
            self._current_path = str(path)

    def snapshot(self) -> ScanProgress:
        """Return a consistent copy of the counters."""
        with self._lock:
            return ScanProgress(
                completed=self._completed,
                total=self._total,
                current_path=self._current_path,
            )
