"""Caller-owned handle through which a running scan is observed."""

from __future__ import annotations

import threading
from pathlib import Path

from folder_sizer.core.progress.tracker import ProgressTracker
from folder_sizer.types.models import ScanProgress, ScanResult


class ScanHandle:
    """Non-blocking view of one scan's progress and final result.

    Every accessor returns immediately, which suits a consumer that polls on a
    fixed cadence such as a redraw timer. The result slot is written exactly
    once by the engine; ``is_done`` is derived from that slot, so a reader can
    never see the scan as done while the result is still being built.
    """

    def __init__(
        self,
        root: Path,
        max_results: int,
        scan_id: str,
        tracker: ProgressTracker,
        cancel_event: threading.Event,
    ) -> None:
        """Initialize a handle for a scan that has not finished yet.

        Args:
            root: Directory being scanned
            max_results: Display limit requested by the caller (a hint, not a cut-off)
            scan_id: Identifier attached to this scan's log records
            tracker: Progress tracker updated by the scan's workers
            cancel_event: Event that asks the scan's workers to stop
        """
        self._root: Path = root
        self._max_results: int = max_results
        self._scan_id: str = scan_id
        self._tracker: ProgressTracker = tracker
        self._cancel_event: threading.Event = cancel_event
        self._result_lock: threading.Lock = threading.Lock()
        self._result: ScanResult | None = None

    @property
    def root(self) -> Path:
        """Directory being scanned."""
        return self._root

    @property
    def max_results(self) -> int:
        """Display limit requested when the scan was started."""
        return self._max_results

    @property
    def scan_id(self) -> str:
        """Identifier of this scan in log output."""
        return self._scan_id

    def progress(self) -> ScanProgress:
        """Return the latest progress snapshot."""
        return self._tracker.snapshot()

    def is_done(self) -> bool:
        """Return True once the final result has been published."""
        with self._result_lock:
            return self._result is not None

    def result(self) -> ScanResult | None:
        """Return the final result, or None while the scan is still running."""
        with self._result_lock:
            return self._result

    def cancel(self) -> None:
        """Ask the scan to stop early.

        The scan still publishes a result, flagged as cancelled, once its
        workers have wound down.
        """
        self._cancel_event.set()

    @property
    def cancel_requested(self) -> bool:
        """Whether cancellation has been requested for this scan."""
        return self._cancel_event.is_set()

    def _publish(self, result: ScanResult) -> None:
        """Store the final result; called once by the engine after all units return.

        Raises:
            RuntimeError: If a result was already published
        """
        with self._result_lock:
            if self._result is not None:
                msg = f"Result for scan {self._scan_id} was already published"
                raise RuntimeError(msg)
            self._result = result
