"""Concurrent scan engine ranking the immediate subdirectories of a root.

A scan is one fan-out: every immediate subdirectory of the root becomes a
unit of work on a bounded thread pool. A coordinator thread waits for all
units, sorts the survivors by size and publishes the result to the caller's
``ScanHandle``. ``start`` itself never blocks on the filesystem walk.
"""

from __future__ import annotations

import contextvars
import logging
import os
import stat as statmod
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

import psutil

from folder_sizer.core.config import DEFAULT_MAX_RESULTS, ScanConfig
from folder_sizer.core.data.filesystem.size_calculator import SizeCalculator
from folder_sizer.core.exceptions import InvalidRootError, ScanCancelledError, SubtreeReadError
from folder_sizer.core.progress.tracker import ProgressTracker
from folder_sizer.core.scan.handle import ScanHandle
from folder_sizer.types.models import FolderInfo, ScanResult
from folder_sizer.utils.logging import generate_scan_id, scan_id_context

logger = logging.getLogger(__name__)

# Upper bound on worker threads when the pool size is derived from the CPU count
MAX_DEFAULT_WORKERS: Final[int] = 32


@dataclass(slots=True)
class _UnitOutcomes:
    """Result-accumulation mapping shared by the workers of one scan."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    sizes: dict[int, FolderInfo] = field(default_factory=dict)
    failed: int = 0
    interrupted: int = 0


@dataclass(slots=True)
class _ActiveScan:
    handle: ScanHandle
    thread: threading.Thread


class ScanEngine:
    """Start background scans and hand out handles to observe them.

    Only one scan is tracked at a time. Starting a new scan while another is
    still running cancels the earlier one: its workers stop at their next
    directory boundary and its handle receives a result flagged as cancelled.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        calculator: SizeCalculator | None = None,
    ) -> None:
        """Initialize the scan engine.

        Args:
            config: Scan settings (defaults to ScanConfig())
            calculator: Size calculator shared by all workers (built from config if omitted)
        """
        self.config: ScanConfig = config or ScanConfig()
        self.calculator: SizeCalculator = calculator or SizeCalculator(
            mode=self.config.size_mode,
            max_depth=self.config.max_depth,
        )
        self._lock: threading.Lock = threading.Lock()
        self._active: _ActiveScan | None = None

    def start(self, root: Path | str, max_results: int = DEFAULT_MAX_RESULTS) -> ScanHandle:
        """Validate ``root`` and start ranking its subdirectories in the background.

        Args:
            root: Directory whose immediate subdirectories are ranked
            max_results: Display limit for the consumer; every folder is
                still measured and kept in the result

        Returns:
            Handle for polling progress and the final result

        Raises:
            InvalidRootError: If root does not exist, is not a directory or cannot be listed
            ValueError: If max_results is negative
        """
        if max_results < 0:
            msg = f"max_results must be non-negative, got: {max_results}"
            raise ValueError(msg)

        started_at = time.perf_counter()
        root_path = Path(root)
        children = self._list_children(root_path)

        tracker = ProgressTracker()
        tracker.set_total(len(children))
        cancel_event = threading.Event()
        handle = ScanHandle(
            root=root_path,
            max_results=max_results,
            scan_id=generate_scan_id(),
            tracker=tracker,
            cancel_event=cancel_event,
        )
        thread = threading.Thread(
            target=self._run,
            args=(handle, tracker, children, cancel_event, started_at),
            name=f"folder-scan-{handle.scan_id}",
            daemon=True,
        )

        with self._lock:
            previous = self._active
            if previous is not None and not previous.handle.is_done():
                logger.info(
                    "Cancelling previous scan",
                    extra={"previous_scan_id": previous.handle.scan_id, "root": str(previous.handle.root)},
                )
                previous.handle.cancel()
            self._active = _ActiveScan(handle=handle, thread=thread)
            thread.start()

        return handle

    def shutdown(self, *, wait: bool = True, timeout: float | None = None) -> None:
        """Cancel the active scan, if any.

        Args:
            wait: Wait for the scan's coordinator thread to publish its result
            timeout: Maximum seconds to wait (None waits indefinitely)
        """
        with self._lock:
            active = self._active
        if active is None:
            return
        active.handle.cancel()
        if wait:
            active.thread.join(timeout)

    @property
    def active_handle(self) -> ScanHandle | None:
        """Handle of the scan still running, or None once it has published."""
        with self._lock:
            return self._active.handle if self._active is not None else None

    def worker_count(self, unit_count: int) -> int:
        """Number of worker threads used for a scan of ``unit_count`` folders."""
        if self.config.max_workers is not None:
            limit = self.config.max_workers
        else:
            cpus = psutil.cpu_count(logical=True) or 1
            limit = min(cpus, MAX_DEFAULT_WORKERS)
        return max(1, min(limit, unit_count))

    def _release(self, handle: ScanHandle) -> None:
        """Forget ``handle`` once its result is published, unless a newer scan replaced it."""
        with self._lock:
            if self._active is not None and self._active.handle is handle:
                self._active = None

    def _list_children(self, root: Path) -> list[Path]:
        """Return the immediate subdirectories of ``root`` in name order.

        Raises:
            InvalidRootError: If root cannot be used as a scan root
        """
        try:
            root_stat = os.stat(root)
        except FileNotFoundError as exc:
            raise InvalidRootError(f"Directory does not exist: {root}", root) from exc
        except OSError as exc:
            msg = f"Cannot access {root}: {exc}"
            raise InvalidRootError(msg, root, context={"error": str(exc)}) from exc
        if not statmod.S_ISDIR(root_stat.st_mode):
            raise InvalidRootError(f"Not a directory: {root}", root)

        children: list[Path] = []
        try:
            with os.scandir(root) as iterator:
                for entry in iterator:
                    try:
                        # Symlinked and junctioned folders are not followed
                        if entry.is_dir(follow_symlinks=False) and not entry.is_junction():
                            children.append(Path(entry.path))
                    except OSError as exc:
                        logger.debug(
                            "Cannot inspect root entry, skipping",
                            extra={"path": entry.path, "error": str(exc)},
                        )
        except OSError as exc:
            msg = f"Cannot list directory {root}: {exc}"
            raise InvalidRootError(msg, root, context={"error": str(exc)}) from exc

        children.sort(key=lambda child: child.name)
        return children

    def _run(
        self,
        handle: ScanHandle,
        tracker: ProgressTracker,
        children: list[Path],
        cancel_event: threading.Event,
        started_at: float,
    ) -> None:
        """Coordinator thread body: fan out, join, sort and publish."""
        with scan_id_context(handle.scan_id):
            logger.info(
                "Scan started",
                extra={"root": str(handle.root), "folders": len(children)},
            )
            outcomes = _UnitOutcomes()
            try:
                self._fan_out(children, tracker, cancel_event, outcomes)
            except Exception:
                logger.exception("Scan coordinator failed", extra={"root": str(handle.root)})
                raise
            finally:
                # Folders measured before a coordinator failure are still published
                result = ScanResult(
                    entries=_rank(outcomes),
                    elapsed_seconds=time.perf_counter() - started_at,
                    scanned_root=handle.root,
                    cancelled=outcomes.interrupted > 0,
                )
                handle._publish(result)  # pyright: ignore[reportPrivateUsage]  # engine owns publication
                self._release(handle)

            logger.info(
                "Scan finished",
                extra={
                    "root": str(handle.root),
                    "entries": len(result.entries),
                    "failed": outcomes.failed,
                    "cancelled": result.cancelled,
                    "elapsed_seconds": round(result.elapsed_seconds, 3),
                },
            )

    def _fan_out(
        self,
        children: list[Path],
        tracker: ProgressTracker,
        cancel_event: threading.Event,
        outcomes: _UnitOutcomes,
    ) -> None:
        """Measure every child on the worker pool and wait for all of them."""
        if not children:
            return

        futures: list[Future[None]] = []
        with ThreadPoolExecutor(
            max_workers=self.worker_count(len(children)),
            thread_name_prefix="folder-scan-worker",
        ) as executor:
            for index, child in enumerate(children):
                # Each task runs in its own copy so the scan ID reaches the worker thread
                context = contextvars.copy_context()
                futures.append(
                    executor.submit(
                        context.run,
                        self._measure,
                        index,
                        child,
                        tracker,
                        cancel_event,
                        outcomes,
                    )
                )

        for future in futures:
            error = future.exception()
            if error is not None:
                raise error

    def _measure(
        self,
        index: int,
        child: Path,
        tracker: ProgressTracker,
        cancel_event: threading.Event,
        outcomes: _UnitOutcomes,
    ) -> None:
        """Worker body for one unit of work."""
        if cancel_event.is_set():
            with outcomes.lock:
                outcomes.interrupted += 1
            return

        tracker.mark_started(child)
        try:
            size = self.calculator.accumulate_size(child, cancel_event)
        except ScanCancelledError:
            logger.debug("Folder measurement cancelled", extra={"path": str(child)})
            with outcomes.lock:
                outcomes.interrupted += 1
            return
        except (SubtreeReadError, OSError) as exc:
            logger.warning(
                "Folder dropped from results",
                extra={"path": str(child), "error": str(exc)},
            )
            with outcomes.lock:
                outcomes.failed += 1
            return
        except Exception:
            # One folder's failure never aborts the scan
            logger.exception("Unexpected error measuring folder", extra={"path": str(child)})
            with outcomes.lock:
                outcomes.failed += 1
            return

        logger.debug("Folder measured", extra={"path": str(child), "size": size})
        with outcomes.lock:
            outcomes.sizes[index] = FolderInfo(path=child, size=size)


def _rank(outcomes: _UnitOutcomes) -> tuple[FolderInfo, ...]:
    """Order measured folders largest first; ties keep enumeration order."""
    with outcomes.lock:
        ordered = [outcomes.sizes[index] for index in sorted(outcomes.sizes)]
    return tuple(sorted(ordered, key=lambda info: info.size, reverse=True))
