"""Subtree size accumulation for a single folder.

The walk uses an explicit stack instead of recursion, so pathologically deep
trees are bounded by ``max_depth`` rather than by the interpreter's stack.

Symlink policy: symbolic links and junctions are skipped. They are neither
followed nor counted, which rules out link cycles. Bind mounts and other
aliases that reach an already visited directory are caught by remembering
each directory's ``(st_dev, st_ino)`` pair.
"""

from __future__ import annotations

import logging
import os
import stat as statmod
import threading
from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import Final

from folder_sizer.core.exceptions import (
    DepthLimitExceededError,
    ScanCancelledError,
    SubtreeReadError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH: Final[int] = 4096

# st_blocks is counted in 512-byte units on POSIX regardless of the filesystem block size
_BLOCK_SIZE: Final[int] = 512


class SizeMode(str, Enum):
    """Enumeration for size calculation modes."""

    APPARENT = "apparent"  # File content size
    DISK_USAGE = "disk_usage"  # Allocated blocks


class SizeCalculator:
    """Best-effort calculator for the total byte size of a directory subtree.

    Unreadable entries below the top-level folder contribute zero and the walk
    carries on. Only a failure to open the folder itself is reported, so a
    caller can tell "could not start" apart from "undercounted".

    The calculator holds no mutable state and is safe to share between
    worker threads.
    """

    def __init__(
        self,
        mode: SizeMode = SizeMode.APPARENT,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        """Initialize the size calculator.

        Args:
            mode: Size calculation mode (apparent size vs disk usage)
            max_depth: Deepest nesting level below the folder that is walked

        Raises:
            ValueError: If max_depth is not positive
        """
        if max_depth <= 0:
            msg = f"max_depth must be positive, got: {max_depth}"
            raise ValueError(msg)
        self.mode: SizeMode = mode
        self.max_depth: int = max_depth

    def accumulate_size(
        self,
        path: Path,
        cancel_event: threading.Event | None = None,
    ) -> int:
        """Sum the sizes of all regular files below ``path``.

        Args:
            path: Folder to measure
            cancel_event: Optional event; once set, the walk stops at the next
                directory boundary

        Returns:
            Total size in bytes

        Raises:
            SubtreeReadError: If ``path`` itself cannot be opened
            DepthLimitExceededError: If the tree nests deeper than max_depth
            ScanCancelledError: If cancel_event is set before the walk ends
        """
        try:
            top_stat = os.stat(path, follow_symlinks=False)
            top_iterator = os.scandir(path)
        except OSError as exc:
            msg = f"Cannot open folder {path}: {exc}"
            raise SubtreeReadError(msg, path, context={"error": str(exc)}) from exc

        visited: set[tuple[int, int]] = {(top_stat.st_dev, top_stat.st_ino)}
        stack: list[tuple[str, int]] = []
        with top_iterator:
            total = self._sum_listing(top_iterator, os.fspath(path), 0, stack, visited)

        while stack:
            if cancel_event is not None and cancel_event.is_set():
                raise ScanCancelledError("scan cancelled", context={"path": str(path)})

            current, depth = stack.pop()
            if depth > self.max_depth:
                msg = f"Folder {path} nests deeper than {self.max_depth} levels"
                raise DepthLimitExceededError(msg, path, context={"deepest": current})

            try:
                iterator = os.scandir(current)
            except OSError as exc:
                logger.debug(
                    "Cannot open directory, skipping",
                    extra={"path": current, "error": str(exc)},
                )
                continue
            with iterator:
                total += self._sum_listing(iterator, current, depth, stack, visited)

        return total

    def _sum_listing(
        self,
        iterator: Iterator[os.DirEntry[str]],
        directory: str,
        depth: int,
        stack: list[tuple[str, int]],
        visited: set[tuple[int, int]],
    ) -> int:
        """Add up the files of one directory and queue its subdirectories.

        Args:
            iterator: Open scandir iterator for ``directory``
            directory: Directory being listed
            depth: Nesting level of ``directory`` below the measured folder
            stack: Pending directories, extended in place
            visited: Identity of directories already queued, extended in place

        Returns:
            Bytes contributed by files directly inside ``directory``
        """
        subtotal = 0
        try:
            for entry in iterator:
                subtotal += self._entry_size(entry, depth, stack, visited)
        except OSError as exc:
            # The directory vanished or became unreadable mid-listing
            logger.debug(
                "Directory listing interrupted, keeping partial total",
                extra={"path": directory, "error": str(exc)},
            )
        return subtotal

    def _entry_size(
        self,
        entry: os.DirEntry[str],
        depth: int,
        stack: list[tuple[str, int]],
        visited: set[tuple[int, int]],
    ) -> int:
        """Size of a single directory entry; subdirectories are queued instead."""
        try:
            if entry.is_symlink() or entry.is_junction():
                return 0
            entry_stat = entry.stat(follow_symlinks=False)
        except OSError as exc:
            logger.debug(
                "Cannot stat entry, skipping",
                extra={"path": entry.path, "error": str(exc)},
            )
            return 0

        mode = entry_stat.st_mode
        if statmod.S_ISDIR(mode):
            identity = (entry_stat.st_dev, entry_stat.st_ino)
            if identity in visited:
                return 0
            visited.add(identity)
            stack.append((entry.path, depth + 1))
            return 0
        if statmod.S_ISREG(mode):
            return self._size_from_stat(entry_stat)
        # Sockets, pipes, devices
        return 0

    def _size_from_stat(self, entry_stat: os.stat_result) -> int:
        """Calculate file size from stat result according to the size mode."""
        if self.mode == SizeMode.APPARENT:
            return entry_stat.st_size
        blocks: int | None = getattr(entry_stat, "st_blocks", None)
        if blocks is None:
            # Platforms without block accounting
            return entry_stat.st_size
        return blocks * _BLOCK_SIZE
