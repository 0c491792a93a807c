"""Error taxonomy for folder scans.

Only ``InvalidRootError`` ever reaches the caller of ``ScanEngine.start``.
The remaining errors are raised inside workers and absorbed by the engine,
which drops the affected folder from the result.
"""

from __future__ import annotations

from pathlib import Path


class ScanError(Exception):
    """Base exception for all scan-related errors."""

    def __init__(self, message: str, context: dict[str, object] | None = None) -> None:
        """Initialize ScanError.

        Args:
            message: Error message
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.context: dict[str, object] = context or {}


class InvalidRootError(ScanError):
    """Raised when the scan root does not exist or is not a listable directory."""

    def __init__(self, message: str, root: Path, context: dict[str, object] | None = None) -> None:
        """Initialize InvalidRootError.

        Args:
            message: Error message
            root: Root path that was rejected
            context: Additional context information
        """
        full_context = context or {}
        full_context["root"] = str(root)
        super().__init__(message, full_context)
        self.root: Path = root


class SubtreeReadError(ScanError):
    """Raised when the top of a folder's subtree cannot be read at all."""

    def __init__(self, message: str, path: Path, context: dict[str, object] | None = None) -> None:
        """Initialize SubtreeReadError.

        Args:
            message: Error message
            path: Folder whose size could not be computed
            context: Additional context information
        """
        full_context = context or {}
        full_context["path"] = str(path)
        super().__init__(message, full_context)
        self.path: Path = path


class DepthLimitExceededError(SubtreeReadError):
    """Raised when a subtree nests deeper than the configured bound."""


class ScanCancelledError(ScanError):
    """Raised inside a worker once its scan has been asked to stop."""
