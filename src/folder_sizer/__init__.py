"""Folder Sizer - rank the immediate subdirectories of a folder by size.

This package provides a background scan engine that measures every immediate
subdirectory of a root in parallel, reports live progress through a
thread-safe handle, and publishes a ranked result once all folders are done.
"""

from folder_sizer.__main__ import main
from folder_sizer.core.exceptions import InvalidRootError
from folder_sizer.core.scan import ScanEngine, ScanHandle
from folder_sizer.types.models import FolderInfo, ScanProgress, ScanResult

__all__ = [
    "FolderInfo",
    "InvalidRootError",
    "ScanEngine",
    "ScanHandle",
    "ScanProgress",
    "ScanResult",
    "main",
]
