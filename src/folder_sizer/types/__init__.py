"""Shared value types for folder-sizer."""

from folder_sizer.types.models import FolderInfo, ScanProgress, ScanResult

__all__ = [
    "FolderInfo",
    "ScanProgress",
    "ScanResult",
]
