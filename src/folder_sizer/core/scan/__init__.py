"""Scan engine and the handles it returns."""

from __future__ import annotations

from .engine import ScanEngine
from .handle import ScanHandle

__all__ = [
    "ScanEngine",
    "ScanHandle",
]
