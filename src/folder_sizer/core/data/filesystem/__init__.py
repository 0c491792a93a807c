"""Filesystem operations module for subtree size calculations."""

from __future__ import annotations

from .size_calculator import DEFAULT_MAX_DEPTH, SizeCalculator, SizeMode

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "SizeCalculator",
    "SizeMode",
]
