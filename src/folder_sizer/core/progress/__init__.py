"""Progress tracking shared between scan workers and observers."""

from __future__ import annotations

from .tracker import ProgressTracker

__all__ = ["ProgressTracker"]
