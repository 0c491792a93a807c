"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path

import pytest

from folder_sizer.core.scan.handle import ScanHandle
from folder_sizer.types.models import ScanResult

# Generous upper bound for scans of tiny temporary trees on slow CI machines
SCAN_TIMEOUT_SECONDS = 30.0

TreeLayout = Mapping[str, "int | TreeLayout"]


def build_tree(base: Path, layout: TreeLayout) -> None:
    """Create files and folders under ``base``.

    Integer values become files of that many bytes, mappings become folders.
    """
    for name, content in layout.items():
        target = base / name
        if isinstance(content, int):
            _ = target.write_bytes(b"x" * content)
        else:
            target.mkdir()
            build_tree(target, content)


def wait_for(handle: ScanHandle, timeout: float = SCAN_TIMEOUT_SECONDS) -> ScanResult:
    """Poll ``handle`` the way a redraw loop would until a result appears."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        result = handle.result()
        if result is not None:
            return result
        time.sleep(0.005)
    pytest.fail(f"scan of {handle.root} did not finish within {timeout} seconds")


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[TreeLayout], Path]:
    """Return a builder that creates a layout under a fresh root."""

    def _make(layout: TreeLayout) -> Path:
        root = tmp_path / "root"
        root.mkdir()
        build_tree(root, layout)
        return root

    return _make


@pytest.fixture
def await_result() -> Callable[[ScanHandle], ScanResult]:
    """Return ``wait_for`` so tests can block on a handle without importing conftest."""
    return wait_for


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Put the root logger's handlers and level back after the test."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
