"""Logging infrastructure with scan ID tracking and optional syslog output.

Every scan gets a short identifier stored in a ContextVar. The scan engine
binds it in its coordinator thread and copies the context into each worker,
so log records from all threads of one scan carry the same ``scan_id``.
"""

import contextvars
import logging
import logging.handlers
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Final, override

scan_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "scan_id",
    default=None,
)

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(scan_id)s] - %(message)s"

SYSLOG_LOG_FORMAT: Final[str] = "folder-sizer[%(process)d]: %(levelname)s - [%(scan_id)s] - %(name)s - %(message)s"

DEFAULT_SYSLOG_ADDRESS: Final[str] = "/dev/log"

_NO_SCAN_ID: Final[str] = "-"


class ScanIdFilter(logging.Filter):
    """Logging filter that adds the current scan ID to log records."""

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        """Add scan ID to log record from ContextVar.

        Args:
            record: Log record to enhance with the scan ID

        Returns:
            True to allow the record to be logged
        """
        scan_id = scan_id_var.get()
        record.scan_id = scan_id if scan_id is not None else _NO_SCAN_ID
        return True


def configure_logging(
    *,
    log_level: str = "WARNING",
    enable_syslog: bool = False,
    syslog_address: str = DEFAULT_SYSLOG_ADDRESS,
    enable_console: bool = True,
) -> None:
    """Configure application logging.

    Console output goes to stderr so that stdout stays reserved for scan
    results.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_syslog: Enable the syslog handler
        syslog_address: Syslog socket address
        enable_console: Enable console output handler

    Example:
        >>> configure_logging(log_level="INFO")
        >>> logging.getLogger(__name__).info("Scan started", extra={"root": "/srv"})
    """
    root_logger = logging.getLogger()

    level = getattr(logging, log_level.upper(), logging.WARNING)
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    scan_filter = ScanIdFilter()

    if enable_syslog:
        try:
            syslog_handler = logging.handlers.SysLogHandler(
                address=syslog_address,
                facility=logging.handlers.SysLogHandler.LOG_USER,
            )
            syslog_handler.setFormatter(logging.Formatter(SYSLOG_LOG_FORMAT))
            syslog_handler.addFilter(scan_filter)
            root_logger.addHandler(syslog_handler)
        except OSError as exc:
            # Syslog not available (e.g., containers, macOS without /dev/log)
            print(
                f"Warning: Could not connect to syslog at {syslog_address}: {exc}",
                file=sys.stderr,
            )

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        console_handler.addFilter(scan_filter)
        root_logger.addHandler(console_handler)


def generate_scan_id() -> str:
    """Return a new short scan identifier."""
    return uuid.uuid4().hex[:12]


def get_scan_id() -> str | None:
    """Get the scan ID bound to the current context, if any."""
    return scan_id_var.get()


@contextmanager
def scan_id_context(scan_id: str) -> Iterator[None]:
    """Bind ``scan_id`` for the duration of the block.

    Example:
        >>> with scan_id_context("4f2a9c01d3e7"):
        ...     logger.info("Measuring folder")
    """
    token = scan_id_var.set(scan_id)
    try:
        yield
    finally:
        scan_id_var.reset(token)
