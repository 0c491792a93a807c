"""Application entry point and CLI for folder-sizer.

Starts a background scan of the given root, polls its handle at a fixed
interval while echoing progress to stderr, and prints the largest folders to
stdout once the scan has finished.
"""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn, TextIO

from pydantic import ValidationError

from folder_sizer.core.config import (
    ConfigurationError,
    MainConfig,
    ScanConfig,
    load_main_config,
)
from folder_sizer.core.exceptions import InvalidRootError
from folder_sizer.core.scan.engine import ScanEngine
from folder_sizer.core.scan.handle import ScanHandle
from folder_sizer.types.models import ScanResult
from folder_sizer.utils.formatting import format_duration, format_percent, format_size
from folder_sizer.utils.logging import configure_logging

__all__ = ["main"]

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_INVALID_ROOT = 2
EXIT_INTERRUPTED = 130

# Seconds to wait for a cancelled scan to wind down on Ctrl+C
SHUTDOWN_TIMEOUT = 5.0


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="folder-sizer",
        description="Rank the immediate subdirectories of a folder by total size",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  folder-sizer /srv
  folder-sizer ~/Downloads --top 25
  folder-sizer /mnt/data --config folder-sizer.yaml --log-level INFO
        """,
    )

    _ = parser.add_argument(
        "root",
        type=Path,
        help="Directory whose immediate subdirectories are ranked",
    )

    _ = parser.add_argument(
        "--top",
        "-n",
        type=int,
        default=None,
        help="Number of folders to show (overrides config, default: 10)",
        metavar="N",
    )

    _ = parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: built-in settings)",
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override log level from configuration",
        metavar="LEVEL",
    )

    _ = parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads per scan (overrides config)",
        metavar="N",
    )

    _ = parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds between progress updates (overrides config)",
        metavar="SECONDS",
    )

    _ = parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Do not print progress lines while scanning",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> MainConfig:
    """Load configuration and apply command-line overrides.

    Raises:
        ConfigurationError: If the configuration file or an override is invalid
    """
    config_path: Path | None = args.config  # pyright: ignore[reportAny]  # argparse boundary
    config = load_main_config(config_path) if config_path is not None else MainConfig()

    # Extract args with type annotations to avoid reportAny at argparse boundary
    top: int | None = args.top  # pyright: ignore[reportAny]  # argparse boundary
    workers: int | None = args.workers  # pyright: ignore[reportAny]  # argparse boundary
    poll_interval: float | None = args.poll_interval  # pyright: ignore[reportAny]  # argparse boundary
    log_level: str | None = args.log_level  # pyright: ignore[reportAny]  # argparse boundary

    scan_overrides: dict[str, object] = {}
    if top is not None:
        scan_overrides["max_results"] = top
    if workers is not None:
        scan_overrides["max_workers"] = workers
    if poll_interval is not None:
        scan_overrides["poll_interval"] = poll_interval

    try:
        scan = ScanConfig.model_validate({**config.scan.model_dump(), **scan_overrides})
    except ValidationError as exc:
        msg = f"Invalid command-line option:\n{exc}"
        raise ConfigurationError(msg) from exc

    application = config.application
    if log_level is not None:
        application = application.model_copy(update={"log_level": log_level})

    return MainConfig(scan=scan, application=application)


def wait_for_result(
    handle: ScanHandle,
    *,
    poll_interval: float,
    stream: TextIO | None = None,
) -> ScanResult:
    """Poll ``handle`` until its result is published.

    Args:
        handle: Handle of a running scan
        poll_interval: Seconds between polls
        stream: Where progress lines are written (None disables them)

    Returns:
        The published scan result
    """
    last_reported: tuple[int, int, str] | None = None
    while True:
        result = handle.result()
        if result is not None:
            return result
        if stream is not None:
            progress = handle.progress()
            current = (progress.completed, progress.total, progress.current_path)
            if progress.total > 0 and current != last_reported:
                _ = stream.write(f"Scanning {progress.completed}/{progress.total}: {progress.current_path}\n")
                stream.flush()
                last_reported = current
        time.sleep(poll_interval)


def render_result(result: ScanResult, limit: int, stream: TextIO) -> None:
    """Write the ``limit`` largest folders and a summary line to ``stream``."""
    shown = result.top(limit)
    for entry in shown:
        _ = stream.write(
            f"{format_size(entry.size):>12}  {format_percent(result.share(entry)):>6}  {entry.path}\n"
        )

    summary = (
        f"{len(shown)} of {len(result.entries)} folders in {result.scanned_root}, "
        f"{format_size(result.total_size)} total, scanned in {format_duration(result.elapsed_seconds)}"
    )
    if result.cancelled:
        summary += " (cancelled, results incomplete)"
    _ = stream.write(summary + "\n")


def main(argv: Sequence[str] | None = None) -> NoReturn:
    """Main entry point for the folder-sizer command.

    Exit Codes:
        0: Scan completed
        1: Configuration error
        2: Scan root is missing or not a directory
        130: Interrupted by Ctrl+C
    """
    args = parse_arguments(argv)

    try:
        config = build_config(args)
    except ConfigurationError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    configure_logging(
        log_level=config.application.log_level,
        enable_syslog=config.application.syslog_enabled,
        enable_console=True,
    )

    root: Path = args.root  # pyright: ignore[reportAny]  # argparse boundary
    quiet: bool = args.quiet  # pyright: ignore[reportAny]  # argparse boundary
    engine = ScanEngine(config.scan)

    try:
        handle = engine.start(root, config.scan.max_results)
    except InvalidRootError as exc:
        print(f"Invalid root: {exc}", file=sys.stderr)
        sys.exit(EXIT_INVALID_ROOT)

    try:
        result = wait_for_result(
            handle,
            poll_interval=config.scan.poll_interval,
            stream=None if quiet else sys.stderr,
        )
    except KeyboardInterrupt:
        engine.shutdown(wait=True, timeout=SHUTDOWN_TIMEOUT)
        print("\nScan interrupted", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)

    render_result(result, handle.max_results, sys.stdout)
    sys.exit(EXIT_SUCCESS)


if __name__ == "__main__":
    main()
