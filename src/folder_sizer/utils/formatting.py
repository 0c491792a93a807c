"""Pure formatting utilities for human-readable scan output.

All functions are stateless and raise ValueError on negative input.
"""

from typing import Final

_UNITS: Final[tuple[str, ...]] = ("KB", "MB", "GB", "TB", "PB")
_STEP: Final[float] = 1024.0

_MINUTE: Final[int] = 60
_HOUR: Final[int] = _MINUTE * 60


def format_size(bytes: int, *, precision: int = 1) -> str:
    """Convert bytes to human-readable size format.

    Uses binary units (1024-based) for consistency with system tools.

    Args:
        bytes: Number of bytes to format (must be non-negative)
        precision: Number of decimal places for KB and above

    Returns:
        Human-readable string representation of the size

    Examples:
        >>> format_size(512)
        '512 Bytes'
        >>> format_size(1536)
        '1.5 KB'
        >>> format_size(5242880)
        '5.0 MB'
        >>> format_size(2748779069440, precision=2)
        '2.50 TB'
    """
    if bytes < 0:
        msg = "bytes must be non-negative"
        raise ValueError(msg)

    if bytes < _STEP:
        return f"{bytes} Bytes"

    value = float(bytes)
    unit = _UNITS[0]
    for unit in _UNITS:
        value /= _STEP
        if value < _STEP:
            break
    return f"{value:.{precision}f} {unit}"


def format_duration(seconds: float) -> str:
    """Convert an elapsed time to a compact human-readable string.

    Scans frequently finish in under a minute, so short durations keep two
    decimal places.

    Examples:
        >>> format_duration(0.4213)
        '0.42s'
        >>> format_duration(90)
        '1m 30s'
        >>> format_duration(3665)
        '1h 1m'
    """
    if seconds < 0:
        msg = "seconds must be non-negative"
        raise ValueError(msg)

    if seconds < _MINUTE:
        return f"{seconds:.2f}s"

    total_seconds = int(seconds)
    if total_seconds >= _HOUR:
        hours, remaining = divmod(total_seconds, _HOUR)
        minutes = remaining // _MINUTE
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"

    minutes, remaining = divmod(total_seconds, _MINUTE)
    return f"{minutes}m {remaining}s" if remaining else f"{minutes}m"


def format_percent(value: float, *, precision: int = 1) -> str:
    """Format a percentage value such as ``ScanResult.share`` output.

    Examples:
        >>> format_percent(42.123)
        '42.1%'
    """
    if value < 0:
        msg = "value must be non-negative"
        raise ValueError(msg)
    return f"{value:.{precision}f}%"
