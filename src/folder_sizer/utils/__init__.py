"""Shared utility modules.

- Data size, duration and percentage formatting
- Logging setup with per-scan identifiers
"""

from folder_sizer.utils.formatting import (
    format_duration,
    format_percent,
    format_size,
)

__all__ = [
    "format_duration",
    "format_percent",
    "format_size",
]
