"""Utility functions for registry-watcher."""

import time
from datetime import datetime, timezone


def current_millis() -> int:
    """Get current wall-clock time in milliseconds since epoch."""
    return time.time_ns() // 1_000_000


def format_iso_millis(timestamp_ms: int) -> str:
    """Render a millisecond timestamp as ISO 8601 UTC.

    Examples:
        0 -> "1970-01-01T00:00:00.000Z"
        1705314645123 -> "2024-01-15T10:30:45.123Z"
    """
    dt = datetime.fromtimestamp(timestamp_ms // 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{timestamp_ms % 1000:03d}Z"


def humanize_size(size: float) -> str:
    """Convert bytes to human-readable format."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
