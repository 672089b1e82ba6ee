"""
Helper functions for the ffmpeg monitor.

This module contains utility functions used throughout the application.
"""

import re
from datetime import timedelta
from typing import Optional

# H:MM:SS with optional fraction, as printed by ffmpeg for Duration and time=
TIMESTAMP_PATTERN = re.compile(r"^(\d+):([0-5]?\d):([0-5]?\d(?:\.\d+)?)$")


def parse_timestamp(text: str) -> Optional[timedelta]:
    """
    Parse an ffmpeg timestamp to a timedelta.

    Supports formats:
    - HH:MM:SS
    - HH:MM:SS.ff
    - HH:MM:SS.ffffff

    Args:
        text: Timestamp text

    Returns:
        Parsed duration, or None for malformed or negative values (e.g. "N/A")
    """
    match = TIMESTAMP_PATTERN.match(text.strip())
    if not match:
        return None

    hours, minutes, seconds = match.groups()
    return timedelta(hours=int(hours), minutes=int(minutes), seconds=float(seconds))


def parse_int(text: str) -> Optional[int]:
    """Parse an integer field, returning None on failure."""
    try:
        return int(text)
    except (TypeError, ValueError):
        return None


def parse_float(text: str) -> Optional[float]:
    """Parse a float field, returning None on failure."""
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


def format_timestamp(value: timedelta) -> str:
    """
    Format a duration as HH:MM:SS.mmm for ffmpeg arguments.

    Args:
        value: Duration to format

    Returns:
        Formatted timestamp (e.g., "01:30:45.250")
    """
    total_ms = int(round(value.total_seconds() * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def format_duration(value: Optional[timedelta]) -> str:
    """
    Format duration as HH:MM:SS for display.

    Args:
        value: Duration (None renders as "--:--:--")

    Returns:
        Formatted duration string (e.g., "01:30:45")
    """
    if value is None:
        return "--:--:--"
    seconds = value.total_seconds()
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_size(kilobytes: int) -> str:
    """
    Format an ffmpeg kB size in human-readable format.

    Args:
        kilobytes: Size in kilobytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    size = float(kilobytes)
    for unit in ["KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"
