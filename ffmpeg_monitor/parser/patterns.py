"""
Regex table for the ffmpeg diagnostic output grammar.

The table is built once at import time and exposed read-only; it is shared by
every run without locking.
"""

import re
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class PatternField(str, Enum):
    """Semantic field recognized in a diagnostic line."""

    DURATION = "duration"
    FRAME = "frame"
    FPS = "fps"
    SIZE = "size"
    TIME = "time"
    BITRATE = "bitrate"
    SPEED = "speed"
    MUXING_OVERHEAD = "muxing_overhead"


# Markers a line must contain to be considered at all
SIZE_MARKER = "size="
TIME_MARKER = "time="
BITRATE_MARKER = "bitrate="
COMPLETION_MARKER = "muxing overhead"

PATTERNS: Mapping[PatternField, "re.Pattern[str]"] = MappingProxyType(
    {
        # Duration: 00:12:34.50, start: 0.000000, bitrate: 128 kb/s
        PatternField.DURATION: re.compile(r"Duration: ([^,]*), "),
        PatternField.FRAME: re.compile(r"frame=\s*(\d+)"),
        PatternField.FPS: re.compile(r"fps=\s*(\d+(?:\.\d+)?)"),
        # Lsize= on the final line, KiB on ffmpeg >= 6.1
        PatternField.SIZE: re.compile(r"size=\s*(\d+)\s*(?:kB|KiB)"),
        PatternField.TIME: re.compile(r"time=\s*(\S+)"),
        PatternField.BITRATE: re.compile(r"bitrate=\s*(\d+(?:\.\d+)?)\s*kbits/s"),
        PatternField.SPEED: re.compile(r"speed=\s*(\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)x"),
        PatternField.MUXING_OVERHEAD: re.compile(r"muxing overhead: (\d+(?:\.\d+)?)%"),
    }
)


def match_field(field: PatternField, line: str) -> str | None:
    """
    Search a line for one field.

    Args:
        field: Field to look for
        line: Diagnostic line

    Returns:
        Captured text, or None if the pattern does not occur
    """
    match = PATTERNS[field].search(line)
    return match.group(1) if match else None
