"""Parsing of ffmpeg diagnostic output."""

from ffmpeg_monitor.parser.extractor import (
    LineKind,
    classify_line,
    extract_completion,
    extract_duration,
    extract_progress,
    is_completion_line,
    is_progress_line,
)
from ffmpeg_monitor.parser.patterns import PATTERNS, PatternField

__all__ = [
    "LineKind",
    "PATTERNS",
    "PatternField",
    "classify_line",
    "extract_completion",
    "extract_duration",
    "extract_progress",
    "is_completion_line",
    "is_progress_line",
]
