"""
Classification and field extraction for ffmpeg diagnostic lines.

Each function looks at one line in isolation. Field matchers are independent:
a field that is missing or does not parse is reported as absent instead of
failing the whole line.
"""

from datetime import timedelta
from enum import Enum
from typing import Optional

from ..models import CompletionSample, ProgressSample, RunContext
from ..utils import parse_float, parse_int, parse_timestamp
from .patterns import (
    BITRATE_MARKER,
    COMPLETION_MARKER,
    SIZE_MARKER,
    TIME_MARKER,
    PatternField,
    match_field,
)


class LineKind(str, Enum):
    """Category of a diagnostic line."""

    PROGRESS = "progress"
    COMPLETION = "completion"
    OTHER = "other"


def is_progress_line(line: str) -> bool:
    """Check if a line carries the size, time and bitrate markers."""
    return SIZE_MARKER in line and TIME_MARKER in line and BITRATE_MARKER in line


def is_completion_line(line: str) -> bool:
    """Check if a line carries the muxing overhead marker."""
    return COMPLETION_MARKER in line


def classify_line(line: str) -> LineKind:
    """
    Decide the category of a diagnostic line.

    Progress takes precedence when a line carries both sets of markers.
    """
    if is_progress_line(line):
        return LineKind.PROGRESS
    if is_completion_line(line):
        return LineKind.COMPLETION
    return LineKind.OTHER


def extract_duration(line: str) -> Optional[timedelta]:
    """
    Extract the media duration from a "Duration: H:MM:SS.ff, ..." announcement.

    Args:
        line: Diagnostic line

    Returns:
        Announced duration, or None if absent or unparsable (e.g. "N/A")
    """
    text = match_field(PatternField.DURATION, line)
    if text is None:
        return None
    return parse_timestamp(text)


def extract_progress(line: str, context: Optional[RunContext] = None) -> Optional[ProgressSample]:
    """
    Extract a progress sample from a progress line.

    Args:
        line: Diagnostic line
        context: Run context supplying the total duration

    Returns:
        ProgressSample, or None if the line is not a progress line
    """
    if not is_progress_line(line):
        return None

    time_text = match_field(PatternField.TIME, line)
    processed = parse_timestamp(time_text) if time_text is not None else None

    return ProgressSample(
        processed_duration=processed or timedelta(0),
        total_duration=context.total_duration if context else None,
        frame=_optional(parse_int, match_field(PatternField.FRAME, line)),
        fps=_optional(parse_float, match_field(PatternField.FPS, line)),
        size_kb=_optional(parse_int, match_field(PatternField.SIZE, line)),
        bitrate=_optional(parse_float, match_field(PatternField.BITRATE, line)),
        speed=_optional(parse_float, match_field(PatternField.SPEED, line)),
    )


def extract_completion(line: str) -> Optional[CompletionSample]:
    """
    Extract the completion summary from a muxing overhead line.

    Args:
        line: Diagnostic line

    Returns:
        CompletionSample, or None if the line is not a completion line
    """
    if not is_completion_line(line):
        return None

    overhead = _optional(parse_float, match_field(PatternField.MUXING_OVERHEAD, line))

    return CompletionSample(
        total_duration=extract_duration(line) or timedelta(0),
        muxing_overhead=overhead if overhead is not None else 0.0,
    )


def _optional(parse, text: Optional[str]):
    return parse(text) if text is not None else None
