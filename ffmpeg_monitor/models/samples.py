"""
Typed records extracted from single ffmpeg diagnostic lines.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass
class ProgressSample:
    """Point-in-time encode state parsed from one progress line."""

    processed_duration: timedelta = timedelta(0)
    total_duration: Optional[timedelta] = None
    frame: Optional[int] = None
    fps: Optional[float] = None
    size_kb: Optional[int] = None
    bitrate: Optional[float] = None  # kbit/s
    speed: Optional[float] = None


@dataclass
class CompletionSample:
    """Terminal summary parsed from the muxing overhead line."""

    total_duration: timedelta = timedelta(0)
    muxing_overhead: float = 0.0  # percent
