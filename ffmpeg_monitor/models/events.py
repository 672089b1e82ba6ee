"""
Immutable events delivered to subscribers while ffmpeg runs.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass(frozen=True)
class RawDataEvent:
    """One line of diagnostic output, delivered unconditionally."""

    data: str


@dataclass(frozen=True)
class ProgressEvent:
    """Progress of a running conversion."""

    input_file: str
    output_file: str
    command_line: str
    total_duration: Optional[timedelta]
    processed_duration: timedelta
    frame: Optional[int] = None
    fps: Optional[float] = None
    size_kb: Optional[int] = None
    bitrate: Optional[float] = None
    speed: Optional[float] = None

    @property
    def progress(self) -> Optional[float]:
        """Processed fraction (0.0 to 1.0), None while the total is unknown."""
        if not self.total_duration:
            return None
        ratio = self.processed_duration / self.total_duration
        return min(max(ratio, 0.0), 1.0)


@dataclass(frozen=True)
class CompletedEvent:
    """Conversion finished writing its output."""

    input_file: str
    output_file: str
    command_line: str
    total_duration: Optional[timedelta]
    muxing_overhead: float
