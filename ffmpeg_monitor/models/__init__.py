"""Data models for the ffmpeg monitor."""

from ffmpeg_monitor.models.events import (
    CompletedEvent,
    ProgressEvent,
    RawDataEvent,
)
from ffmpeg_monitor.models.run import (
    RunContext,
    RunOutcome,
    RunState,
)
from ffmpeg_monitor.models.samples import (
    CompletionSample,
    ProgressSample,
)

__all__ = [
    # Event models
    "CompletedEvent",
    "ProgressEvent",
    "RawDataEvent",
    # Run models
    "RunContext",
    "RunOutcome",
    "RunState",
    # Sample models
    "CompletionSample",
    "ProgressSample",
]
