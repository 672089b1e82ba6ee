"""
FFmpeg Monitor

Runs ffmpeg as a supervised child process and turns its diagnostic output
into structured progress and completion events.
"""

__version__ = "0.1.0"

from ffmpeg_monitor.config import MonitorConfig
from ffmpeg_monitor.events import EventKind, Subscription
from ffmpeg_monitor.models import (
    CompletedEvent,
    ProgressEvent,
    RawDataEvent,
    RunContext,
    RunOutcome,
    RunState,
)
from ffmpeg_monitor.runner import FFmpeg
from ffmpeg_monitor.utils import (
    ConfigurationError,
    ExecutableNotFoundError,
    FFmpegError,
    MonitorError,
    RunCancelledError,
    SetupError,
    SpawnError,
    get_logger,
    setup_logger,
)

__all__ = [
    "__version__",
    # Engine
    "FFmpeg",
    "MonitorConfig",
    "EventKind",
    "Subscription",
    # Models
    "CompletedEvent",
    "ProgressEvent",
    "RawDataEvent",
    "RunContext",
    "RunOutcome",
    "RunState",
    # Errors
    "ConfigurationError",
    "ExecutableNotFoundError",
    "FFmpegError",
    "MonitorError",
    "RunCancelledError",
    "SetupError",
    "SpawnError",
    # Logging
    "get_logger",
    "setup_logger",
]
