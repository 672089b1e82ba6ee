"""Shared utilities: errors, logging and helpers."""

from ffmpeg_monitor.utils.errors import (
    ConfigurationError,
    ExecutableNotFoundError,
    FFmpegError,
    MonitorError,
    RunCancelledError,
    SetupError,
    SpawnError,
)
from ffmpeg_monitor.utils.helpers import (
    format_duration,
    format_size,
    format_timestamp,
    parse_float,
    parse_int,
    parse_timestamp,
)
from ffmpeg_monitor.utils.logger import (
    RunLoggerAdapter,
    get_logger,
    get_run_logger,
    log_performance,
    setup_logger,
)

__all__ = [
    # Errors
    "ConfigurationError",
    "ExecutableNotFoundError",
    "FFmpegError",
    "MonitorError",
    "RunCancelledError",
    "SetupError",
    "SpawnError",
    # Helpers
    "format_duration",
    "format_size",
    "format_timestamp",
    "parse_float",
    "parse_int",
    "parse_timestamp",
    # Logging
    "RunLoggerAdapter",
    "get_logger",
    "get_run_logger",
    "log_performance",
    "setup_logger",
]
