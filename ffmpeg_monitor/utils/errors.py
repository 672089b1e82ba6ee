"""
Custom exceptions for the ffmpeg monitor.

This module defines the exception hierarchy used throughout the application.
Setup and spawn errors abort a run before any progress is reported; process
failures and runtime faults share the FFmpegError channel.
"""

from typing import Optional


class MonitorError(Exception):
    """Base exception for all monitor errors."""

    pass


class SetupError(MonitorError):
    """Run cannot be attempted (missing executable, empty command)."""

    pass


class ExecutableNotFoundError(SetupError):
    """The ffmpeg executable does not exist."""

    def __init__(self, path: str):
        """
        Initialize error with the missing executable path.

        Args:
            path: Path or name that could not be resolved
        """
        super().__init__(f"FFmpeg executable not found: {path}")
        self.path = path


class ConfigurationError(MonitorError):
    """Configuration is invalid or missing."""

    pass


class SpawnError(MonitorError):
    """The ffmpeg process could not be created."""

    def __init__(self, message: str, command: list[str] | None = None):
        """
        Initialize spawn error.

        Args:
            message: Error message
            command: Argument vector that failed to start
        """
        super().__init__(message)
        self.command = command


class FFmpegError(MonitorError):
    """FFmpeg exited with an unacceptable code or faulted while running."""

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        excerpt: Optional[tuple[str, str]] = None,
        command: str | None = None,
        inner: Optional[BaseException] = None,
    ):
        """
        Initialize FFmpeg error with run details.

        Args:
            message: Error message
            exit_code: Exit code of the ffmpeg process
            excerpt: Two most recent diagnostic lines, newest first
            command: Command line that was executed
            inner: Fault raised while handling diagnostic output, if any
        """
        super().__init__(message)
        self.exit_code = exit_code
        self.excerpt = excerpt
        self.command = command
        self.inner = inner

    @property
    def is_runtime_fault(self) -> bool:
        """True when the failure was caused by an internal fault."""
        return self.inner is not None


class RunCancelledError(MonitorError):
    """The run was cancelled at the caller's request."""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code
