"""
Data models describing one supervised ffmpeg run.

This module contains the per-run context, the supervisor state machine states
and the outcome produced when a run reaches a terminal state.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional

from ..utils import FFmpegError, RunCancelledError


class RunState(str, Enum):
    """Lifecycle state of a run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAULTED = "faulted"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is possible."""
        return self in (RunState.COMPLETED, RunState.CANCELLED, RunState.FAULTED)


@dataclass
class RunContext:
    """
    Per-invocation descriptor shared by every event of a run.

    The total duration starts unknown. The first duration announcement seeds
    it; later announcements are ignored unless a completion line refreshes it.
    """

    input_file: str
    output_file: str
    command_line: str
    total_duration: Optional[timedelta] = None

    def seed_duration(self, value: timedelta) -> bool:
        """
        Set the total duration if none is known yet.

        Returns:
            True if the value was stored
        """
        if self.total_duration is not None:
            return False
        self.total_duration = value
        return True

    def refresh_duration(self, value: timedelta) -> None:
        """Replace the total duration with one reported on a completion line."""
        self.total_duration = value


@dataclass
class RunOutcome:
    """Result of a run; exactly one is produced when the process exits."""

    state: RunState
    context: RunContext
    exit_code: Optional[int] = None
    excerpt: Optional[tuple[str, str]] = None
    error: Optional[BaseException] = None
    elapsed: float = 0.0

    @property
    def succeeded(self) -> bool:
        """Check if the run completed."""
        return self.state == RunState.COMPLETED

    @property
    def cancelled(self) -> bool:
        """Check if the run was cancelled."""
        return self.state == RunState.CANCELLED

    @property
    def faulted(self) -> bool:
        """Check if the run failed."""
        return self.state == RunState.FAULTED

    @property
    def is_runtime_fault(self) -> bool:
        """Check if the failure came from handling output rather than the exit code."""
        return self.faulted and self.error is not None

    def describe(self) -> str:
        """Build a short human-readable description of the outcome."""
        if self.succeeded:
            return "ffmpeg completed successfully"
        if self.cancelled:
            return "ffmpeg run was cancelled"

        if self.error is not None:
            message = f"ffmpeg faulted while processing output: {self.error}"
        else:
            message = f"ffmpeg exited with code {self.exit_code}"
        if self.excerpt:
            message += ": " + " | ".join(self.excerpt)
        return message

    def raise_for_status(self) -> None:
        """
        Raise the matching exception for a run that did not complete.

        Raises:
            RunCancelledError: If the run was cancelled
            FFmpegError: If the run faulted (chained to the inner fault, if any)
        """
        if self.succeeded:
            return
        if self.cancelled:
            raise RunCancelledError(self.describe(), exit_code=self.exit_code)

        error = FFmpegError(
            self.describe(),
            exit_code=self.exit_code,
            excerpt=self.excerpt,
            command=self.context.command_line,
            inner=self.error,
        )
        raise error from self.error
