"""
Configuration models using Pydantic.

This module defines the configuration structure for the ffmpeg monitor.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_STANDARD_ARGUMENTS = ["-nostdin", "-y", "-loglevel", "info"]


class FFmpegConfig(BaseModel):
    """FFmpeg executable configuration."""

    path: str = Field(default="ffmpeg", description="Path or name of the ffmpeg executable")
    standard_arguments: list[str] = Field(
        default_factory=lambda: list(DEFAULT_STANDARD_ARGUMENTS),
        description="Arguments placed before every command (non-interactive, overwrite, info log level)",
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate executable path."""
        if not v.strip():
            raise ValueError("path must not be empty")
        return v.strip()


class SupervisorConfig(BaseModel):
    """Process supervision tuning."""

    poll_interval: float = Field(
        default=0.1, ge=0.01, le=5.0, description="Cancellation polling interval in seconds"
    )
    kill_grace_period: float = Field(
        default=5.0, ge=0.0, le=60.0, description="Seconds between SIGTERM and SIGKILL on cancel"
    )
    log_tail_size: int = Field(
        default=50, ge=2, le=10000, description="Number of recent diagnostic lines kept"
    )
    handler_timeout: Optional[float] = Field(
        default=None, gt=0, description="Upper bound for async event handlers (None = unbounded)"
    )


class MonitorConfig(BaseModel):
    """Main monitor configuration."""

    ffmpeg: FFmpegConfig = Field(default_factory=FFmpegConfig)
    supervisor: SupervisorConfig = Field(default_factory=SupervisorConfig)

    @classmethod
    def create_default(cls) -> "MonitorConfig":
        """Create default configuration."""
        return cls()
