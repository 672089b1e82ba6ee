"""Configuration management for the ffmpeg monitor."""

from ffmpeg_monitor.config.manager import (
    ConfigManager,
    get_config,
    get_config_manager,
)
from ffmpeg_monitor.config.models import (
    DEFAULT_STANDARD_ARGUMENTS,
    FFmpegConfig,
    MonitorConfig,
    SupervisorConfig,
)

__all__ = [
    # Manager
    "ConfigManager",
    "get_config",
    "get_config_manager",
    # Models
    "DEFAULT_STANDARD_ARGUMENTS",
    "FFmpegConfig",
    "MonitorConfig",
    "SupervisorConfig",
]
