"""Run orchestration and command templates."""

from ffmpeg_monitor.runner.commands import (
    ac3_audio_command,
    avc_video_command,
    cut_command,
    subtitle_command,
    thumbnail_command,
)
from ffmpeg_monitor.runner.engine import FFmpeg, resolve_executable

__all__ = [
    "FFmpeg",
    "resolve_executable",
    # Command templates
    "ac3_audio_command",
    "avc_video_command",
    "cut_command",
    "subtitle_command",
    "thumbnail_command",
]
