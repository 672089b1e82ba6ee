"""Command-line interface."""

from ffmpeg_monitor.cli.main import app, main

__all__ = ["app", "main"]
