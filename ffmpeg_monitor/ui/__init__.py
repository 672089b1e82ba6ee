"""UI components and progress display."""

from ffmpeg_monitor.ui.progress import RunProgressDisplay, format_event_summary

__all__ = [
    "RunProgressDisplay",
    "format_event_summary",
]
