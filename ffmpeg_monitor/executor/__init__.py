"""Process execution and supervision."""

from ffmpeg_monitor.executor.supervisor import CancelSignal, ProcessSupervisor

__all__ = [
    "CancelSignal",
    "ProcessSupervisor",
]
