"""Event delivery: synthesis of domain events and handler registration."""

from ffmpeg_monitor.events.hub import EventHub, EventKind, Subscription
from ffmpeg_monitor.events.synthesizer import synthesize_completion, synthesize_progress

__all__ = [
    "EventHub",
    "EventKind",
    "Subscription",
    "synthesize_completion",
    "synthesize_progress",
]
