"""
Rich progress display for ffmpeg runs.

This module renders the events of an FFmpeg engine as a terminal progress bar:
- Percentage once the media duration is known (pulsing bar before that)
- Speed, frame rate and output size of the running conversion
- Optional echo of every raw diagnostic line
"""

from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from ..events import Subscription
from ..models import CompletedEvent, ProgressEvent, RawDataEvent
from ..utils import format_duration, format_size, get_logger

if TYPE_CHECKING:
    from ..runner import FFmpeg

logger = get_logger(__name__)


def format_event_summary(event: ProgressEvent) -> str:
    """
    Render a progress event as one line of text.

    Args:
        event: Progress event

    Returns:
        Summary such as "00:00:05 / 00:12:34 | frame 120 | 25.0 fps | 512.0 KB | 1.02x"
    """
    parts = [f"{format_duration(event.processed_duration)} / {format_duration(event.total_duration)}"]

    if event.frame is not None:
        parts.append(f"frame {event.frame}")
    if event.fps is not None:
        parts.append(f"{event.fps:.1f} fps")
    if event.size_kb is not None:
        parts.append(format_size(event.size_kb))
    if event.bitrate is not None:
        parts.append(f"{event.bitrate:.1f} kbit/s")
    if event.speed is not None:
        parts.append(f"{event.speed:.2f}x")

    return " | ".join(parts)


class RunProgressDisplay:
    """
    Progress bar bound to the events of an FFmpeg engine.

    Use as a context manager around one run; handlers are removed on exit.
    """

    def __init__(
        self,
        engine: "FFmpeg",
        description: str = "ffmpeg",
        console: Optional[Console] = None,
        show_raw: bool = False,
    ):
        """
        Initialize progress display.

        Args:
            engine: Engine whose events are displayed
            description: Label of the progress bar
            console: Rich console (creates new if None)
            show_raw: Print every diagnostic line above the bar
        """
        self.engine = engine
        self.description = description
        self.console = console or Console()
        self.show_raw = show_raw
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None
        self._subscriptions: list[Subscription] = []
        self.last_event: Optional[ProgressEvent] = None
        self.completed_event: Optional[CompletedEvent] = None

    def create_progress(self) -> Progress:
        """Create Rich progress display with custom columns."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=None),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            TextColumn("[cyan]{task.fields[status]}"),
            console=self.console,
            expand=True,
        )

    def start(self) -> None:
        """Start rendering and subscribe to the engine."""
        self._progress = self.create_progress()
        self._task_id = self._progress.add_task(escape(self.description), total=None, status="")
        self._progress.start()

        self._subscriptions.append(self.engine.on_progress(self.handle_progress))
        self._subscriptions.append(self.engine.on_completed(self.handle_completed))
        if self.show_raw:
            self._subscriptions.append(self.engine.on_data(self.handle_data))
        logger.debug("Progress display started")

    def stop(self) -> None:
        """Unsubscribe and stop rendering."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()

        if self._progress:
            self._progress.stop()
            self._progress = None
        logger.debug("Progress display stopped")

    def handle_progress(self, event: ProgressEvent) -> None:
        """Update the bar from a progress event."""
        self.last_event = event
        if not self._progress or self._task_id is None:
            return

        ratio = event.progress
        if ratio is None:
            self._progress.update(self._task_id, status=format_event_summary(event))
        else:
            self._progress.update(
                self._task_id,
                total=100.0,
                completed=ratio * 100,
                status=format_event_summary(event),
            )

    def handle_completed(self, event: CompletedEvent) -> None:
        """Fill the bar once ffmpeg reports its muxing overhead."""
        self.completed_event = event
        if not self._progress or self._task_id is None:
            return

        self._progress.update(
            self._task_id,
            total=100.0,
            completed=100.0,
            status=f"✓ Complete (overhead {event.muxing_overhead:.2f}%)",
        )

    def handle_data(self, event: RawDataEvent) -> None:
        """Echo a raw diagnostic line."""
        if self._progress:
            self._progress.console.print(f"[dim]{escape(event.data)}[/dim]")

    def __enter__(self) -> "RunProgressDisplay":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()
