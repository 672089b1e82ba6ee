"""
Public entry point for running ffmpeg with progress events.

An FFmpeg instance validates the executable once, keeps the event
subscriptions, and creates a fresh context and supervisor for every run, so
one instance can serve several concurrent runs.
"""

import shutil
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union

from rich.markup import escape

from ..config import MonitorConfig
from ..events import EventHub, EventKind, Subscription
from ..events.hub import Handler
from ..executor import CancelSignal, ProcessSupervisor
from ..models import RunContext, RunOutcome
from ..utils import ExecutableNotFoundError, SetupError, get_logger, log_performance
from .commands import (
    PathLike,
    ac3_audio_command,
    avc_video_command,
    cut_command,
    subtitle_command,
    thumbnail_command,
)

logger = get_logger(__name__)


def resolve_executable(path: str) -> str:
    """
    Resolve the ffmpeg executable.

    Args:
        path: File path, or a bare name looked up on PATH

    Returns:
        Path of an existing executable

    Raises:
        ExecutableNotFoundError: If nothing exists at the path or on PATH
    """
    candidate = Path(path).expanduser()
    if candidate.is_file():
        return str(candidate)

    if candidate.name == path:
        found = shutil.which(path)
        if found:
            return found

    raise ExecutableNotFoundError(path)


class FFmpeg:
    """
    Runs ffmpeg commands and reports their progress.

    Example:
        ffmpeg = FFmpeg("/usr/bin/ffmpeg")
        ffmpeg.on_progress(lambda event: print(event.processed_duration))
        await ffmpeg.run("in.mkv", "out.mp4", "-i in.mkv -c:v libx264 out.mp4")
    """

    def __init__(
        self,
        ffmpeg_path: Optional[Union[str, Path]] = None,
        config: Optional[MonitorConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            ffmpeg_path: ffmpeg executable (defaults to config.ffmpeg.path)
            config: Monitor configuration (defaults if None)

        Raises:
            ExecutableNotFoundError: If the executable does not exist
        """
        self.config = config or MonitorConfig.create_default()
        self.ffmpeg_path = resolve_executable(str(ffmpeg_path or self.config.ffmpeg.path))
        self.hub = EventHub(handler_timeout=self.config.supervisor.handler_timeout)

        logger.debug(f"Using ffmpeg at {escape(self.ffmpeg_path)}")

    def on_data(self, handler: Handler) -> Subscription:
        """Subscribe to every diagnostic line (RawDataEvent)."""
        return self.hub.subscribe(EventKind.DATA, handler)

    def on_progress(self, handler: Handler) -> Subscription:
        """Subscribe to progress updates (ProgressEvent)."""
        return self.hub.subscribe(EventKind.PROGRESS, handler)

    def on_completed(self, handler: Handler) -> Subscription:
        """Subscribe to conversion completion (CompletedEvent)."""
        return self.hub.subscribe(EventKind.COMPLETED, handler)

    @log_performance(logger)
    async def run(
        self,
        input_file: PathLike,
        output_file: PathLike,
        command_line: str,
        cancel_event: Optional[CancelSignal] = None,
        check: bool = True,
    ) -> RunOutcome:
        """
        Run ffmpeg with a custom command line.

        The command line must contain everything ffmpeg needs (inputs, outputs,
        options); input_file and output_file are attached to the events.

        Args:
            input_file: Input file reported in events
            output_file: Output file reported in events
            command_line: ffmpeg arguments, without the executable
            cancel_event: Event that cancels the run when set
            check: Raise if the run did not complete

        Returns:
            RunOutcome of the run

        Raises:
            SetupError: If the command line is empty
            SpawnError: If ffmpeg cannot be started
            FFmpegError: If ffmpeg failed (check=True)
            RunCancelledError: If the run was cancelled (check=True)
        """
        if not command_line or not command_line.strip():
            raise SetupError("ffmpeg command line must not be empty")

        context = RunContext(
            input_file=str(input_file),
            output_file=str(output_file),
            command_line=command_line,
        )
        supervisor = ProcessSupervisor(
            executable=self.ffmpeg_path,
            context=context,
            hub=self.hub,
            config=self.config.supervisor,
            standard_arguments=self.config.ffmpeg.standard_arguments,
            cancel_event=cancel_event,
        )

        outcome = await supervisor.run()
        if check:
            outcome.raise_for_status()
        return outcome

    async def extract_subtitle(
        self,
        input_file: PathLike,
        output_file: PathLike,
        subtitle_track: int = 0,
        cancel_event: Optional[CancelSignal] = None,
    ) -> RunOutcome:
        """Extract a subtitle stream to an SRT file."""
        return await self.run(
            input_file,
            output_file,
            subtitle_command(input_file, output_file, subtitle_track),
            cancel_event=cancel_event,
        )

    async def get_thumbnail(
        self,
        input_file: PathLike,
        output_file: PathLike,
        seek_position: timedelta,
        cancel_event: Optional[CancelSignal] = None,
    ) -> RunOutcome:
        """Write the frame at seek_position to an image file."""
        return await self.run(
            input_file,
            output_file,
            thumbnail_command(input_file, output_file, seek_position),
            cancel_event=cancel_event,
        )

    async def cut_media(
        self,
        input_file: PathLike,
        output_file: PathLike,
        start: timedelta,
        end: timedelta,
        cancel_event: Optional[CancelSignal] = None,
    ) -> RunOutcome:
        """Copy the range start-end of every stream without re-encoding."""
        return await self.run(
            input_file,
            output_file,
            cut_command(input_file, output_file, start, end),
            cancel_event=cancel_event,
        )

    async def convert_audio_to_ac3(
        self,
        input_file: PathLike,
        output_file: PathLike,
        audio_track: int,
        bitrate: Union[int, str],
        sampling_rate: int,
        cancel_event: Optional[CancelSignal] = None,
    ) -> RunOutcome:
        """Re-encode one audio track to AC-3, copying video and subtitles."""
        return await self.run(
            input_file,
            output_file,
            ac3_audio_command(input_file, output_file, audio_track, bitrate, sampling_rate),
            cancel_event=cancel_event,
        )

    async def convert_video_to_avc(
        self,
        input_file: PathLike,
        output_file: PathLike,
        video_track: int,
        cancel_event: Optional[CancelSignal] = None,
    ) -> RunOutcome:
        """Re-encode one video track to H.264, copying audio and subtitles."""
        return await self.run(
            input_file,
            output_file,
            avc_video_command(input_file, output_file, video_track),
            cancel_event=cancel_event,
        )
