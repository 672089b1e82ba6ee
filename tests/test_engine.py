"""
Tests for the FFmpeg engine and command templates.
"""

import asyncio
import sys
from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from conftest import COMPLETION_LINE, DURATION_LINE, progress_line
from ffmpeg_monitor.models import RunState
from ffmpeg_monitor.runner import (
    FFmpeg,
    ac3_audio_command,
    avc_video_command,
    cut_command,
    resolve_executable,
    subtitle_command,
    thumbnail_command,
)
from ffmpeg_monitor.utils import (
    ExecutableNotFoundError,
    FFmpegError,
    RunCancelledError,
    SetupError,
)


class TestResolveExecutable:
    """Test executable lookup."""

    def test_existing_file(self):
        assert resolve_executable(sys.executable) == sys.executable

    def test_name_on_path(self):
        """Test bare names are looked up on PATH."""
        with patch("ffmpeg_monitor.runner.engine.shutil.which", return_value="/opt/bin/ffmpeg"):
            assert resolve_executable("ffmpeg") == "/opt/bin/ffmpeg"

    def test_missing(self, tmp_path):
        """Test a path that does not exist."""
        with pytest.raises(ExecutableNotFoundError) as exc_info:
            resolve_executable(str(tmp_path / "ffmpeg"))

        assert exc_info.value.path == str(tmp_path / "ffmpeg")

    def test_name_not_on_path(self):
        with patch("ffmpeg_monitor.runner.engine.shutil.which", return_value=None):
            with pytest.raises(ExecutableNotFoundError):
                resolve_executable("ffmpeg-that-does-not-exist")


class TestFFmpeg:
    """Test the public engine."""

    def test_missing_executable(self, tmp_path):
        """Test construction fails before any run."""
        with pytest.raises(ExecutableNotFoundError):
            FFmpeg(tmp_path / "missing-ffmpeg")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command_line", ["", "   ", "\t\n"])
    async def test_blank_command(self, monitor_config, command_line):
        """Test blank command lines are rejected before spawning."""
        engine = FFmpeg(config=monitor_config)

        with patch("asyncio.create_subprocess_exec") as spawn:
            with pytest.raises(SetupError):
                await engine.run("in.mkv", "out.mp4", command_line)

        spawn.assert_not_called()

    @pytest.mark.asyncio
    async def test_run_with_events(self, monitor_config, scenario):
        """Test subscriptions receive the events of a run."""
        engine = FFmpeg(config=monitor_config)
        progress = []
        completed = []
        raw = []
        engine.on_progress(progress.append)
        engine.on_completed(completed.append)
        engine.on_data(raw.append)

        command = scenario(stderr=[DURATION_LINE, progress_line(5), COMPLETION_LINE])
        outcome = await engine.run(Path("in.mkv"), Path("out.mp4"), command)

        assert outcome.state == RunState.COMPLETED
        assert outcome.context.input_file == "in.mkv"
        assert progress[0].output_file == "out.mp4"
        assert progress[0].progress == pytest.approx(0.5)
        assert len(completed) == 1
        assert raw[0].data == command

    @pytest.mark.asyncio
    async def test_failure_raises(self, monitor_config, scenario):
        """Test check=True surfaces failures as FFmpegError."""
        engine = FFmpeg(config=monitor_config)
        command = scenario(stderr=["No such file\n", "Exiting\n"], exit_code=1)

        with pytest.raises(FFmpegError) as exc_info:
            await engine.run("in.mkv", "out.mp4", command)

        assert exc_info.value.exit_code == 1
        assert exc_info.value.excerpt == ("Exiting", "No such file")
        assert exc_info.value.command == command

    @pytest.mark.asyncio
    async def test_failure_with_bracketed_output(self, monitor_config, scenario):
        """Test diagnostic lines that look like Rich markup keep the FFmpegError."""
        engine = FFmpeg(config=monitor_config)
        command = scenario(
            stderr=[
                "Input #0, matroska, from '/media/[/x] show.mkv':\n",
                "[out#0/mp4 @ 0x55d1] Error opening output\n",
            ],
            exit_code=2,
        )

        with pytest.raises(FFmpegError) as exc_info:
            await engine.run("in.mkv", "out.mp4", command)

        assert exc_info.value.excerpt == (
            "[out#0/mp4 @ 0x55d1] Error opening output",
            "Input #0, matroska, from '/media/[/x] show.mkv':",
        )

    @pytest.mark.asyncio
    async def test_failure_without_check(self, monitor_config, scenario):
        """Test check=False returns the outcome instead of raising."""
        engine = FFmpeg(config=monitor_config)

        outcome = await engine.run("in.mkv", "out.mp4", scenario(exit_code=3), check=False)

        assert outcome.faulted
        assert outcome.exit_code == 3

    @pytest.mark.asyncio
    async def test_cancellation_raises(self, monitor_config, scenario):
        """Test a cancelled run raises RunCancelledError rather than FFmpegError."""
        engine = FFmpeg(config=monitor_config)
        cancel = asyncio.Event()
        engine.on_progress(lambda event: cancel.set())

        with pytest.raises(RunCancelledError):
            await asyncio.wait_for(
                engine.run(
                    "in.mkv",
                    "out.mp4",
                    scenario(stderr=[progress_line(1)], hang=True),
                    cancel_event=cancel,
                ),
                timeout=20,
            )

    @pytest.mark.asyncio
    async def test_sequential_runs_reuse_engine(self, monitor_config, scenario):
        """Test one engine serves several runs with fresh contexts."""
        engine = FFmpeg(config=monitor_config)

        first = await engine.run("a.mkv", "a.mp4", scenario(stderr=[DURATION_LINE]))
        second = await engine.run("b.mkv", "b.mp4", scenario(stderr=[]))

        assert first.context.total_duration == timedelta(seconds=10)
        assert second.context.total_duration is None

    @pytest.mark.asyncio
    async def test_operation_builds_template(self, monitor_config):
        """Test convenience operations delegate to run() with their template."""
        engine = FFmpeg(config=monitor_config)

        with patch.object(FFmpeg, "run", new_callable=AsyncMock) as run:
            await engine.cut_media(
                "in.mkv", "out.mkv", timedelta(seconds=5), timedelta(minutes=1)
            )

        run.assert_called_once_with(
            "in.mkv",
            "out.mkv",
            cut_command("in.mkv", "out.mkv", timedelta(seconds=5), timedelta(minutes=1)),
            cancel_event=None,
        )


class TestCommandTemplates:
    """Test argument templates."""

    def test_subtitle(self):
        assert subtitle_command("in.mkv", "out.srt", 2) == (
            "-i in.mkv -vn -an -map 0:s:2 -c:s:0 srt out.srt"
        )

    def test_thumbnail(self):
        """Test the seek position is passed in seconds."""
        command = thumbnail_command("in.mkv", "thumb.jpg", timedelta(minutes=1, seconds=30.5))
        assert command == "-ss 90.5 -i in.mkv -vframes 1 thumb.jpg"

    def test_cut(self):
        command = cut_command(
            "in.mkv", "out.mkv", timedelta(seconds=5), timedelta(hours=1, milliseconds=250)
        )
        assert command.startswith("-ss 00:00:05.000 -to 01:00:00.250 -i in.mkv ")
        assert command.endswith(" -c copy out.mkv")

    def test_ac3_audio(self):
        assert ac3_audio_command("in.mkv", "out.mkv", 1, "448k", 48000) == (
            "-hwaccel auto -i in.mkv -map 0:1 -c:s copy -c:v copy -c:a ac3 "
            "-b:a 448k -ar 48000 out.mkv"
        )

    def test_avc_video(self):
        assert avc_video_command("in.mkv", "out.mkv", 0) == (
            "-hwaccel auto -i in.mkv -map 0:0 -c:a copy -c:s copy -c:v libx264 out.mkv"
        )

    def test_paths_are_quoted(self):
        """Test paths with spaces survive shlex splitting."""
        command = subtitle_command("my movie.mkv", "my movie.srt")
        assert "'my movie.mkv'" in command
        assert "'my movie.srt'" in command
