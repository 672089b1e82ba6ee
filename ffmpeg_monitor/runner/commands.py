"""
Argument templates for common ffmpeg operations.

Each function returns the operation-specific part of the command line; the
standard arguments are added by the supervisor. Paths are quoted for
shlex.split, no shell is involved.
"""

import shlex
from datetime import timedelta
from pathlib import Path
from typing import Union

from ..utils import format_timestamp

PathLike = Union[str, Path]


def _quote(path: PathLike) -> str:
    return shlex.quote(str(path))


def subtitle_command(input_file: PathLike, output_file: PathLike, subtitle_track: int = 0) -> str:
    """
    Build a subtitle extraction command (SRT output).

    Args:
        input_file: Source media file
        output_file: Subtitle file to write
        subtitle_track: Zero-based subtitle stream to extract

    Returns:
        Command line fragment
    """
    return (
        f"-i {_quote(input_file)} -vn -an -map 0:s:{subtitle_track} "
        f"-c:s:0 srt {_quote(output_file)}"
    )


def thumbnail_command(
    input_file: PathLike, output_file: PathLike, seek_position: timedelta
) -> str:
    """
    Build a single-frame thumbnail command.

    Args:
        input_file: Source video file
        output_file: Image file to write
        seek_position: Position of the frame

    Returns:
        Command line fragment
    """
    return (
        f"-ss {seek_position.total_seconds():g} -i {_quote(input_file)} "
        f"-vframes 1 {_quote(output_file)}"
    )


def cut_command(
    input_file: PathLike, output_file: PathLike, start: timedelta, end: timedelta
) -> str:
    """
    Build a stream-copy cut command (no re-encode).

    Args:
        input_file: Source media file
        output_file: Media file to write
        start: Start of the kept range
        end: End of the kept range

    Returns:
        Command line fragment
    """
    return (
        f"-ss {format_timestamp(start)} -to {format_timestamp(end)} -i {_quote(input_file)} "
        f"-map 0:v? -c copy -map 0:a? -c copy -map 0:s? -c copy {_quote(output_file)}"
    )


def ac3_audio_command(
    input_file: PathLike,
    output_file: PathLike,
    audio_track: int,
    bitrate: Union[int, str],
    sampling_rate: int,
) -> str:
    """
    Build an AC-3 audio re-encode command; video and subtitles are copied.

    Args:
        input_file: Source media file
        output_file: Media file to write
        audio_track: Stream index of the audio track in the input
        bitrate: Bitrate in bits per second, or an ffmpeg bitrate string ("192k")
        sampling_rate: Output sampling rate in Hz

    Returns:
        Command line fragment
    """
    return (
        f"-hwaccel auto -i {_quote(input_file)} -map 0:{audio_track} "
        f"-c:s copy -c:v copy -c:a ac3 -b:a {bitrate} -ar {sampling_rate} "
        f"{_quote(output_file)}"
    )


def avc_video_command(input_file: PathLike, output_file: PathLike, video_track: int) -> str:
    """
    Build an H.264 video re-encode command; audio and subtitles are copied.

    Args:
        input_file: Source media file
        output_file: Media file to write
        video_track: Stream index of the video track in the input

    Returns:
        Command line fragment
    """
    return (
        f"-hwaccel auto -i {_quote(input_file)} -map 0:{video_track} "
        f"-c:a copy -c:s copy -c:v libx264 {_quote(output_file)}"
    )
