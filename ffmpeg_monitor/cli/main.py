"""
CLI interface for the ffmpeg monitor.

This module provides the command-line interface using Typer and Rich
for terminal output.
"""

import asyncio
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..config import get_config_manager
from ..models import RunOutcome
from ..runner import (
    FFmpeg,
    ac3_audio_command,
    cut_command,
    subtitle_command,
    thumbnail_command,
)
from ..ui import RunProgressDisplay
from ..utils import (
    MonitorError,
    RunCancelledError,
    format_duration,
    get_logger,
    setup_logger,
)

# Initialize Typer app
app = typer.Typer(
    name="ffmpeg-monitor",
    help="Run ffmpeg with live progress and structured failure reports",
    add_completion=False,
)

# Console for rich output
console = Console()

# Logger
logger = get_logger(__name__)

# Options shared by every run command
FFMPEG_OPTION = typer.Option(None, "--ffmpeg", help="Path to the ffmpeg executable")
CONFIG_OPTION = typer.Option(
    None, "--config", "-c", exists=True, dir_okay=False, help="Custom configuration file"
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")
LOG_OPTION = typer.Option(None, "--log", help="Log file path")
RAW_OPTION = typer.Option(False, "--raw", help="Print every ffmpeg diagnostic line")


def _create_engine(
    ffmpeg_path: Optional[Path],
    config_file: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
) -> FFmpeg:
    """Configure logging and configuration, then build the engine."""
    setup_logger(
        level="DEBUG" if verbose else "INFO",
        log_file=log_file,
        verbose=verbose,
        console=console,
    )

    config_manager = get_config_manager()
    if config_file:
        config_manager.load(config_file)

    return FFmpeg(ffmpeg_path, config=config_manager.config)


async def _run_with_display(
    engine: FFmpeg,
    input_file: Path,
    output_file: Path,
    command_line: str,
    show_raw: bool,
) -> RunOutcome:
    with RunProgressDisplay(
        engine, description=input_file.name, console=console, show_raw=show_raw
    ):
        return await engine.run(input_file, output_file, command_line)


def _execute(
    input_file: Path,
    output_file: Path,
    command_line: str,
    ffmpeg_path: Optional[Path],
    config_file: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    show_raw: bool,
) -> None:
    """Run one command with a progress bar and map failures to exit codes."""
    try:
        engine = _create_engine(ffmpeg_path, config_file, verbose, log_file)
        outcome = asyncio.run(
            _run_with_display(engine, input_file, output_file, command_line, show_raw)
        )

    except (KeyboardInterrupt, RunCancelledError):
        console.print("\n[yellow]⚠ Run cancelled[/yellow]")
        sys.exit(130)
    except MonitorError as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(e))}")
        if verbose:
            console.print_exception()
        sys.exit(1)

    total = format_duration(outcome.context.total_duration)
    console.print(
        Panel.fit(
            "[bold green]✓ ffmpeg completed successfully[/bold green]\n"
            f"[dim]Output: {output_file}[/dim]\n"
            f"[dim]Media duration: {total} • Elapsed: {outcome.elapsed:.1f}s[/dim]",
            border_style="green",
        )
    )


@app.command("run")
def run_command(
    input_file: Path = typer.Argument(..., help="Input file reported in progress events"),
    output_file: Path = typer.Argument(..., help="Output file reported in progress events"),
    command_line: str = typer.Argument(..., help="ffmpeg arguments, e.g. \"-i in.mkv out.mp4\""),
    ffmpeg_path: Optional[Path] = FFMPEG_OPTION,
    config_file: Optional[Path] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
    log_file: Optional[Path] = LOG_OPTION,
    show_raw: bool = RAW_OPTION,
) -> None:
    """
    Run ffmpeg with a custom command line.
    """
    _execute(
        input_file, output_file, command_line, ffmpeg_path, config_file, verbose, log_file, show_raw
    )


@app.command("thumbnail")
def thumbnail_cli(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Video file"),
    output_file: Path = typer.Argument(..., help="Image file to write"),
    at: float = typer.Option(0.0, "--at", min=0.0, help="Seek position in seconds"),
    ffmpeg_path: Optional[Path] = FFMPEG_OPTION,
    config_file: Optional[Path] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
    log_file: Optional[Path] = LOG_OPTION,
    show_raw: bool = RAW_OPTION,
) -> None:
    """
    Extract one frame as an image.
    """
    command_line = thumbnail_command(input_file, output_file, timedelta(seconds=at))
    _execute(
        input_file, output_file, command_line, ffmpeg_path, config_file, verbose, log_file, show_raw
    )


@app.command("cut")
def cut_cli(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Media file"),
    output_file: Path = typer.Argument(..., help="Media file to write"),
    start: float = typer.Option(..., "--start", min=0.0, help="Start in seconds"),
    end: float = typer.Option(..., "--end", min=0.0, help="End in seconds"),
    ffmpeg_path: Optional[Path] = FFMPEG_OPTION,
    config_file: Optional[Path] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
    log_file: Optional[Path] = LOG_OPTION,
    show_raw: bool = RAW_OPTION,
) -> None:
    """
    Cut a range of the media without re-encoding.
    """
    if end <= start:
        console.print("[red]✗ --end must be after --start[/red]")
        sys.exit(2)

    command_line = cut_command(
        input_file, output_file, timedelta(seconds=start), timedelta(seconds=end)
    )
    _execute(
        input_file, output_file, command_line, ffmpeg_path, config_file, verbose, log_file, show_raw
    )


@app.command("subtitle")
def subtitle_cli(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Media file"),
    output_file: Path = typer.Argument(..., help="SRT file to write"),
    track: int = typer.Option(0, "--track", "-t", min=0, help="Zero-based subtitle stream"),
    ffmpeg_path: Optional[Path] = FFMPEG_OPTION,
    config_file: Optional[Path] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
    log_file: Optional[Path] = LOG_OPTION,
    show_raw: bool = RAW_OPTION,
) -> None:
    """
    Extract a subtitle stream to SRT.
    """
    command_line = subtitle_command(input_file, output_file, track)
    _execute(
        input_file, output_file, command_line, ffmpeg_path, config_file, verbose, log_file, show_raw
    )


@app.command("audio")
def audio_cli(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Media file"),
    output_file: Path = typer.Argument(..., help="Media file to write"),
    track: int = typer.Option(..., "--track", "-t", min=0, help="Stream index of the audio track"),
    bitrate: str = typer.Option("448k", "--bitrate", "-b", help="AC-3 bitrate"),
    sampling_rate: int = typer.Option(48000, "--rate", "-r", help="Sampling rate in Hz"),
    ffmpeg_path: Optional[Path] = FFMPEG_OPTION,
    config_file: Optional[Path] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
    log_file: Optional[Path] = LOG_OPTION,
    show_raw: bool = RAW_OPTION,
) -> None:
    """
    Re-encode an audio track to AC-3.
    """
    command_line = ac3_audio_command(input_file, output_file, track, bitrate, sampling_rate)
    _execute(
        input_file, output_file, command_line, ffmpeg_path, config_file, verbose, log_file, show_raw
    )


@app.command("config")
def config_command(
    action: str = typer.Argument(..., help="Action: init, show"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for 'init' action",
    ),
) -> None:
    """
    Manage configuration files.

    Actions:
    - init: Create a default configuration file
    - show: Display current configuration
    """
    config_manager = get_config_manager()

    if action == "init":
        output_path = output or Path(".ffmpeg-monitor.yaml")

        try:
            config_manager.init_default_config(output_path)
            console.print(f"[green]✓[/green] Created config file: {escape(str(output_path))}")
        except MonitorError as e:
            console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
            sys.exit(1)

    elif action == "show":
        try:
            config = config_manager.config
        except MonitorError as e:
            console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
            sys.exit(1)

        table = Table(title="Current Configuration", show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("ffmpeg path", escape(config.ffmpeg.path))
        table.add_row("Standard arguments", escape(" ".join(config.ffmpeg.standard_arguments)))
        table.add_row("Poll interval", f"{config.supervisor.poll_interval}s")
        table.add_row("Kill grace period", f"{config.supervisor.kill_grace_period}s")
        table.add_row("Log tail size", str(config.supervisor.log_tail_size))
        table.add_row(
            "Handler timeout",
            "unbounded"
            if config.supervisor.handler_timeout is None
            else f"{config.supervisor.handler_timeout}s",
        )
        console.print()
        console.print(table)
        console.print()

    else:
        console.print(f"[red]✗ Unknown action:[/red] {escape(action)}")
        console.print("Valid actions: init, show")
        sys.exit(1)


@app.command("version")
def version_command() -> None:
    """
    Display version information.
    """
    from .. import __version__

    console.print(
        Panel.fit(
            f"[bold cyan]ffmpeg monitor[/bold cyan]\n[dim]Version {__version__}[/dim]",
            border_style="cyan",
        )
    )


def main() -> None:
    """
    Main entry point for CLI.
    """
    app()


if __name__ == "__main__":
    main()
