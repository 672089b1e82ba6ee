"""
Shared fixtures.

The supervisor tests run a scripted stand-in for ffmpeg: the Python
interpreter executes FAKE_FFMPEG with a JSON scenario that controls what is
written to stderr, how long the process lives and how it exits.
"""

import itertools
import json
import shlex
import sys
from pathlib import Path

import pytest

from ffmpeg_monitor.config import MonitorConfig, SupervisorConfig
from ffmpeg_monitor.events import EventHub
from ffmpeg_monitor.models import RunContext

FAKE_FFMPEG = """\
import json
import sys
import time

args = sys.argv[1:]
with open(args[args.index("-scenario") + 1], encoding="utf-8") as f:
    scenario = json.load(f)

if scenario.get("argv_file"):
    with open(scenario["argv_file"], "w", encoding="utf-8") as f:
        json.dump(args, f)

if scenario.get("stdout_bytes"):
    sys.stdout.write("x" * scenario["stdout_bytes"])
    sys.stdout.flush()

for chunk in scenario.get("stderr", []):
    sys.stderr.write(chunk)
    sys.stderr.flush()
    time.sleep(scenario.get("delay", 0))

if scenario.get("hang"):
    time.sleep(30)

sys.exit(scenario.get("exit_code", 0))
"""

DURATION_LINE = "  Duration: 00:00:10.00, start: 0.000000, bitrate: 1205 kb/s\n"


def progress_line(seconds: int, frame: int = 0) -> str:
    """Progress line terminated with a carriage return, like ffmpeg prints it."""
    return (
        f"frame={frame:5d} fps= 25 q=28.0 size=     {seconds * 100}kB "
        f"time=00:00:{seconds:02d}.00 bitrate= 800.0kbits/s speed=1.00x    \r"
    )


COMPLETION_LINE = (
    "video:900kB audio:100kB subtitle:0kB other streams:0kB global headers:0kB "
    "muxing overhead: 0.512345%\n"
)


@pytest.fixture
def fake_ffmpeg(tmp_path) -> Path:
    """Write the fake ffmpeg script."""
    script = tmp_path / "fake_ffmpeg.py"
    script.write_text(FAKE_FFMPEG, encoding="utf-8")
    return script


@pytest.fixture
def scenario(tmp_path):
    """Factory writing a scenario file and returning the matching command line."""
    counter = itertools.count()

    def _write(**steps) -> str:
        path = tmp_path / f"scenario_{next(counter)}.json"
        path.write_text(json.dumps(steps), encoding="utf-8")
        return f"-scenario {shlex.quote(str(path))}"

    return _write


@pytest.fixture
def fast_config() -> SupervisorConfig:
    """Supervision tuned for quick tests."""
    return SupervisorConfig(poll_interval=0.02, kill_grace_period=0.5)


@pytest.fixture
def monitor_config(fake_ffmpeg, fast_config) -> MonitorConfig:
    """Configuration running the fake script through the current interpreter."""
    config = MonitorConfig.create_default()
    config.ffmpeg.path = sys.executable
    config.ffmpeg.standard_arguments = [str(fake_ffmpeg)]
    config.supervisor = fast_config
    return config


@pytest.fixture
def hub() -> EventHub:
    return EventHub()


@pytest.fixture
def make_context():
    """Factory for run contexts."""

    def _make(command_line: str, input_file: str = "in.mkv", output_file: str = "out.mp4"):
        return RunContext(input_file=input_file, output_file=output_file, command_line=command_line)

    return _make
