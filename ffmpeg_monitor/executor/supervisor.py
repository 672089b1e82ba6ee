"""
Async supervision of a single ffmpeg process.

This module owns the child process lifecycle for one run: spawning, streaming
stderr line by line into the classifier, polling for cancellation, killing on
faults and deciding the final outcome.
"""

import asyncio
import codecs
import re
import shlex
import threading
import time
from collections import deque
from typing import AsyncIterator, Optional, Union

from rich.markup import escape

from ..config import DEFAULT_STANDARD_ARGUMENTS, SupervisorConfig
from ..events import EventHub, EventKind, synthesize_completion, synthesize_progress
from ..models import RawDataEvent, RunContext, RunOutcome, RunState
from ..parser import (
    LineKind,
    classify_line,
    extract_completion,
    extract_duration,
    extract_progress,
)
from ..utils import SetupError, SpawnError, get_logger, get_run_logger

logger = get_logger(__name__)

CancelSignal = Union[asyncio.Event, threading.Event]

# ffmpeg rewrites its status line with a bare carriage return
LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")
CHUNK_SIZE = 4096


class ProcessSupervisor:
    """
    Supervisor for one ffmpeg run.

    State machine: NOT_STARTED -> RUNNING -> COMPLETED | CANCELLED | FAULTED.

    Provides:
    - Incremental stderr streaming (progress is observable while ffmpeg runs)
    - Raw, progress and completion events through an EventHub
    - Polled cancellation with SIGTERM, escalating to SIGKILL
    - Immediate kill when handling a line raises
    - Deterministic process cleanup on every exit path

    Instances are single-use; the process handle never outlives run().
    """

    def __init__(
        self,
        executable: str,
        context: RunContext,
        hub: EventHub,
        config: Optional[SupervisorConfig] = None,
        standard_arguments: Optional[list[str]] = None,
        cancel_event: Optional[CancelSignal] = None,
    ):
        """
        Initialize supervisor.

        Args:
            executable: Resolved path of the ffmpeg executable
            context: Context of this run (input, output, command line)
            hub: Hub delivering events to subscribers
            config: Supervision tuning (defaults if None)
            standard_arguments: Arguments placed before the command line
            cancel_event: Event polled for cancellation (never cancelled if None)
        """
        self.executable = executable
        self.context = context
        self.hub = hub
        self.config = config or SupervisorConfig()
        self.standard_arguments = (
            list(standard_arguments)
            if standard_arguments is not None
            else list(DEFAULT_STANDARD_ARGUMENTS)
        )
        self.cancel_event = cancel_event
        self.log = get_run_logger(logger, context.input_file)

        self._state = RunState.NOT_STARTED
        self._process: Optional[asyncio.subprocess.Process] = None
        self._recent_lines: deque[str] = deque(maxlen=self.config.log_tail_size)
        self._fault: Optional[BaseException] = None
        self._returncode: Optional[int] = None

    def build_command(self) -> list[str]:
        """
        Build the argument vector for the child process.

        Returns:
            Executable, standard arguments and the split command line

        Raises:
            SetupError: If the command line cannot be split (unbalanced quotes)
        """
        try:
            arguments = shlex.split(self.context.command_line)
        except ValueError as e:
            raise SetupError(f"Invalid command line: {e}") from e

        return [self.executable, *self.standard_arguments, *arguments]

    async def run(self) -> RunOutcome:
        """
        Run ffmpeg to completion.

        Returns:
            RunOutcome describing how the run ended

        Raises:
            SpawnError: If the process cannot be started
            asyncio.CancelledError: If the awaiting task is cancelled (ffmpeg is killed)
        """
        if self._state == RunState.RUNNING:
            raise RuntimeError("ffmpeg is already running")
        if self._state.is_terminal:
            raise RuntimeError("ProcessSupervisor instances can only run once")

        command = self.build_command()
        self.log.info(f"Running ffmpeg -> {escape(self.context.output_file)}")
        self.log.debug(f"Full command: {escape(shlex.join(command))}")

        start_time = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self.log.error(f"Failed to start ffmpeg: {escape(str(e))}")
            raise SpawnError(f"Failed to start ffmpeg: {e}", command=command) from e

        self._process = process
        self._state = RunState.RUNNING

        reader = asyncio.create_task(self._pump_stderr(process))
        drain = asyncio.create_task(self._drain_stdout(process))

        try:
            self._returncode = await self._wait_for_exit(process)
            # Handle whatever is still buffered in the pipes
            await asyncio.gather(reader, drain)
        except asyncio.CancelledError:
            self._state = RunState.CANCELLED
            self.log.info("Run task cancelled, stopping ffmpeg")
            raise
        finally:
            await self._release(process, reader, drain)

        outcome = self._decide_outcome(time.monotonic() - start_time)
        self._state = outcome.state
        self.log.info(f"ffmpeg run {outcome.state.value} in {outcome.elapsed:.2f}s")
        return outcome

    def _decide_outcome(self, elapsed: float) -> RunOutcome:
        returncode = self._returncode

        if self._cancel_requested():
            state = RunState.CANCELLED
        elif returncode == 0 and self._fault is None:
            state = RunState.COMPLETED
        else:
            state = RunState.FAULTED

        excerpt = None
        if state == RunState.FAULTED and len(self._recent_lines) >= 2:
            excerpt = (self._recent_lines[0], self._recent_lines[1])

        return RunOutcome(
            state=state,
            context=self.context,
            exit_code=returncode,
            excerpt=excerpt,
            error=self._fault if state == RunState.FAULTED else None,
            elapsed=elapsed,
        )

    async def _wait_for_exit(self, process: asyncio.subprocess.Process) -> int:
        """
        Wait for the process to exit, polling the cancellation signal.

        Returns:
            Process exit code
        """
        exit_waiter = asyncio.ensure_future(process.wait())
        terminated_at: Optional[float] = None
        killed = False

        try:
            while True:
                done, _ = await asyncio.wait({exit_waiter}, timeout=self.config.poll_interval)
                if done:
                    return exit_waiter.result()

                if not self._cancel_requested():
                    continue

                if terminated_at is None:
                    self.log.info("Cancellation requested, terminating ffmpeg...")
                    self._send_signal(process, kill=False)
                    terminated_at = time.monotonic()
                elif not killed and time.monotonic() - terminated_at >= self.config.kill_grace_period:
                    self.log.warning("ffmpeg ignored termination, forcing kill...")
                    self._send_signal(process, kill=True)
                    killed = True
        finally:
            if not exit_waiter.done():
                exit_waiter.cancel()

    async def _pump_stderr(self, process: asyncio.subprocess.Process) -> None:
        """Feed every stderr line through the handling pipeline, in arrival order."""
        # The command line is announced once the process exists, ahead of its output
        try:
            await self.hub.publish(EventKind.DATA, RawDataEvent(self.context.command_line))
        except Exception as e:
            self._record_fault(e, process)

        if process.stderr is None:
            return

        async for line in self._stream_lines(process.stderr):
            if self._fault is not None:
                # Faulted: only drain until the killed process closes the pipe
                continue

            try:
                await self._handle_line(line)
            except Exception as e:
                self._record_fault(e, process)

    async def _handle_line(self, line: str) -> None:
        self._recent_lines.appendleft(line)
        await self.hub.publish(EventKind.DATA, RawDataEvent(line))

        duration = extract_duration(line)
        if duration is not None and self.context.seed_duration(duration):
            self.log.debug(f"Detected duration: {duration}")

        kind = classify_line(line)
        if kind == LineKind.PROGRESS:
            progress = extract_progress(line, self.context)
            if progress is not None:
                await self.hub.publish(
                    EventKind.PROGRESS, synthesize_progress(progress, self.context)
                )

        elif kind == LineKind.COMPLETION:
            completion = extract_completion(line)
            if completion is not None:
                if completion.total_duration:
                    self.context.refresh_duration(completion.total_duration)
                await self.hub.publish(
                    EventKind.COMPLETED, synthesize_completion(completion, self.context)
                )

    def _record_fault(self, error: Exception, process: asyncio.subprocess.Process) -> None:
        self._fault = error
        self.log.error(f"Failed to handle ffmpeg output, killing process: {escape(repr(error))}")
        self._send_signal(process, kill=True)

    async def _stream_lines(self, stream: asyncio.StreamReader) -> AsyncIterator[str]:
        """
        Stream decoded lines as they arrive.

        Splits on \\r, \\n and \\r\\n; blank lines are skipped.

        Yields:
            Individual stripped lines
        """
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        buffer = ""

        while True:
            chunk = await stream.read(CHUNK_SIZE)
            if not chunk:
                break

            buffer += decoder.decode(chunk)
            parts = LINE_BREAK_PATTERN.split(buffer)
            buffer = parts.pop()

            for part in parts:
                line = part.strip()
                if line:
                    yield line

        buffer += decoder.decode(b"", final=True)
        if buffer.strip():
            yield buffer.strip()

    async def _drain_stdout(self, process: asyncio.subprocess.Process) -> None:
        """Discard stdout so a chatty child never blocks on a full pipe."""
        if process.stdout is None:
            return

        while await process.stdout.read(CHUNK_SIZE):
            pass

    async def _release(self, process: asyncio.subprocess.Process, *tasks: asyncio.Task) -> None:
        """Make sure the process is gone and the pipe tasks are finished."""
        try:
            if process.returncode is None:
                self._send_signal(process, kill=True)
                await process.wait()
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            self._process = None

    def _send_signal(self, process: asyncio.subprocess.Process, kill: bool) -> None:
        """Best-effort terminate or kill."""
        try:
            if kill:
                process.kill()
            else:
                process.terminate()
        except ProcessLookupError:
            # Process already exited
            pass

    def _cancel_requested(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    @property
    def state(self) -> RunState:
        """Get current run state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if the process is currently running."""
        return self._process is not None and self._process.returncode is None

    @property
    def returncode(self) -> Optional[int]:
        """Get process exit code once the run has ended."""
        return self._returncode

    @property
    def recent_lines(self) -> list[str]:
        """Get captured diagnostic lines, newest first."""
        return list(self._recent_lines)
