"""
Tests for event synthesis and the event hub.
"""

import asyncio
import dataclasses
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from ffmpeg_monitor.events import (
    EventHub,
    EventKind,
    synthesize_completion,
    synthesize_progress,
)
from ffmpeg_monitor.models import (
    CompletedEvent,
    CompletionSample,
    ProgressEvent,
    ProgressSample,
    RawDataEvent,
    RunContext,
    RunState,
)


@pytest.fixture
def context():
    """Run context with a known duration."""
    ctx = RunContext("movie.mkv", "movie.mp4", "-i movie.mkv movie.mp4")
    ctx.seed_duration(timedelta(seconds=100))
    return ctx


class TestRunContext:
    """Test duration bookkeeping of RunContext."""

    def test_first_duration_wins(self):
        """Test later announcements do not replace the seeded duration."""
        ctx = RunContext("a", "b", "-i a b")

        assert ctx.seed_duration(timedelta(seconds=10)) is True
        assert ctx.seed_duration(timedelta(seconds=20)) is False
        assert ctx.total_duration == timedelta(seconds=10)

    def test_refresh_duration(self):
        """Test the completion refresh overrides the seeded value."""
        ctx = RunContext("a", "b", "-i a b")
        ctx.seed_duration(timedelta(seconds=10))
        ctx.refresh_duration(timedelta(seconds=12))

        assert ctx.total_duration == timedelta(seconds=12)


class TestRunState:
    """Test the run state machine states."""

    @pytest.mark.parametrize(
        "state,terminal",
        [
            (RunState.NOT_STARTED, False),
            (RunState.RUNNING, False),
            (RunState.COMPLETED, True),
            (RunState.CANCELLED, True),
            (RunState.FAULTED, True),
        ],
    )
    def test_is_terminal(self, state, terminal):
        assert state.is_terminal is terminal


class TestSynthesizer:
    """Test building public events."""

    def test_progress_event(self, context):
        """Test a progress event carries sample and context fields."""
        sample = ProgressSample(
            processed_duration=timedelta(seconds=25),
            frame=625,
            fps=25.0,
            size_kb=2048,
            bitrate=671.1,
            speed=2.0,
        )
        event = synthesize_progress(sample, context)

        assert isinstance(event, ProgressEvent)
        assert event.input_file == "movie.mkv"
        assert event.output_file == "movie.mp4"
        assert event.command_line == "-i movie.mkv movie.mp4"
        assert event.total_duration == timedelta(seconds=100)
        assert event.processed_duration == timedelta(seconds=25)
        assert event.frame == 625
        assert event.progress == pytest.approx(0.25)

    def test_progress_unknown_total(self):
        """Test the ratio is unavailable until a duration is known."""
        ctx = RunContext("a", "b", "-i a b")
        event = synthesize_progress(ProgressSample(processed_duration=timedelta(seconds=5)), ctx)

        assert event.total_duration is None
        assert event.progress is None

    def test_progress_ratio_clamped(self, context):
        """Test overshooting the announced duration reports 100%."""
        sample = ProgressSample(processed_duration=timedelta(seconds=101))
        assert synthesize_progress(sample, context).progress == 1.0

    def test_completion_uses_context_duration(self, context):
        """Test the context duration is used when the line has none."""
        event = synthesize_completion(CompletionSample(muxing_overhead=1.5), context)

        assert isinstance(event, CompletedEvent)
        assert event.total_duration == timedelta(seconds=100)
        assert event.muxing_overhead == 1.5

    def test_completion_prefers_line_duration(self, context):
        """Test a duration from the completion line wins."""
        sample = CompletionSample(total_duration=timedelta(seconds=99), muxing_overhead=0.2)
        assert synthesize_completion(sample, context).total_duration == timedelta(seconds=99)

    def test_events_are_immutable(self, context):
        """Test events cannot be modified by subscribers."""
        event = synthesize_completion(CompletionSample(), context)

        with pytest.raises(dataclasses.FrozenInstanceError):
            event.muxing_overhead = 3.0  # type: ignore[misc]


class TestEventHub:
    """Test handler registration and delivery."""

    @pytest.mark.asyncio
    async def test_publish_to_kind(self):
        """Test handlers only receive their own kind."""
        hub = EventHub()
        on_data = MagicMock(return_value=None)
        on_progress = MagicMock(return_value=None)
        hub.subscribe(EventKind.DATA, on_data)
        hub.subscribe(EventKind.PROGRESS, on_progress)

        event = RawDataEvent("hello")
        await hub.publish(EventKind.DATA, event)

        on_data.assert_called_once_with(event)
        on_progress.assert_not_called()

    @pytest.mark.asyncio
    async def test_registration_order(self):
        """Test handlers run in the order they were added."""
        hub = EventHub()
        calls = []
        hub.subscribe(EventKind.DATA, lambda e: calls.append("first"))
        hub.subscribe(EventKind.DATA, lambda e: calls.append("second"))

        await hub.publish(EventKind.DATA, RawDataEvent("x"))

        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_async_handler_awaited(self):
        """Test coroutine handlers complete before publish returns."""
        hub = EventHub()
        received = []

        async def handler(event):
            await asyncio.sleep(0)
            received.append(event.data)

        hub.subscribe(EventKind.DATA, handler)
        await hub.publish(EventKind.DATA, RawDataEvent("line"))

        assert received == ["line"]

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        """Test unsubscribed handlers are no longer called."""
        hub = EventHub()
        handler = MagicMock(return_value=None)
        subscription = hub.subscribe(EventKind.DATA, handler)

        subscription.unsubscribe()
        subscription.unsubscribe()
        await hub.publish(EventKind.DATA, RawDataEvent("x"))

        handler.assert_not_called()
        assert not subscription.active
        assert not hub.has_subscribers(EventKind.DATA)

    @pytest.mark.asyncio
    async def test_subscription_context_manager(self):
        """Test the subscription is removed when the block exits."""
        hub = EventHub()
        handler = MagicMock(return_value=None)

        with hub.subscribe(EventKind.COMPLETED, handler):
            assert hub.has_subscribers(EventKind.COMPLETED)

        assert not hub.has_subscribers(EventKind.COMPLETED)

    @pytest.mark.asyncio
    async def test_unsubscribe_during_publish(self):
        """Test a handler may remove itself while being called."""
        hub = EventHub()
        calls = []
        subscription = None

        def once(event):
            calls.append(event)
            subscription.unsubscribe()

        subscription = hub.subscribe(EventKind.DATA, once)
        later = MagicMock(return_value=None)
        hub.subscribe(EventKind.DATA, later)

        await hub.publish(EventKind.DATA, RawDataEvent("a"))
        await hub.publish(EventKind.DATA, RawDataEvent("b"))

        assert len(calls) == 1
        assert later.call_count == 2

    @pytest.mark.asyncio
    async def test_handler_error_propagates(self):
        """Test handler exceptions reach the publisher."""
        hub = EventHub()
        hub.subscribe(EventKind.DATA, MagicMock(side_effect=ValueError("boom")))

        with pytest.raises(ValueError, match="boom"):
            await hub.publish(EventKind.DATA, RawDataEvent("x"))

    @pytest.mark.asyncio
    async def test_handler_timeout(self):
        """Test slow async handlers are bounded by handler_timeout."""
        hub = EventHub(handler_timeout=0.05)

        async def slow(event):
            await asyncio.sleep(5)

        hub.subscribe(EventKind.DATA, slow)

        with pytest.raises(asyncio.TimeoutError):
            await hub.publish(EventKind.DATA, RawDataEvent("x"))

    def test_subscribe_by_name(self):
        """Test the kind may be given as its string value."""
        hub = EventHub()
        subscription = hub.subscribe("progress", MagicMock(return_value=None))

        assert subscription.kind == EventKind.PROGRESS
        assert hub.has_subscribers(EventKind.PROGRESS)
