"""
Publish/subscribe hub for run events.

Handlers are registered per event kind and receive events in registration
order. A handler may be a plain callable or a coroutine function. Handlers run
inline with the stderr reader, so a slow handler delays the next line.
"""

import asyncio
import inspect
from enum import Enum
from typing import Any, Callable, Optional

from ..utils import get_logger

logger = get_logger(__name__)

Handler = Callable[[Any], Any]


class EventKind(str, Enum):
    """Kind of event published during a run."""

    DATA = "data"
    PROGRESS = "progress"
    COMPLETED = "completed"


class Subscription:
    """Handle returned by EventHub.subscribe; unsubscribes on demand or on exit."""

    def __init__(self, hub: "EventHub", kind: EventKind, handler: Handler):
        self.hub = hub
        self.kind = kind
        self.handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        """Check if the handler is still registered."""
        return self._active

    def unsubscribe(self) -> None:
        """Remove the handler. Safe to call more than once."""
        if self._active:
            self.hub._remove(self)
            self._active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.unsubscribe()


class EventHub:
    """Registry of event handlers keyed by EventKind."""

    def __init__(self, handler_timeout: Optional[float] = None):
        """
        Initialize event hub.

        Args:
            handler_timeout: Maximum seconds an async handler may take (None = unbounded)
        """
        self.handler_timeout = handler_timeout
        self._subscriptions: dict[EventKind, list[Subscription]] = {kind: [] for kind in EventKind}

    def subscribe(self, kind: EventKind, handler: Handler) -> Subscription:
        """
        Register a handler for one kind of event.

        Args:
            kind: Event kind to listen to
            handler: Callable receiving the event (may return an awaitable)

        Returns:
            Subscription handle
        """
        subscription = Subscription(self, EventKind(kind), handler)
        self._subscriptions[subscription.kind].append(subscription)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)!r} to {subscription.kind.value}")
        return subscription

    def has_subscribers(self, kind: EventKind) -> bool:
        """Check if any handler listens to a kind."""
        return bool(self._subscriptions[kind])

    async def publish(self, kind: EventKind, event: Any) -> None:
        """
        Deliver an event to every handler of its kind.

        Handler exceptions propagate to the caller.

        Raises:
            asyncio.TimeoutError: If an async handler exceeds handler_timeout
        """
        # Snapshot so handlers may unsubscribe while being called
        for subscription in list(self._subscriptions[kind]):
            result = subscription.handler(event)
            if inspect.isawaitable(result):
                if self.handler_timeout is None:
                    await result
                else:
                    await asyncio.wait_for(result, timeout=self.handler_timeout)

    def _remove(self, subscription: Subscription) -> None:
        handlers = self._subscriptions[subscription.kind]
        if subscription in handlers:
            handlers.remove(subscription)
