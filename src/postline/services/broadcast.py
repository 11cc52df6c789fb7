"""Fan-out of post mutation events to connected live subscribers.

Delivery is fire-and-forget: a publish with nobody listening does nothing, a
subscriber whose buffer is full loses the event, and nothing is kept for
subscribers that connect later. Each subscriber sees events in publish order.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class MutationAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class MutationEvent:
    """A post lifecycle change; ``subject`` is a post snapshot or, for deletes, its id."""

    action: MutationAction
    subject: Any

    def to_message(self) -> dict[str, Any]:
        return {"action": self.action.value, "post": self.subject}


class Subscription:
    """One subscriber's inbox.

    The subscription remembers the event loop it was created on so that
    events published from worker threads are handed over thread-safely.
    """

    def __init__(self, maxsize: int) -> None:
        self.queue: asyncio.Queue[MutationEvent] = asyncio.Queue(maxsize=maxsize)
        try:
            self._loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None

    def deliver(self, event: MutationEvent) -> None:
        loop = self._loop
        if loop is not None and loop.is_running() and not _on_loop(loop):
            loop.call_soon_threadsafe(self._offer, event)
        else:
            self._offer(event)

    def _offer(self, event: MutationEvent) -> None:
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.debug("Dropped %s event for a slow subscriber", event.action.value)

    async def receive(self) -> MutationEvent:
        return await self.queue.get()

    def drain(self) -> list[MutationEvent]:
        """Return every buffered event without waiting."""
        events: list[MutationEvent] = []
        while not self.queue.empty():
            events.append(self.queue.get_nowait())
        return events


def _on_loop(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


class MutationBroadcaster:
    """Hold the set of live subscriptions and fan events out to them."""

    def __init__(self, queue_size: int = 100) -> None:
        self.queue_size = queue_size
        self._subscribers: set[Subscription] = set()
        self._lock = threading.Lock()

    def subscribe(self) -> Subscription:
        subscription = Subscription(self.queue_size)
        with self._lock:
            self._subscribers.add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscribers.discard(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event: MutationEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for subscription in subscribers:
            try:
                subscription.deliver(event)
            except Exception:
                logger.warning("Failed to deliver %s event", event.action.value, exc_info=True)
