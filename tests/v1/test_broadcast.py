# mypy: ignore-errors
# tests/v1/test_broadcast.py
"""Tests for mutation event fan-out."""

import asyncio

import anyio
import pytest

from postline.services.broadcast import MutationAction, MutationBroadcaster, MutationEvent


def _event(action=MutationAction.CREATE, subject=1):
    return MutationEvent(action=action, subject=subject)


def test_publish_without_subscribers_is_noop() -> None:
    MutationBroadcaster().publish(_event())


def test_subscribers_receive_events_in_order() -> None:
    broadcaster = MutationBroadcaster()
    first = broadcaster.subscribe()
    second = broadcaster.subscribe()
    events = [_event(MutationAction.CREATE, 1), _event(MutationAction.DELETE, 1)]
    for event in events:
        broadcaster.publish(event)
    assert first.drain() == events
    assert second.drain() == events


def test_late_subscriber_sees_no_history() -> None:
    broadcaster = MutationBroadcaster()
    broadcaster.publish(_event())
    assert broadcaster.subscribe().drain() == []


def test_unsubscribe_stops_delivery() -> None:
    broadcaster = MutationBroadcaster()
    subscription = broadcaster.subscribe()
    broadcaster.unsubscribe(subscription)
    broadcaster.publish(_event())
    assert subscription.drain() == []
    assert broadcaster.subscriber_count == 0


def test_full_queue_drops_events_for_that_subscriber_only() -> None:
    """Test that a slow subscriber cannot block delivery to others."""
    broadcaster = MutationBroadcaster(queue_size=1)
    slow = broadcaster.subscribe()
    broadcaster.publish(_event(subject=1))
    fast = broadcaster.subscribe()
    broadcaster.publish(_event(subject=2))
    assert [e.subject for e in slow.drain()] == [1]
    assert [e.subject for e in fast.drain()] == [2]


def test_event_message_shape() -> None:
    assert _event(MutationAction.DELETE, 9).to_message() == {"action": "delete", "post": 9}


@pytest.mark.anyio
async def test_publish_from_worker_thread() -> None:
    """Test that events published off the event loop reach an async receiver."""
    broadcaster = MutationBroadcaster()
    subscription = broadcaster.subscribe()
    await anyio.to_thread.run_sync(broadcaster.publish, _event(MutationAction.UPDATE, 3))
    event = await asyncio.wait_for(subscription.receive(), timeout=1)
    assert event.action is MutationAction.UPDATE
    assert event.subject == 3
