"""Tests for the EventBus."""

import asyncio

import pytest

from sanity.core.event_bus import EventBus


class TestEventBus:
    """Subscription and emission."""

    def test_sync_subscribers_receive_arguments(self):
        bus = EventBus()
        received = []
        bus.subscribe("thing_happened", lambda a, b=None: received.append((a, b)))

        bus.emit("thing_happened", 1, b=2)

        assert received == [(1, 2)]

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        callback = received.append
        bus.subscribe("x", callback)
        bus.unsubscribe("x", callback)
        bus.unsubscribe("x", callback)

        bus.emit("x", 1)

        assert received == []
        assert bus.subscriber_count("x") == 0

    def test_failing_subscriber_does_not_stop_others(self):
        bus = EventBus()
        received = []

        def broken(_):
            raise RuntimeError("boom")

        bus.subscribe("x", broken)
        bus.subscribe("x", received.append)

        bus.emit("x", 1)

        assert received == [1]

    def test_subscriber_may_unsubscribe_while_emitting(self):
        bus = EventBus()
        received = []

        def once(value):
            received.append(value)
            bus.unsubscribe("x", once)

        bus.subscribe("x", once)
        bus.emit("x", 1)
        bus.emit("x", 2)

        assert received == [1]

    @pytest.mark.asyncio
    async def test_async_subscribers_are_scheduled(self):
        bus = EventBus()
        received = []

        async def handler(value):
            received.append(value)

        bus.subscribe("x", handler)
        bus.emit("x", 5)
        assert received == []

        await asyncio.sleep(0)

        assert received == [5]
