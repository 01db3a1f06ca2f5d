# src/sanity/core/event_bus.py
import asyncio
import inspect
import logging
from collections import defaultdict

logger = logging.getLogger("EventBus")


class EventBus:
    """A simple, in-process event bus for decoupling components, with async support."""

    def __init__(self):
        self._subscribers = defaultdict(list)

    def subscribe(self, event_name: str, callback):
        logger.debug("Subscribing '%s' to event '%s'", getattr(callback, '__name__', 'lambda'), event_name)
        self._subscribers[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback):
        if callback in self._subscribers.get(event_name, []):
            self._subscribers[event_name].remove(callback)

    def emit(self, event_name: str, *args, **kwargs):
        """
        Emits an event, calling all subscribed callbacks with the given arguments.
        Correctly handles both synchronous and asynchronous (coroutine) callbacks.
        A failing callback is logged and never propagates to the emitter.
        """
        if event_name != "log_message_received":
            logger.debug("Emitting event '%s'", event_name)

        # Copy so callbacks may unsubscribe while we iterate.
        for callback in list(self._subscribers.get(event_name, [])):
            try:
                if inspect.iscoroutinefunction(callback):
                    # If the callback is an async def function, schedule it on the event loop
                    asyncio.create_task(callback(*args, **kwargs))
                else:
                    callback(*args, **kwargs)
            except Exception:
                logger.exception("Error in callback for event '%s'", event_name)

    def subscriber_count(self, event_name: str) -> int:
        return len(self._subscribers.get(event_name, []))
