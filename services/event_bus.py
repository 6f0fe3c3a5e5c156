"""Publish/subscribe bus for presentation events.

Replaces ambient window-level events with one explicit object that is
created in the app lifespan and torn down with it.  Delivery is best
effort: a failing handler is logged and never stops the others, and no
ordering is promised across handlers.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from models.events import EventType, PresentationEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[PresentationEvent], Union[Awaitable[Any], Any]]


class EventBus:
    """Typed pub/sub keyed by :class:`EventType`."""

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[EventHandler]] = {}
        self._closed = False

    def subscribe(self, event_type: EventType, handler: EventHandler) -> Callable[[], None]:
        """Register *handler* for *event_type*.

        Returns:
            A callable that removes the subscription; calling it twice is harmless.
        """
        self._handlers.setdefault(event_type, []).append(handler)

        def unsubscribe() -> None:
            self.unsubscribe(event_type, handler)

        return unsubscribe

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: PresentationEvent) -> int:
        """Deliver *event* to every current subscriber.

        Returns:
            Number of handlers that completed without raising.
        """
        if self._closed:
            logger.debug("EventBus closed, dropping %s", event.type.value)
            return 0

        delivered = 0
        for handler in list(self._handlers.get(event.type, [])):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(
                    "EventBus handler %r failed for %s (conv=%s)",
                    handler, event.type.value, event.conversation_id,
                )
        return delivered

    def subscriber_count(self, event_type: EventType | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(h) for h in self._handlers.values())

    def close(self) -> None:
        """Drop all subscribers and refuse further events."""
        self._handlers.clear()
        self._closed = True


# ── Module-level Singleton ───────────────────────────────────

_bus: EventBus | None = None


def init_event_bus() -> EventBus:
    """Create a fresh bus, replacing (and closing) any previous one."""
    global _bus
    if _bus is not None:
        _bus.close()
    _bus = EventBus()
    logger.info("EventBus initialized")
    return _bus


def get_event_bus() -> EventBus:
    """Get the current bus, creating one lazily outside the app lifespan."""
    if _bus is None:
        return init_event_bus()
    return _bus


def close_event_bus() -> None:
    global _bus
    if _bus is not None:
        _bus.close()
        _bus = None
        logger.info("EventBus closed")
