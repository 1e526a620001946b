"""
In-process event bus.

Implements the EventPublisher port by fanning events out to subscribers
registered per event type. Delivery is best-effort: a failing subscriber is
logged and the remaining subscribers still run.
"""

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from cardwise.domain.review.ports import EventPublisher

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[None]]


class EventBus(EventPublisher):
    def __init__(self):
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: Any) -> None:
        name = type(event).__name__
        handlers = list(self._handlers.get(type(event), []))
        logger.info(f"Event published: {name} ({len(handlers)} subscribers)")

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.warning(f"Subscriber {handler!r} failed on {name}: {e}", exc_info=True)
