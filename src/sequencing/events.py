# src/sequencing/events.py - v1
"""GraphChanged subscription channel.

Subscribers are plain callables or coroutine functions receiving a
GraphChanged event. Delivery happens in subscription order and is
awaited by the publishing mutation. A failing subscriber is logged and
skipped; it never rolls back the mutation that produced the event.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from ppsequencer.core.models import GraphChanged

logger = logging.getLogger(__name__)

Subscriber = Callable[[GraphChanged], Union[None, Awaitable[None]]]


class EventChannel:
    """Fan-out of GraphChanged events for a single project."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    async def publish(self, event: GraphChanged) -> int:
        """Deliver ``event`` to every subscriber.

        Returns:
            Number of subscribers that received the event without error.
        """
        delivered = 0
        for callback in list(self._subscribers):
            try:
                result: Any = callback(event)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:
                logger.exception(
                    "GraphChanged subscriber failed (project=%s, version=%d)",
                    event.project_id, event.version,
                )
        return delivered
