"""
Simple in-memory event bus for decoupling publishers and subscribers
within the worker.

Every call to :meth:`EventBus.subscribe` registers a dedicated asyncio
queue, so each subscriber of an event type receives every event
published after it subscribed.  Subscriptions are registered eagerly,
at call time, not when iteration starts.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, AsyncIterator, Dict, List


class EventBus:
    def __init__(self) -> None:
        self._queues: Dict[str, List[asyncio.Queue]] = defaultdict(list)

    async def publish(self, event_type: str, data: Any) -> None:
        """Publish an event to all subscribers of the given type."""
        for queue in list(self._queues[event_type]):
            await queue.put(data)

    def subscribe(self, event_type: str) -> AsyncIterator[Any]:
        """Return an async iterator over events of ``event_type``."""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues[event_type].append(queue)
        return self._iterate(event_type, queue)

    def subscriber_count(self, event_type: str) -> int:
        return len(self._queues[event_type])

    async def _iterate(self, event_type: str, queue: asyncio.Queue) -> AsyncIterator[Any]:
        try:
            while True:
                yield await queue.get()
        finally:
            if queue in self._queues[event_type]:
                self._queues[event_type].remove(queue)
