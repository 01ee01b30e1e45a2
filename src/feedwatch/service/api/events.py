"""
Event bus for delivery status updates, streamed to clients via Server-Sent Events.
"""

import asyncio
import json
from datetime import UTC, datetime
from typing import Any

from feedwatch.core.delivery import ChangeEvent
from feedwatch.utils.logging import get_logger

logger = get_logger("feedwatch.api.events")

STATUS_UPDATE = "status-update"


class EventBus:
    """
    Broadcasts status-update events to subscribed queues.

    Subscribers may restrict themselves to a set of feed types; ``None`` means
    every feed type.
    """

    def __init__(self) -> None:
        self._subscribers: dict[asyncio.Queue, set[str] | None] = {}

    def subscribe(self, feed_types: list[str] | None = None) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers[queue] = set(feed_types) if feed_types else None
        logger.debug(f"New subscriber: feed_types={feed_types}")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.pop(queue, None)
        logger.debug("Subscriber removed")

    async def emit(self, event_type: str, data: dict[str, Any], feed_type: str | None = None) -> int:
        """
        Emit an event to all matching subscribers.

        Returns:
            Number of subscribers notified
        """
        event = {
            "event": event_type,
            "emitted_at": datetime.now(UTC).isoformat(),
            "data": data,
        }

        notified = 0
        for queue, feed_filter in list(self._subscribers.items()):
            if feed_filter is not None and feed_type is not None and feed_type not in feed_filter:
                continue
            try:
                queue.put_nowait(event)
                notified += 1
            except Exception as e:
                logger.warning(f"Failed to send event to subscriber: {e}")

        if notified > 0:
            logger.debug(f"Emitted {event_type} to {notified} subscribers")
        return notified

    async def publish_change(self, change: ChangeEvent) -> int:
        return await self.emit(STATUS_UPDATE, change.to_payload(), feed_type=change.feed_type)

    async def shutdown(self) -> None:
        """Wake every subscriber with the shutdown sentinel."""
        for queue in list(self._subscribers):
            queue.put_nowait(None)

    def subscriber_count(self) -> int:
        return len(self._subscribers)


def format_sse_event(event: dict[str, Any]) -> bytes:
    """Format an event dict (``event`` + ``data`` keys) for the SSE wire protocol."""
    lines = [
        f"event: {event.get('event', 'message')}",
        f"data: {json.dumps(event.get('data', {}))}",
        "",
    ]
    return "\n".join(lines).encode("utf-8") + b"\n"
