"""
Server-Sent Events (SSE) endpoint for live status updates.
"""

import asyncio

from aiohttp import web

from feedwatch.service.api.events import format_sse_event
from feedwatch.service.api.handlers import BaseHandler
from feedwatch.utils.logging import get_logger

logger = get_logger("feedwatch.api.handlers.events")

KEEPALIVE_SECONDS = 30.0


class EventsHandler(BaseHandler):
    """Handler for SSE status-update streaming."""

    async def stream(self, request: web.Request) -> web.StreamResponse:
        """
        GET /api/events

        Query params:
            types: Comma-separated feed types to subscribe to (default: all)

        Event types:
            - connected: sent once on subscribe
            - status-update: ``{fileType, timestamp, status, filename, previousTimestamp}``
        """
        types_param = request.query.get("types")
        feed_types: list[str] | None = None
        if types_param:
            feed_types = [t.strip() for t in types_param.split(",") if t.strip()]

        response = web.StreamResponse(
            status=200,
            headers={
                "Content-Type": "text/event-stream",
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering
            },
        )
        request_id = self.get_request_id(request)
        if request_id:
            response.headers["X-Request-ID"] = request_id

        await response.prepare(request)

        queue = self.event_bus.subscribe(feed_types=feed_types)
        logger.info(f"SSE client connected (feed_types={feed_types}, request_id={request_id})")

        try:
            await response.write(
                format_sse_event(
                    {
                        "event": "connected",
                        "data": {"message": "Connected to event stream", "feed_types": feed_types},
                    }
                )
            )

            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                    if event is None:
                        # Shutdown sentinel
                        break
                    await response.write(format_sse_event(event))
                except TimeoutError:
                    await response.write(b": keepalive\n\n")

        except (asyncio.CancelledError, ConnectionResetError, BrokenPipeError) as e:
            logger.debug(f"SSE client went away: {e!r}")
        except OSError as e:
            logger.debug(f"SSE write failed, client disconnected: {e}")
        finally:
            self.event_bus.unsubscribe(queue)
            logger.info("SSE client disconnected")

        return response
