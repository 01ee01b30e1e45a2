"""
Delivery status endpoints.
"""

import asyncio
from datetime import UTC, datetime

from aiohttp import web

from feedwatch.service.api.errors import NotFoundError, ValidationError
from feedwatch.service.api.handlers import BaseHandler


class DeliveriesHandler(BaseHandler):
    """Handler for per-feed delivery status."""

    async def status(self, request: web.Request) -> web.Response:
        """
        GET /api/status/{feed_type}

        Returns the feed type's deliveries for one UTC day, oldest first.

        Query params:
            date: Day to report as YYYY-MM-DD (default: today, UTC)
        """
        feed_type = request.match_info["feed_type"]
        if feed_type not in self.service.monitor.feeds:
            raise NotFoundError("Feed", feed_type)

        day = datetime.now(UTC)
        date_param = request.query.get("date")
        if date_param:
            try:
                day = datetime.strptime(date_param, "%Y-%m-%d").replace(tzinfo=UTC)
            except ValueError:
                raise ValidationError(
                    f"Invalid date '{date_param}', expected YYYY-MM-DD", details={"date": date_param}
                ) from None

        deliveries = await asyncio.to_thread(self.store.for_day, feed_type, day)
        return await self.json_response([d.to_dict() for d in deliveries], request=request)
