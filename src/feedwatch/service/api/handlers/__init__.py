"""
API endpoint handlers.

Each handler class manages one resource (deliveries, notifications, events).
"""

import datetime
import math
from typing import TYPE_CHECKING, Any

from aiohttp import web

if TYPE_CHECKING:
    from feedwatch.service.server import MonitorService


def _sanitize(obj: Any) -> Any:
    """Recursively make data JSON-safe: datetimes to ISO strings, NaN/Inf to None."""
    if obj is None:
        return None
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj
    if isinstance(obj, (str, int, bool)):
        return obj
    if isinstance(obj, (datetime.datetime, datetime.date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(x) for x in obj]
    return obj


class BaseHandler:
    """
    Base class for API handlers.

    Provides access to service components and common utilities.
    """

    def __init__(self, service: "MonitorService"):
        self.service = service

    @property
    def config(self) -> Any:
        """Get service configuration."""
        return self.service.config

    @property
    def store(self) -> Any:
        """Get the delivery store."""
        return self.service.store

    @property
    def event_bus(self) -> Any:
        """Get event bus for real-time updates."""
        return self.service.event_bus

    def get_request_id(self, request: web.Request) -> str | None:
        """Get request ID from request context."""
        return request.get("request_id")

    async def json_response(
        self,
        data: Any,
        status: int = 200,
        request: web.Request | None = None,
    ) -> web.Response:
        """Create JSON response with standard headers."""
        headers = {}
        if request:
            request_id = self.get_request_id(request)
            if request_id:
                headers["X-Request-ID"] = request_id
        return web.json_response(_sanitize(data), status=status, headers=headers)
