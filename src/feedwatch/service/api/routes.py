"""
API route registration.
"""

from typing import TYPE_CHECKING

from aiohttp import web

from feedwatch.service.api.handlers.deliveries import DeliveriesHandler
from feedwatch.service.api.handlers.events import EventsHandler
from feedwatch.service.api.handlers.health import HealthHandler
from feedwatch.service.api.handlers.notify import NotifyHandler

if TYPE_CHECKING:
    from feedwatch.service.server import MonitorService


def setup_routes(app: web.Application, service: "MonitorService") -> None:
    """
    Register all API routes.

    Args:
        app: aiohttp Application
        service: MonitorService instance for handler access
    """
    health = HealthHandler(service)
    deliveries = DeliveriesHandler(service)
    notify = NotifyHandler(service)
    events = EventsHandler(service)

    app.router.add_routes(
        [
            web.get("/health", health.health),
            web.get("/api/status/{feed_type}", deliveries.status),
            web.post("/api/trigger-email", notify.trigger_email),
            web.get("/api/events", events.stream),
        ]
    )
