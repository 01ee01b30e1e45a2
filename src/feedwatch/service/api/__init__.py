"""
HTTP API: status queries, on-demand alerts and live status events.
"""

from feedwatch.service.api.events import EventBus, format_sse_event
from feedwatch.service.api.routes import setup_routes

__all__ = ["EventBus", "format_sse_event", "setup_routes"]
