"""
Health endpoint.
"""

import time

from aiohttp import web

from feedwatch.service.api.handlers import BaseHandler


class HealthHandler(BaseHandler):
    def __init__(self, service):
        super().__init__(service)
        self._start_time = time.time()

    async def health(self, request: web.Request) -> web.Response:
        """
        GET /health

        Returns service status, background scheduler state and SSE subscriber count.
        """
        from feedwatch import __version__

        last_pass = self.service.last_pass
        data = {
            "status": "ok",
            "version": __version__,
            "uptime_seconds": round(time.time() - self._start_time, 2),
            "feeds": self.service.monitor.feeds,
            "scheduler": self.service.get_scheduler_status(),
            "last_pass": last_pass.to_dict() if last_pass else None,
            "subscribers": self.event_bus.subscriber_count(),
        }
        return await self.json_response(data, request=request)
