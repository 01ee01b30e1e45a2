"""
On-demand missing-file notification endpoint.
"""

import asyncio

from aiohttp import web

from feedwatch.service.api.errors import ValidationError
from feedwatch.service.api.handlers import BaseHandler


class NotifyHandler(BaseHandler):
    async def trigger_email(self, request: web.Request) -> web.Response:
        """
        POST /api/trigger-email

        Body: ``{"fileType": "metar", "timestamp": "2024-01-01T05:00:00Z"}``
        """
        body = await request.json()
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")

        missing = [key for key in ("fileType", "timestamp") if not isinstance(body.get(key), str) or not body[key]]
        if missing:
            raise ValidationError(f"Missing or invalid fields: {', '.join(missing)}", details={"fields": missing})

        await asyncio.to_thread(self.service.mailer.send_missing_alert, body["fileType"], body["timestamp"])
        return await self.json_response({"success": True}, request=request)
