"""
Error handling middleware.

Tags every request with an ID and turns failures into structured JSON.
"""

import json
import uuid
from collections.abc import Callable

from aiohttp import web

from feedwatch.exceptions import NotificationError, StoreError
from feedwatch.service.api.errors import APIError, ErrorCode
from feedwatch.utils.logging import get_logger

logger = get_logger("feedwatch.api.middleware.error")


def _error_response(code: ErrorCode, message: str, status: int, request_id: str) -> web.Response:
    return web.json_response(
        {"error": {"code": code.value, "message": message, "request_id": request_id}},
        status=status,
        headers={"X-Request-ID": request_id},
    )


@web.middleware
async def error_middleware(request: web.Request, handler: Callable) -> web.StreamResponse:
    request_id = f"req_{uuid.uuid4().hex[:12]}"
    request["request_id"] = request_id

    try:
        response = await handler(request)
        if not response.prepared:
            response.headers["X-Request-ID"] = request_id
        return response

    except APIError as e:
        logger.warning(f"API error: {e.code.value} - {e.message} ({request.method} {request.path})")
        return web.json_response(e.to_dict(request_id), status=e.status, headers={"X-Request-ID": request_id})

    except json.JSONDecodeError as e:
        logger.warning(f"JSON decode error on {request.path}: {e}")
        return _error_response(ErrorCode.INVALID_REQUEST, "Invalid JSON in request body", 400, request_id)

    except web.HTTPException:
        raise

    except StoreError as e:
        logger.error(f"Store error on {request.method} {request.path}: {e}")
        return _error_response(ErrorCode.DATABASE_ERROR, "Delivery store unavailable", 500, request_id)

    except NotificationError as e:
        logger.error(f"Notification error on {request.method} {request.path}: {e}")
        return _error_response(ErrorCode.NOTIFICATION_ERROR, "Failed to send email", 500, request_id)

    except Exception as e:
        logger.error(f"Unexpected error on {request.method} {request.path}: {e}", exc_info=True)
        return _error_response(ErrorCode.INTERNAL_ERROR, "An internal error occurred", 500, request_id)
