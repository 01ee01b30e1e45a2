"""
CORS middleware so the dashboard can be served from another origin.
"""

from typing import Any

from aiohttp import web


def setup_cors(
    app: web.Application,
    origins: list[str] | None = None,
    allow_methods: list[str] | None = None,
    max_age: int = 3600,
) -> None:
    """
    Add a CORS middleware at the front of the chain.

    Args:
        app: aiohttp Application
        origins: Allowed origins (default: ["*"])
        allow_methods: Allowed HTTP methods (default: GET, POST, OPTIONS)
        max_age: Preflight cache duration in seconds
    """
    if origins is None:
        origins = ["*"]
    if allow_methods is None:
        allow_methods = ["GET", "POST", "OPTIONS"]

    @web.middleware
    async def cors_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
        origin = request.headers.get("Origin", "")
        allowed_origin = None
        if "*" in origins:
            allowed_origin = origin or "*"
        elif origin in origins:
            allowed_origin = origin

        if request.method == "OPTIONS":
            response: web.StreamResponse = web.Response(status=204)
        else:
            try:
                response = await handler(request)
            except web.HTTPException as e:
                response = e

        # Streaming responses (SSE) have already sent their headers
        if allowed_origin and not response.prepared:
            response.headers["Access-Control-Allow-Origin"] = allowed_origin
            response.headers["Access-Control-Allow-Methods"] = ", ".join(allow_methods)
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Expose-Headers"] = "X-Request-ID"
            response.headers["Access-Control-Max-Age"] = str(max_age)
        return response

    app.middlewares.insert(0, cors_middleware)
