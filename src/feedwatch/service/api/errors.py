"""
API error definitions.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard API error codes."""

    # Client errors (4xx)
    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FEED_NOT_FOUND = "FEED_NOT_FOUND"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    NOTIFICATION_ERROR = "NOTIFICATION_ERROR"


class APIError(Exception):
    """
    API exception rendered as a structured JSON error.

    Usage:
        raise APIError(code=ErrorCode.FEED_NOT_FOUND, message="Feed 'x' not found", status=404)
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.details = details or {}

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        error_dict: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            error_dict["details"] = self.details
        if request_id:
            error_dict["request_id"] = request_id
        return {"error": error_dict}


class NotFoundError(APIError):
    def __init__(self, resource_type: str, resource_id: str, code: ErrorCode = ErrorCode.FEED_NOT_FOUND):
        super().__init__(
            code=code,
            message=f"{resource_type} '{resource_id}' not found",
            status=404,
            details={f"{resource_type.lower()}_id": resource_id},
        )


class ValidationError(APIError):
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message, status=400, details=details)
