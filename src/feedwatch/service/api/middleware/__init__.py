"""
API middleware components.
"""

from feedwatch.service.api.middleware.cors import setup_cors
from feedwatch.service.api.middleware.error import error_middleware

__all__ = ["error_middleware", "setup_cors"]
