"""
feedwatch exception hierarchy.

All domain-specific exceptions inherit from FeedwatchError, so callers can catch
any feedwatch failure with one base class while still handling specific ones.

Hierarchy::

    FeedwatchError
    ├── ConfigurationError     - config loading, parsing, validation
    ├── RemoteConnectionError  - SFTP connect / authenticate failures
    ├── StoreError             - delivery store read/write
    └── NotificationError      - alert composition or delivery
"""

from __future__ import annotations


class FeedwatchError(Exception):
    """Base exception for all feedwatch errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(FeedwatchError):
    """Raised when configuration loading, parsing, or validation fails."""


# --- Remote source -----------------------------------------------------------


class RemoteConnectionError(FeedwatchError):
    """Raised when the remote source cannot be reached or authenticated.

    This is a source-wide fault, as opposed to a single path being absent.
    """

    def __init__(self, message: str, *, host: str | None = None, port: int | None = None) -> None:
        super().__init__(message, details={"host": host, "port": port})
        self.host = host
        self.port = port


# --- Store -------------------------------------------------------------------


class StoreError(FeedwatchError):
    """Raised when the delivery store cannot be read or written."""


# --- Notifications -----------------------------------------------------------


class NotificationError(FeedwatchError):
    """Raised when an alert cannot be composed or delivered."""
