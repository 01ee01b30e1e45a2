"""
feedwatch - Meteorological feed arrival monitor.

Builds each day's expected file deliveries per feed type, probes the remote
SFTP source for them and tracks every delivery through
expected / delayed / missing / received.
"""

__version__ = "0.1.0"

from feedwatch.core import (
    ChangeEvent,
    DeliveryStatus,
    DeliveryStore,
    ExpectedDelivery,
    Reconciler,
    RemoteProber,
    generate_day,
)
from feedwatch.exceptions import (
    ConfigurationError,
    FeedwatchError,
    NotificationError,
    RemoteConnectionError,
    StoreError,
)

__all__ = [
    "__version__",
    "ChangeEvent",
    "DeliveryStatus",
    "DeliveryStore",
    "ExpectedDelivery",
    "Reconciler",
    "RemoteProber",
    "generate_day",
    "ConfigurationError",
    "FeedwatchError",
    "NotificationError",
    "RemoteConnectionError",
    "StoreError",
]
