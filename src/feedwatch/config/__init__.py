"""
Configuration management.
"""

from feedwatch.config.loader import Config, load_config
from feedwatch.config.settings import DEFAULT_FEEDS, MonitorSettings, NotifySettings, StoreSettings

__all__ = [
    "Config",
    "load_config",
    "DEFAULT_FEEDS",
    "MonitorSettings",
    "NotifySettings",
    "StoreSettings",
]
