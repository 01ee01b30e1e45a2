"""
Typed views over the raw configuration mapping.

Config shape::

    monitor:
      feeds: {metar: 1, synop: 3, buoy: 1, ship: 1}   # interval in hours
      delay_threshold_minutes: 10
      reconcile_schedule: "* * * * *"
      daily_schedule: "0 0 * * *"
    remote:
      host: ${SERVER_IP}
      username: ${SERVER_USER}
      password: ${SERVER_PASSWORD}
      base_path: ${SERVER_PATH}
    store:
      path: data/feedwatch.duckdb
    notify:
      smtp_host: smtp.gmail.com
      sender: ${EMAIL_USER}
      recipient: ${ADMIN_EMAIL}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from feedwatch.config.loader import Config
from feedwatch.config.resolver import is_unresolved
from feedwatch.exceptions import ConfigurationError
from feedwatch.service.cron_parser import CronParseError, parse_cron

DEFAULT_FEEDS: dict[str, int] = {"metar": 1, "synop": 3, "buoy": 1, "ship": 1}


def _section(config: Config | dict[str, Any] | None, key: str) -> dict[str, Any]:
    if config is None:
        return {}
    if isinstance(config, Config):
        return config.section(key)
    value = config.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Configuration '{key}' must be a mapping", details={"key": key})
    return value


def _optional_str(value: Any) -> str | None:
    """Treat empty strings and unresolved ``${VAR}`` references as unset."""
    if value is None or is_unresolved(value):
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class MonitorSettings:
    feeds: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_FEEDS))
    delay_threshold_minutes: float = 10.0
    reconcile_schedule: str = "* * * * *"
    daily_schedule: str = "0 0 * * *"

    @classmethod
    def from_config(cls, config: Config | dict[str, Any] | None) -> MonitorSettings:
        cfg = _section(config, "monitor")

        raw_feeds = cfg.get("feeds", DEFAULT_FEEDS)
        if not isinstance(raw_feeds, dict) or not raw_feeds:
            raise ConfigurationError("monitor.feeds must be a non-empty mapping of feed type to interval hours")
        feeds: dict[str, int] = {}
        for feed_type, interval in raw_feeds.items():
            try:
                hours = int(interval)
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Interval for feed '{feed_type}' must be an integer, got {interval!r}",
                    details={"feed_type": feed_type},
                ) from None
            if not 1 <= hours <= 24:
                raise ConfigurationError(
                    f"Interval for feed '{feed_type}' must be between 1 and 24 hours, got {hours}",
                    details={"feed_type": feed_type},
                )
            feeds[str(feed_type)] = hours

        try:
            threshold = float(cfg.get("delay_threshold_minutes", 10))
        except (TypeError, ValueError):
            raise ConfigurationError("monitor.delay_threshold_minutes must be a number") from None
        if threshold < 0:
            raise ConfigurationError("monitor.delay_threshold_minutes must not be negative")

        reconcile_schedule = str(cfg.get("reconcile_schedule", "* * * * *"))
        daily_schedule = str(cfg.get("daily_schedule", "0 0 * * *"))
        for key, expr in (("reconcile_schedule", reconcile_schedule), ("daily_schedule", daily_schedule)):
            try:
                parse_cron(expr)
            except CronParseError as e:
                raise ConfigurationError(f"monitor.{key} is not a valid cron expression: {e}") from None

        return cls(
            feeds=feeds,
            delay_threshold_minutes=threshold,
            reconcile_schedule=reconcile_schedule,
            daily_schedule=daily_schedule,
        )


@dataclass(frozen=True)
class StoreSettings:
    path: str = "data/feedwatch.duckdb"

    @classmethod
    def from_config(cls, config: Config | dict[str, Any] | None, project_dir: Path | None = None) -> StoreSettings:
        cfg = _section(config, "store")
        path = str(cfg.get("path", cls.path))
        if path != ":memory:" and project_dir is not None and not Path(path).is_absolute():
            path = str(Path(project_dir) / path)
        return cls(path=path)


@dataclass(frozen=True)
class NotifySettings:
    smtp_host: str | None = None
    smtp_port: int = 587
    username: str | None = None
    password: str | None = None
    sender: str | None = None
    recipient: str | None = None
    starttls: bool = True
    timeout_s: float = 30.0

    @property
    def enabled(self) -> bool:
        return bool(self.smtp_host and self.sender and self.recipient)

    @classmethod
    def from_config(cls, config: Config | dict[str, Any] | None) -> NotifySettings:
        cfg = _section(config, "notify")
        return cls(
            smtp_host=_optional_str(cfg.get("smtp_host")),
            smtp_port=int(cfg.get("smtp_port", 587)),
            username=_optional_str(cfg.get("username")),
            password=_optional_str(cfg.get("password")),
            sender=_optional_str(cfg.get("sender")),
            recipient=_optional_str(cfg.get("recipient")),
            starttls=bool(cfg.get("starttls", True)),
            timeout_s=float(cfg.get("timeout_s", 30.0)),
        )
