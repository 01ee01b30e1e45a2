"""
Schedule generator.

Seeds the store with one ``expected`` delivery per feed type and slot of a UTC
day. Safe to run repeatedly: existing deliveries keep their status.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from feedwatch.core.delivery import ExpectedDelivery, day_start
from feedwatch.core.feeds import canonical_filename, slot_hours
from feedwatch.core.state import DeliveryStore, UpsertOutcome
from feedwatch.utils.logging import get_logger

logger = get_logger("feedwatch.schedule")


def expected_deliveries(day: datetime, feeds: dict[str, int]) -> list[ExpectedDelivery]:
    """Every (feed type, slot) delivery of the UTC day containing ``day``."""
    start = day_start(day)
    deliveries = []
    for feed_type, interval in feeds.items():
        for hour in slot_hours(interval):
            deliveries.append(
                ExpectedDelivery(
                    feed_type=feed_type,
                    timestamp=start + timedelta(hours=hour),
                    filename=canonical_filename(feed_type, hour),
                )
            )
    return deliveries


@dataclass
class GenerationSummary:
    day: datetime
    created: int = 0
    filled: int = 0
    unchanged: int = 0
    failed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.created + self.filled + self.unchanged + len(self.failed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.date().isoformat(),
            "created": self.created,
            "filled": self.filled,
            "unchanged": self.unchanged,
            "failed": list(self.failed),
        }


def generate_day(store: DeliveryStore, day: datetime, feeds: dict[str, int]) -> GenerationSummary:
    """
    Upsert the day's expected deliveries.

    A failure on one slot is logged and the remaining slots are still seeded.
    """
    summary = GenerationSummary(day=day_start(day))
    logger.info(f"Initializing expected deliveries for {summary.day.date().isoformat()}")

    for delivery in expected_deliveries(day, feeds):
        try:
            outcome = store.upsert_expected(delivery.feed_type, delivery.timestamp, delivery.filename or "")
        except Exception as e:
            logger.error(
                f"Error initializing entry for {delivery.feed_type} at {delivery.timestamp.isoformat()}: {e}"
            )
            summary.failed.append(f"{delivery.feed_type}@{delivery.timestamp.isoformat()}")
            continue

        if outcome == UpsertOutcome.CREATED:
            summary.created += 1
        elif outcome == UpsertOutcome.FILLED:
            summary.filled += 1
        else:
            summary.unchanged += 1

    logger.info(
        f"Daily initialization complete: {summary.created} created, {summary.filled} filled, "
        f"{summary.unchanged} unchanged, {len(summary.failed)} failed"
    )
    return summary
