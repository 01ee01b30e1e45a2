"""
Expected deliveries and their status lifecycle.

An ExpectedDelivery is one (feed type, timestamp) slot. Its status starts at
``expected`` and is advanced by the reconciliation loop::

    expected --found--> received
    expected --absent, elapsed < threshold--> delayed
    expected --absent, elapsed >= threshold--> missing
    delayed  --found--> received
    delayed  --absent, elapsed >= threshold--> missing

``received`` and ``missing`` are terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class DeliveryStatus(StrEnum):
    """Lifecycle status of an expected delivery."""

    EXPECTED = "expected"
    DELAYED = "delayed"
    MISSING = "missing"
    RECEIVED = "received"

    @property
    def is_terminal(self) -> bool:
        return self in (DeliveryStatus.MISSING, DeliveryStatus.RECEIVED)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def day_start(value: datetime) -> datetime:
    """Midnight UTC of the day containing ``value``."""
    return as_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass
class ExpectedDelivery:
    feed_type: str
    timestamp: datetime
    status: DeliveryStatus = DeliveryStatus.EXPECTED
    filename: str | None = None
    previous_timestamp: datetime | None = None
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "file_type": self.feed_type,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "filename": self.filename,
            "previous_timestamp": self.previous_timestamp.isoformat() if self.previous_timestamp else None,
        }


@dataclass(frozen=True)
class ChangeEvent:
    """Emitted once for every status transition."""

    feed_type: str
    timestamp: datetime
    status: DeliveryStatus
    filename: str | None
    previous_timestamp: datetime | None

    def to_payload(self) -> dict[str, Any]:
        return {
            "fileType": self.feed_type,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "filename": self.filename,
            "previousTimestamp": self.previous_timestamp.isoformat() if self.previous_timestamp else None,
        }


@dataclass
class LastReceivedIndex:
    """
    Most recent ``received`` timestamp per feed type, for the duration of one pass.

    Seeded from the store at the start of the pass and advanced as the pass
    marks records received. Values never move backwards.
    """

    _latest: dict[str, datetime] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: dict[str, datetime]) -> LastReceivedIndex:
        return cls({feed: as_utc(ts) for feed, ts in mapping.items()})

    def get(self, feed_type: str) -> datetime | None:
        return self._latest.get(feed_type)

    def advance(self, feed_type: str, timestamp: datetime) -> None:
        current = self._latest.get(feed_type)
        if current is None or timestamp > current:
            self._latest[feed_type] = timestamp

    def as_dict(self) -> dict[str, datetime]:
        return dict(self._latest)


def next_status(found: bool, elapsed_minutes: float, threshold_minutes: float) -> DeliveryStatus:
    """Status for a non-terminal delivery after one probe."""
    if found:
        return DeliveryStatus.RECEIVED
    if elapsed_minutes < threshold_minutes:
        return DeliveryStatus.DELAYED
    return DeliveryStatus.MISSING
