"""
Reconciliation loop.

One pass brings every due delivery up to date:

1. seed a LastReceivedIndex from the store;
2. load deliveries with ``timestamp <= now``, oldest first;
3. for each ``expected``/``delayed`` delivery, probe the remote source and
   compute its next status;
4. persist and announce each status change.

Deliveries are handled one at a time in timestamp order, so a delivery marked
received early in the pass is the ``previous_timestamp`` of later deliveries of
the same feed type. A failure on one delivery never stops the pass.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from feedwatch.core.delivery import (
    ChangeEvent,
    DeliveryStatus,
    ExpectedDelivery,
    LastReceivedIndex,
    as_utc,
    next_status,
)
from feedwatch.core.prober import RemoteProber
from feedwatch.core.state import DeliveryStore
from feedwatch.utils.logging import get_logger

logger = get_logger("feedwatch.reconcile")

ChangeListener = Callable[[ChangeEvent], None]


@dataclass(frozen=True)
class Transition:
    delivery: ExpectedDelivery
    status: DeliveryStatus
    previous_timestamp: datetime | None

    def to_event(self) -> ChangeEvent:
        return ChangeEvent(
            feed_type=self.delivery.feed_type,
            timestamp=self.delivery.timestamp,
            status=self.status,
            filename=self.delivery.filename,
            previous_timestamp=self.previous_timestamp,
        )


@dataclass
class PassSummary:
    started_at: datetime
    due: int = 0
    checked: int = 0
    changed: int = 0
    errors: int = 0
    skipped: bool = False
    reason: str | None = None
    events: list[ChangeEvent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "due": self.due,
            "checked": self.checked,
            "changed": self.changed,
            "errors": self.errors,
            "skipped": self.skipped,
            "reason": self.reason,
        }


class Reconciler:
    """Drives the delivery state machine against the remote source."""

    def __init__(
        self,
        store: DeliveryStore,
        prober: RemoteProber,
        *,
        threshold_minutes: float = 10.0,
        base_path: str | None = None,
        listeners: list[ChangeListener] | None = None,
    ):
        self.store = store
        self.prober = prober
        self.threshold_minutes = threshold_minutes
        self.base_path = base_path
        self._listeners: list[ChangeListener] = list(listeners or [])

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def evaluate(self, delivery: ExpectedDelivery, index: LastReceivedIndex, now: datetime) -> Transition | None:
        """
        Probe one delivery and decide its next status.

        ``index`` is only read here; the pass advances it once a ``received``
        status has been stored. Returns None for terminal deliveries and when
        the status would not change.
        """
        if delivery.status.is_terminal:
            return None

        prior = index.get(delivery.feed_type)
        result = self.prober.probe(delivery.feed_type, delivery.timestamp, base_path=self.base_path)

        elapsed_minutes = (now - delivery.timestamp).total_seconds() / 60.0
        status = next_status(result.found, elapsed_minutes, self.threshold_minutes)
        if status == delivery.status:
            return None
        return Transition(delivery=delivery, status=status, previous_timestamp=prior)

    def run_pass(self, now: datetime | None = None) -> PassSummary:
        now = as_utc(now) if now is not None else datetime.now(UTC)
        summary = PassSummary(started_at=now)
        logger.info(f"Running reconciliation pass at {now.isoformat()}")

        fault = self._configuration_fault()
        if fault:
            logger.error(f"Skipping reconciliation pass: {fault}")
            summary.skipped = True
            summary.reason = fault
            return summary

        try:
            index = LastReceivedIndex.from_mapping(self.store.last_received())
            due = self.store.due(now)
        except Exception as e:
            logger.error(f"Skipping reconciliation pass, cannot load deliveries: {e}")
            summary.skipped = True
            summary.reason = str(e)
            return summary

        summary.due = len(due)
        for delivery in due:
            if delivery.status.is_terminal:
                continue
            summary.checked += 1
            try:
                transition = self.evaluate(delivery, index, now)
                if transition is None:
                    continue
                self._apply(transition)
                if transition.status == DeliveryStatus.RECEIVED:
                    index.advance(delivery.feed_type, delivery.timestamp)
            except Exception as e:
                summary.errors += 1
                logger.error(
                    f"Failed to reconcile {delivery.feed_type} at {delivery.timestamp.isoformat()}: {e}"
                )
                continue

            event = transition.to_event()
            summary.changed += 1
            summary.events.append(event)
            self._notify(event)

        logger.info(
            f"Reconciliation pass complete: {summary.checked} checked, {summary.changed} changed, "
            f"{summary.errors} errors"
        )
        return summary

    def _apply(self, transition: Transition) -> None:
        delivery = transition.delivery
        logger.info(
            f"Status change for {delivery.feed_type} at {delivery.timestamp.isoformat()}: "
            f"{delivery.status.value} -> {transition.status.value}"
        )
        if delivery.id is None:
            raise ValueError("delivery has no store id")
        self.store.update_status(delivery.id, transition.status, transition.previous_timestamp)

    def _notify(self, event: ChangeEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Change listener failed for {event.feed_type} at {event.timestamp.isoformat()}: {e}")

    def _configuration_fault(self) -> str | None:
        if not (self.base_path or self.prober.remote.base_path):
            return "remote base path is not configured"
        if not self.prober.remote.host:
            return "remote host is not configured"
        return None
