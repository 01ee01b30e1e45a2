"""
Tests for delivery statuses, change events and the last-received index.
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from feedwatch.core.delivery import (
    ChangeEvent,
    DeliveryStatus,
    ExpectedDelivery,
    LastReceivedIndex,
    as_utc,
    day_start,
    next_status,
)

pytestmark = pytest.mark.unit


class TestNextStatus:
    def test_found_is_received(self):
        assert next_status(True, 0.0, 10.0) == DeliveryStatus.RECEIVED
        assert next_status(True, 500.0, 10.0) == DeliveryStatus.RECEIVED

    def test_absent_within_threshold_is_delayed(self):
        assert next_status(False, 5.0, 10.0) == DeliveryStatus.DELAYED

    def test_absent_at_threshold_is_missing(self):
        assert next_status(False, 10.0, 10.0) == DeliveryStatus.MISSING

    def test_absent_past_threshold_is_missing(self):
        assert next_status(False, 15.0, 10.0) == DeliveryStatus.MISSING


def test_terminal_statuses():
    assert DeliveryStatus.RECEIVED.is_terminal
    assert DeliveryStatus.MISSING.is_terminal
    assert not DeliveryStatus.EXPECTED.is_terminal
    assert not DeliveryStatus.DELAYED.is_terminal


class TestLastReceivedIndex:
    def test_advance_moves_forward_only(self):
        index = LastReceivedIndex()
        t1 = datetime(2024, 1, 1, 1, tzinfo=UTC)
        t2 = datetime(2024, 1, 1, 2, tzinfo=UTC)

        index.advance("metar", t2)
        index.advance("metar", t1)
        assert index.get("metar") == t2

    def test_feed_types_are_independent(self):
        index = LastReceivedIndex.from_mapping({"metar": datetime(2024, 1, 1, 3)})
        assert index.get("metar") == datetime(2024, 1, 1, 3, tzinfo=UTC)
        assert index.get("synop") is None

    def test_as_dict_is_a_copy(self):
        index = LastReceivedIndex()
        index.as_dict()["metar"] = datetime(2024, 1, 1, tzinfo=UTC)
        assert index.get("metar") is None


def test_change_event_payload():
    event = ChangeEvent(
        feed_type="metar",
        timestamp=datetime(2024, 1, 1, 5, tzinfo=UTC),
        status=DeliveryStatus.RECEIVED,
        filename="mmetar5.csv",
        previous_timestamp=datetime(2024, 1, 1, 4, tzinfo=UTC),
    )
    assert event.to_payload() == {
        "fileType": "metar",
        "timestamp": "2024-01-01T05:00:00+00:00",
        "status": "received",
        "filename": "mmetar5.csv",
        "previousTimestamp": "2024-01-01T04:00:00+00:00",
    }


def test_delivery_to_dict():
    delivery = ExpectedDelivery(feed_type="synop", timestamp=datetime(2024, 1, 1, 3, tzinfo=UTC), id=7)
    data = delivery.to_dict()
    assert data["id"] == 7
    assert data["file_type"] == "synop"
    assert data["status"] == "expected"
    assert data["previous_timestamp"] is None


def test_utc_helpers():
    plus_two = timezone(timedelta(hours=2))
    assert as_utc(datetime(2024, 1, 1, 1, tzinfo=plus_two)) == datetime(2023, 12, 31, 23, tzinfo=UTC)
    assert as_utc(datetime(2024, 1, 1, 1)).tzinfo is UTC
    assert day_start(datetime(2024, 1, 1, 15, 37, 12, tzinfo=UTC)) == datetime(2024, 1, 1, tzinfo=UTC)
