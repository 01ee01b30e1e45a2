"""
Tests for feed filename conventions.
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from feedwatch.core.feeds import candidate_filenames, candidates_for, canonical_filename, slot_hours

pytestmark = pytest.mark.unit


class TestCandidateFilenames:
    @pytest.mark.parametrize(
        "feed_type,hour,expected",
        [
            ("metar", 0, ["mmetar.csv"]),
            ("metar", 5, ["mmetar5.csv", "mmetar05.csv"]),
            ("metar", 12, ["mmetar12.csv", "mmetar12.csv"]),
            ("synop", 0, ["synop00.csv", "synop000.csv"]),
            ("synop", 3, ["synop03.csv", "synop003.csv"]),
            ("synop", 21, ["synop21.csv", "synop021.csv"]),
            ("buoy", 0, ["buoy00.csv"]),
            ("ship", 7, ["ship07.csv"]),
            ("radar", 23, ["radar23.csv"]),
        ],
    )
    def test_candidates(self, feed_type, hour, expected):
        assert candidate_filenames(feed_type, hour) == expected

    def test_every_hour_has_candidates(self):
        for feed_type in ("metar", "synop", "buoy", "ship"):
            for hour in range(24):
                assert candidate_filenames(feed_type, hour)

    @pytest.mark.parametrize("hour", [-1, 24])
    def test_hour_out_of_range(self, hour):
        with pytest.raises(ValueError):
            candidate_filenames("metar", hour)

    def test_candidates_use_utc_hour(self):
        plus_two = timezone(timedelta(hours=2))
        assert candidates_for("metar", datetime(2024, 1, 1, 7, 0, tzinfo=plus_two)) == [
            "mmetar5.csv",
            "mmetar05.csv",
        ]

    def test_naive_timestamp_is_utc(self):
        assert candidates_for("buoy", datetime(2024, 1, 1, 9)) == ["buoy09.csv"]


class TestCanonicalFilename:
    @pytest.mark.parametrize(
        "feed_type,hour,expected",
        [
            ("metar", 0, "mmetar.csv"),
            ("metar", 5, "mmetar5.csv"),
            ("metar", 15, "mmetar15.csv"),
            ("synop", 6, "synop06.csv"),
            ("ship", 0, "ship00.csv"),
        ],
    )
    def test_canonical(self, feed_type, hour, expected):
        assert canonical_filename(feed_type, hour) == expected

    def test_canonical_is_first_candidate(self):
        for feed_type in ("metar", "synop", "buoy"):
            for hour in range(24):
                assert canonical_filename(feed_type, hour) == candidate_filenames(feed_type, hour)[0]


class TestSlotHours:
    def test_hourly(self):
        assert slot_hours(1) == list(range(24))

    def test_three_hourly(self):
        assert slot_hours(3) == [0, 3, 6, 9, 12, 15, 18, 21]

    def test_non_divisor_interval(self):
        assert slot_hours(5) == [0, 5, 10, 15, 20]

    def test_daily(self):
        assert slot_hours(24) == [0]

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            slot_hours(0)


def test_candidates_for_aware_utc():
    assert candidates_for("synop", datetime(2024, 1, 1, 12, tzinfo=UTC)) == ["synop12.csv", "synop012.csv"]
