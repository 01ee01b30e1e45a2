"""
Feed filename conventions.

Each feed type delivers ``<name><hour>.csv`` files, but the exact spelling of
the hour differs per feed. ``candidate_filenames`` lists every spelling we
accept, in the order they are probed. ``canonical_filename`` is the single name
recorded when the day's schedule is generated.
"""

from __future__ import annotations

from datetime import UTC, datetime

METAR = "metar"
SYNOP = "synop"


def candidate_filenames(feed_type: str, hour: int) -> list[str]:
    """
    Acceptable filenames for ``feed_type`` at UTC ``hour``, in probe order.

    >>> candidate_filenames("metar", 5)
    ['mmetar5.csv', 'mmetar05.csv']
    >>> candidate_filenames("synop", 3)
    ['synop03.csv', 'synop003.csv']
    """
    _check_hour(hour)
    if feed_type == METAR:
        if hour == 0:
            return ["mmetar.csv"]
        # Identical for hours >= 10; both spellings are kept so the order is stable
        return [f"mmetar{hour}.csv", f"mmetar{hour:02d}.csv"]
    if feed_type == SYNOP:
        return [f"{feed_type}{hour:02d}.csv", f"{feed_type}{hour:03d}.csv"]
    return [f"{feed_type}{hour:02d}.csv"]


def canonical_filename(feed_type: str, hour: int) -> str:
    """Filename stored on the expected-delivery record for ``feed_type`` at ``hour``."""
    _check_hour(hour)
    if feed_type == METAR:
        return "mmetar.csv" if hour == 0 else f"mmetar{hour}.csv"
    return f"{feed_type}{hour:02d}.csv"


def candidates_for(feed_type: str, timestamp: datetime) -> list[str]:
    """Candidate filenames for the UTC hour of ``timestamp`` (naive means UTC)."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(UTC)
    return candidate_filenames(feed_type, timestamp.hour)


def slot_hours(interval_hours: int) -> list[int]:
    """Interval-aligned hours of a day: ``0, interval, 2*interval, ... < 24``."""
    if interval_hours < 1:
        raise ValueError(f"interval must be at least one hour, got {interval_hours}")
    return list(range(0, 24, interval_hours))


def _check_hour(hour: int) -> None:
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be within 0-23, got {hour}")
