"""
Cron expressions for the monitor's background loops.

Standard 5 fields: minute hour day-of-month month day-of-week, with the tokens
'*', '*/n', 'a', 'a,b', 'a-b' and 'a-b/n'. When both day fields are restricted
a day matches if either matches, as in traditional cron.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta


class CronParseError(ValueError):
    pass


@dataclass(frozen=True)
class CronSpec:
    minutes: frozenset[int]
    hours: frozenset[int]
    days: frozenset[int]  # 1-31
    months: frozenset[int]  # 1-12
    weekdays: frozenset[int]  # 0-6, 0=Sunday
    any_day: bool
    any_weekday: bool

    def day_matches(self, dt: datetime) -> bool:
        if dt.month not in self.months:
            return False
        dom = dt.day in self.days
        dow = (dt.weekday() + 1) % 7 in self.weekdays
        if self.any_day and self.any_weekday:
            return True
        if self.any_day:
            return dow
        if self.any_weekday:
            return dom
        return dom or dow


_FIELDS = (
    ("minute", 0, 59),
    ("hour", 0, 23),
    ("day", 1, 31),
    ("month", 1, 12),
    ("weekday", 0, 7),
)


def parse_cron(expr: str) -> CronSpec:
    """Parse a 5-field cron expression; raises CronParseError when invalid."""
    parts = expr.split()
    if len(parts) != 5:
        raise CronParseError(f"cron must have 5 fields, got {len(parts)}: {expr!r}")

    values = [_parse_field(token, name, lo, hi) for token, (name, lo, hi) in zip(parts, _FIELDS)]
    # 7 is an alias for Sunday
    weekdays = {0 if d == 7 else d for d in values[4]}
    return CronSpec(
        minutes=frozenset(values[0]),
        hours=frozenset(values[1]),
        days=frozenset(values[2]),
        months=frozenset(values[3]),
        weekdays=frozenset(weekdays),
        any_day=parts[2] == "*",
        any_weekday=parts[4] == "*",
    )


def next_fire_time(expr: str | CronSpec, *, now: datetime) -> datetime:
    """
    Return the first matching minute strictly after ``now`` (UTC).

    Naive datetimes are taken as UTC.
    """
    spec = parse_cron(expr) if isinstance(expr, str) else expr
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    cursor = now.astimezone(UTC).replace(second=0, microsecond=0) + timedelta(minutes=1)
    # A little over a year covers every satisfiable expression
    limit = cursor + timedelta(days=370)

    while cursor <= limit:
        if not spec.day_matches(cursor):
            cursor = (cursor + timedelta(days=1)).replace(hour=0, minute=0)
            continue
        if cursor.hour not in spec.hours:
            cursor = (cursor + timedelta(hours=1)).replace(minute=0)
            continue
        if cursor.minute not in spec.minutes:
            cursor += timedelta(minutes=1)
            continue
        return cursor

    raise CronParseError("cron expression produced no next fire time within a year")


def _parse_field(token: str, name: str, lo: int, hi: int) -> set[int]:
    values: set[int] = set()
    for part in token.split(","):
        if not part:
            raise CronParseError(f"empty {name} field: {token!r}")

        step = 1
        if "/" in part:
            part, step_s = part.split("/", 1)
            if not step_s.isdigit() or int(step_s) == 0:
                raise CronParseError(f"invalid step in {name} field: {token!r}")
            step = int(step_s)

        if part == "*":
            start, end = lo, hi
        elif "-" in part:
            a, b = part.split("-", 1)
            if not (a.isdigit() and b.isdigit()):
                raise CronParseError(f"invalid range in {name} field: {token!r}")
            start, end = int(a), int(b)
            if start > end:
                raise CronParseError(f"range start > end in {name} field: {token!r}")
        elif part.isdigit():
            start = end = int(part)
        else:
            raise CronParseError(f"invalid value in {name} field: {token!r}")

        if start < lo or end > hi:
            raise CronParseError(f"value out of bounds in {name} field: {token!r}")
        values.update(range(start, end + 1, step))

    if not values:
        raise CronParseError(f"empty {name} field: {token!r}")
    return values
