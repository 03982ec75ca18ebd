"""UTC clock and calendar arithmetic.

All instants handled by the services are naive ``datetime`` values holding
UTC, matching how they are stored. Conversion to and from the ISO-8601
``...Z`` wire format happens only at the edges (``parse_instant`` and
``to_iso``).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

ONE_SECOND = timedelta(seconds=1)
ONE_DAY = timedelta(days=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today(now: datetime | None = None) -> date:
    return (now or utcnow()).date()


def yesterday(now: datetime | None = None) -> date:
    return today(now) - ONE_DAY


def to_iso(value: datetime | None) -> str | None:
    if not value:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive UTC datetime.

    ``Z`` and explicit offsets are converted to UTC; naive input is taken
    to already be UTC. Raises ``ValueError`` on malformed input.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Timestamp is required")
    cleaned = value.strip()
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    parsed = datetime.fromisoformat(cleaned)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_day(value: str) -> date:
    """Calendar date from ``YYYY-MM-DD`` or a full ISO-8601 instant (its UTC date)."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return parse_instant(value).date()


def seconds_between(start: datetime, end: datetime) -> int:
    """Whole seconds from ``start`` to ``end``, sub-second remainder dropped."""
    return (end - start) // ONE_SECOND


def day_window(target: date) -> tuple[datetime, datetime]:
    """Half-open UTC window ``[midnight, next midnight)`` for a calendar date."""
    start = datetime.combine(target, datetime.min.time())
    return start, start + ONE_DAY


def last_day_of(start: datetime, end: datetime) -> date:
    # an interval ending exactly at midnight belongs to the previous day
    if end > start and end.time() == datetime.min.time():
        return (end - ONE_DAY).date()
    return end.date()


def count_work_days(start_date: date, end_date: date) -> int:
    """Number of Monday-Friday dates in ``[start_date, end_date]``."""
    if end_date < start_date:
        return 0
    total_days = (end_date - start_date).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5
    weekday = start_date.weekday()
    for offset in range(remainder):
        if (weekday + offset) % 7 < 5:
            count += 1
    return count
