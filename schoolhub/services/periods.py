"""
Calendar periods and every instant <-> local-date conversion.

This is the only module that knows about the application timezone. The
rest of the attendance code works with UTC instants and calendar dates
produced here, so offsets are never re-derived anywhere else.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from pydantic import TypeAdapter, ValidationError

from schoolhub.core.enums import WeekStart
from schoolhub.core.exceptions import InvalidInputError


@dataclass(frozen=True)
class Period:
    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


def ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp to UTC-aware.

    SQLite hands back naive datetimes; everything is stored in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local_date(instant: datetime, tz: tzinfo) -> date:
    """Calendar date of *instant* as seen in *tz*."""
    return ensure_utc(instant).astimezone(tz).date()


def local_day_bounds(start: date, end: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """UTC instants covering local days ``start`` through ``end`` inclusive."""
    lower = datetime.combine(start, time.min, tzinfo=tz)
    upper = datetime.combine(end, time.max, tzinfo=tz)
    return lower.astimezone(timezone.utc), upper.astimezone(timezone.utc)


def resolve_period(
    instant: datetime,
    period_days: int,
    week_start: WeekStart | str,
    tz: tzinfo = timezone.utc,
) -> Period:
    """Return the calendar window of ``period_days`` days holding *instant*.

    Windows are anchored on the most recent ``week_start`` weekday on or
    before the instant's local date.
    """
    if period_days < 1:
        raise InvalidInputError("periodDays must be a positive integer")
    anchor_weekday = WeekStart(week_start).weekday

    local = to_local_date(instant, tz)
    anchor = local - timedelta(days=(local.weekday() - anchor_weekday + 7) % 7)
    days_since_anchor = (local - anchor).days
    period_index = days_since_anchor // period_days

    start = anchor + timedelta(days=period_index * period_days)
    return Period(start=start, end=start + timedelta(days=period_days - 1))


# ── Parsing ─────────────────────────────────────────────────────────
_INSTANT = TypeAdapter(datetime)


def parse_instant(value: str, tz: tzinfo) -> datetime:
    """Parse an ISO-8601 instant (``Z`` and ``±HH:MM`` offsets included).

    A missing offset means *tz* local time. Raises ``ValueError`` when the
    value is not a timestamp.
    """
    try:
        parsed = _INSTANT.validate_python(value.strip())
    except ValidationError as exc:
        raise ValueError(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed.astimezone(timezone.utc)


def parse_date_range(start: str, end: str, tz: tzinfo) -> tuple[datetime, datetime]:
    """Turn a ``startDate``/``endDate`` pair into an inclusive UTC range.

    Plain dates cover whole local days; full timestamps are used as given.
    A reversed range is returned as is and simply matches nothing.
    """
    try:
        lower = _parse_bound(start, tz, end_of_day=False)
        upper = _parse_bound(end, tz, end_of_day=True)
    except ValueError as exc:
        raise InvalidInputError("Invalid date range") from exc
    return lower, upper


def parse_date_window(start: str, end: str, tz: tzinfo) -> tuple[date, date]:
    """Same as :func:`parse_date_range` but yields local calendar dates."""
    lower, upper = parse_date_range(start, end, tz)
    return to_local_date(lower, tz), to_local_date(upper, tz)


def _parse_bound(value: str, tz: tzinfo, *, end_of_day: bool) -> datetime:
    value = value.strip()
    try:
        day = date.fromisoformat(value)
    except ValueError:
        return parse_instant(value, tz)
    lower, upper = local_day_bounds(day, day, tz)
    return upper if end_of_day else lower
