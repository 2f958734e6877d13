"""Tests for period resolution and local-time conversions."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from schoolhub.core.enums import WeekStart
from schoolhub.core.exceptions import InvalidInputError
from schoolhub.services.periods import (Period, local_day_bounds,
                                        parse_date_range, parse_date_window,
                                        parse_instant, resolve_period,
                                        to_local_date)

UTC = timezone.utc
TOKYO = ZoneInfo("Asia/Tokyo")


def test_weekly_period_anchored_on_tuesday():
    """Thursday 2024-01-04 falls in the Tuesday-anchored week starting 2024-01-02."""
    period = resolve_period(datetime(2024, 1, 4, 10, 0, tzinfo=UTC), 7, WeekStart.TUESDAY)
    assert period == Period(start=date(2024, 1, 2), end=date(2024, 1, 8))
    assert period.days == 7


@pytest.mark.parametrize(
    "instant",
    [
        datetime(2023, 12, 26, 0, 0, tzinfo=UTC),
        datetime(2023, 12, 28, 12, 0, tzinfo=UTC),
        datetime(2024, 1, 1, 23, 59, tzinfo=UTC),
    ],
)
def test_week_before_new_year(instant):
    period = resolve_period(instant, 7, "TUESDAY")
    assert period.start == date(2023, 12, 26)
    assert period.end == date(2024, 1, 1)


def test_every_day_of_a_period_resolves_to_that_period():
    period = resolve_period(datetime(2024, 1, 2, tzinfo=UTC), 7, WeekStart.TUESDAY)
    for offset in range(period.days):
        day = datetime.combine(period.start + timedelta(days=offset), datetime.min.time(), UTC)
        assert resolve_period(day, 7, WeekStart.TUESDAY) == period


def test_single_day_periods():
    period = resolve_period(datetime(2024, 3, 15, 18, 30, tzinfo=UTC), 1, WeekStart.MONDAY)
    assert period.start == period.end == date(2024, 3, 15)


def test_short_periods_split_the_week():
    """Three-day windows from Monday 2024-01-01: Thursday opens the second window."""
    period = resolve_period(datetime(2024, 1, 4, 9, 0, tzinfo=UTC), 3, WeekStart.MONDAY)
    assert period == Period(start=date(2024, 1, 4), end=date(2024, 1, 6))


def test_long_periods_start_at_latest_anchor():
    period = resolve_period(datetime(2024, 1, 4, 9, 0, tzinfo=UTC), 14, WeekStart.TUESDAY)
    assert period.start == date(2024, 1, 2)
    assert period.end == date(2024, 1, 15)


def test_local_date_is_used_for_the_anchor():
    """20:00 UTC on Monday is already Tuesday in Tokyo."""
    instant = datetime(2024, 1, 1, 20, 0, tzinfo=UTC)
    assert resolve_period(instant, 7, WeekStart.TUESDAY, UTC).start == date(2023, 12, 26)
    assert resolve_period(instant, 7, WeekStart.TUESDAY, TOKYO).start == date(2024, 1, 2)


@pytest.mark.parametrize("period_days", [0, -3])
def test_non_positive_period_days_rejected(period_days):
    with pytest.raises(InvalidInputError):
        resolve_period(datetime(2024, 1, 4, tzinfo=UTC), period_days, WeekStart.MONDAY)


def test_naive_instant_treated_as_utc():
    assert to_local_date(datetime(2024, 1, 1, 23, 30), UTC) == date(2024, 1, 1)
    assert to_local_date(datetime(2024, 1, 1, 23, 30), TOKYO) == date(2024, 1, 2)


def test_local_day_bounds_in_tokyo():
    lower, upper = local_day_bounds(date(2024, 1, 2), date(2024, 1, 2), TOKYO)
    assert lower == datetime(2024, 1, 1, 15, 0, tzinfo=UTC)
    assert upper.date() == date(2024, 1, 2)
    assert upper.hour == 14 and upper.minute == 59


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-01-01T09:00:00Z", datetime(2024, 1, 1, 9, 0, tzinfo=UTC)),
        ("2024-01-01T09:00:00.000Z", datetime(2024, 1, 1, 9, 0, tzinfo=UTC)),
        ("2024-01-01T18:00:00+09:00", datetime(2024, 1, 1, 9, 0, tzinfo=UTC)),
        ("2024-01-01T04:00:00-05:00", datetime(2024, 1, 1, 9, 0, tzinfo=UTC)),
        (" 2024-01-01T09:00:00Z ", datetime(2024, 1, 1, 9, 0, tzinfo=UTC)),
    ],
)
def test_parse_instant_offsets(value, expected):
    assert parse_instant(value, TOKYO) == expected


def test_parse_instant_without_offset_is_local():
    assert parse_instant("2024-01-01T09:00:00", TOKYO) == datetime(2024, 1, 1, 0, 0, tzinfo=UTC)


@pytest.mark.parametrize("value", ["yesterday", "", "2024-01-01T25:00:00Z"])
def test_parse_instant_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_instant(value, UTC)


def test_instant_range_bounds():
    lower, upper = parse_date_range("2024-01-01T08:00:00.000Z", "2024-01-01T17:00:00+01:00", UTC)
    assert lower == datetime(2024, 1, 1, 8, 0, tzinfo=UTC)
    assert upper == datetime(2024, 1, 1, 16, 0, tzinfo=UTC)


def test_date_only_range_covers_whole_end_day():
    lower, upper = parse_date_range("2024-01-01", "2024-01-07", UTC)
    assert lower == datetime(2024, 1, 1, 0, 0, tzinfo=UTC)
    assert upper > datetime(2024, 1, 7, 23, 59, tzinfo=UTC)


def test_date_window_returns_local_dates():
    assert parse_date_window("2024-01-01", "2024-01-07", TOKYO) == (
        date(2024, 1, 1),
        date(2024, 1, 7),
    )


@pytest.mark.parametrize(
    "start,end",
    [
        ("not-a-date", "2024-01-07"),
        ("2024-01-01", "2024-13-40"),
        ("2024-01-01", "soon"),
    ],
)
def test_invalid_date_ranges_rejected(start, end):
    with pytest.raises(InvalidInputError) as exc:
        parse_date_range(start, end, UTC)
    assert exc.value.detail == "Invalid date range"


def test_reversed_range_is_not_an_error():
    lower, upper = parse_date_range("2024-01-08", "2024-01-07", UTC)
    assert lower > upper
    assert parse_date_window("2024-01-08", "2024-01-07", UTC) == (date(2024, 1, 8), date(2024, 1, 7))
