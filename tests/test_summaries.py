"""Tests for the period summary fold and status classification."""

from datetime import datetime, timedelta, timezone

import pytest

from schoolhub.core.enums import AttendanceStatus, EventType
from schoolhub.models.attendance import AttendanceEvent
from schoolhub.services.summaries import (build_summary, classify_status,
                                          minutes_between)

DAY = datetime(2024, 1, 2, tzinfo=timezone.utc)


def _ev(event_type: EventType, hour: int, minute: int = 0) -> AttendanceEvent:
    return AttendanceEvent(
        event_type=event_type.value,
        event_at=DAY + timedelta(hours=hour, minutes=minute),
    )


def test_empty_period():
    totals = build_summary([])
    assert totals.total_minutes == 0
    assert totals.first_in is None
    assert totals.last_out is None
    assert classify_status(totals.total_minutes, totals.first_in, totals.last_out) is AttendanceStatus.ABSENT


def test_single_shift():
    totals = build_summary([_ev(EventType.IN, 9), _ev(EventType.OUT, 10)])
    assert totals.total_minutes == 60
    assert totals.first_in == DAY + timedelta(hours=9)
    assert totals.last_out == DAY + timedelta(hours=10)
    assert classify_status(60, totals.first_in, totals.last_out) is AttendanceStatus.PRESENT


def test_input_order_does_not_matter():
    totals = build_summary([_ev(EventType.OUT, 17), _ev(EventType.IN, 9)])
    assert totals.total_minutes == 480


def test_break_is_added_on_top_of_the_shift():
    """09:00-17:00 with a 30 minute break totals 480 + 30."""
    totals = build_summary(
        [
            _ev(EventType.IN, 9),
            _ev(EventType.BREAK_START, 12),
            _ev(EventType.BREAK_END, 12, 30),
            _ev(EventType.OUT, 17),
        ]
    )
    assert totals.total_minutes == 510


def test_several_shifts_in_one_period():
    totals = build_summary(
        [
            _ev(EventType.IN, 8),
            _ev(EventType.OUT, 9),
            _ev(EventType.IN, 13),
            _ev(EventType.OUT, 14, 15),
        ]
    )
    assert totals.total_minutes == 135
    assert totals.first_in == DAY + timedelta(hours=8)
    assert totals.last_out == DAY + timedelta(hours=14, minutes=15)


def test_open_shift_counts_nothing():
    totals = build_summary([_ev(EventType.IN, 9), _ev(EventType.BREAK_START, 10)])
    assert totals.total_minutes == 0
    assert totals.last_out is None
    assert classify_status(0, totals.first_in, None) is AttendanceStatus.PARTIAL


def test_unmatched_break_end_ignored():
    totals = build_summary([_ev(EventType.BREAK_END, 9), _ev(EventType.IN, 10), _ev(EventType.OUT, 11)])
    assert totals.total_minutes == 60


def test_out_without_in_ignored():
    totals = build_summary([_ev(EventType.OUT, 9)])
    assert totals.total_minutes == 0
    assert totals.first_in is None
    assert totals.last_out == DAY + timedelta(hours=9)
    assert classify_status(0, None, totals.last_out) is AttendanceStatus.PARTIAL


def test_naive_timestamps_read_as_utc():
    events = [
        AttendanceEvent(event_type="IN", event_at=datetime(2024, 1, 2, 9, 0)),
        AttendanceEvent(event_type="OUT", event_at=datetime(2024, 1, 2, 9, 45)),
    ]
    totals = build_summary(events)
    assert totals.total_minutes == 45
    assert totals.first_in.tzinfo is not None


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, 0), (29, 0), (30, 1), (89, 1), (90, 2), (3600, 60), (-120, 0)],
)
def test_minutes_round_half_up(seconds, expected):
    assert minutes_between(DAY, DAY + timedelta(seconds=seconds)) == expected


@pytest.mark.parametrize(
    "total,first_in,last_out,expected",
    [
        (0, None, None, AttendanceStatus.ABSENT),
        (0, DAY, None, AttendanceStatus.PARTIAL),
        (0, DAY, DAY, AttendanceStatus.PARTIAL),
        (1, DAY, DAY, AttendanceStatus.PRESENT),
        (120, DAY, None, AttendanceStatus.PRESENT),
    ],
)
def test_classify_status(total, first_in, last_out, expected):
    assert classify_status(total, first_in, last_out) is expected
