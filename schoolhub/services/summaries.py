"""
Period summary arithmetic over a list of punches.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Protocol

from schoolhub.core.enums import AttendanceStatus, EventType
from schoolhub.services.periods import ensure_utc


class TimedPunch(Protocol):
    event_type: str
    event_at: datetime


@dataclass(frozen=True)
class SummaryTotals:
    total_minutes: int
    first_in: datetime | None
    last_out: datetime | None


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from *start* to *end*, rounded half up, never negative."""
    minutes = (ensure_utc(end) - ensure_utc(start)).total_seconds() / 60
    return max(0, math.floor(minutes + 0.5))


def build_summary(events: Iterable[TimedPunch]) -> SummaryTotals:
    """Fold one period's punches into worked minutes, first IN and last OUT.

    BREAK_END adds the break span and OUT adds the whole IN->OUT span, so a
    break is counted on top of the shift that contains it. Breaks are never
    subtracted here.
    """
    ordered = sorted(events, key=lambda e: ensure_utc(e.event_at))
    if not ordered:
        return SummaryTotals(total_minutes=0, first_in=None, last_out=None)

    first_in = next(
        (ensure_utc(e.event_at) for e in ordered if e.event_type == EventType.IN),
        None,
    )
    last_out = next(
        (ensure_utc(e.event_at) for e in reversed(ordered) if e.event_type == EventType.OUT),
        None,
    )

    total = 0
    current_in: datetime | None = None
    break_start: datetime | None = None

    for ev in ordered:
        ts = ensure_utc(ev.event_at)
        if ev.event_type == EventType.IN:
            current_in = ts
            break_start = None
        elif ev.event_type == EventType.BREAK_START:
            if current_in is not None:
                break_start = ts
        elif ev.event_type == EventType.BREAK_END:
            if break_start is not None and current_in is not None:
                total += minutes_between(break_start, ts)
                break_start = None
        elif ev.event_type == EventType.OUT:
            if current_in is not None:
                total += minutes_between(current_in, ts)
                current_in = None
                break_start = None

    return SummaryTotals(total_minutes=max(0, total), first_in=first_in, last_out=last_out)


def classify_status(
    total_minutes: int,
    first_in: datetime | None,
    last_out: datetime | None,
) -> AttendanceStatus:
    if first_in is None and last_out is None:
        return AttendanceStatus.ABSENT
    if total_minutes <= 0:
        return AttendanceStatus.PARTIAL
    return AttendanceStatus.PRESENT
