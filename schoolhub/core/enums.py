from __future__ import annotations

from enum import Enum

GLOBAL_SCOPE_ID = "GLOBAL"


class Role(str, Enum):
    """Role names stored in role assignments."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"
    PENDING = "PENDING"


class EventType(str, Enum):
    """Punch kinds, declared in state-machine order."""

    IN = "IN"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"
    OUT = "OUT"


class AttendanceStatus(str, Enum):
    ABSENT = "ABSENT"
    PRESENT = "PRESENT"
    PARTIAL = "PARTIAL"


class WeekStart(str, Enum):
    """Weekday a period is anchored to. Values follow ``date.weekday()``."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def weekday(self) -> int:
        return list(WeekStart).index(self)
