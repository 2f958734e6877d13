"""Pydantic schemas for punches, summaries and attendance settings.

Wire format is camelCase (``eventType``, ``periodStart`` ...); snake_case
field names are accepted on input as well.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from schoolhub.core.enums import AttendanceStatus, EventType, WeekStart
from schoolhub.services.periods import ensure_utc

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


# ── Punch ───────────────────────────────────────────────────────────
class PunchRequest(BaseModel):
    event_type: EventType
    # ISO-8601 instant; defaults to the time the punch is received
    event_at: str | None = None

    model_config = {**_CAMEL}

    @field_validator("event_at")
    @classmethod
    def _event_at(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class AttendanceEventRead(BaseModel):
    id: str
    person_id: str
    event_type: EventType
    event_at: datetime
    created_at: datetime

    model_config = {**_CAMEL, "from_attributes": True}

    @field_validator("event_at", "created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class AttendanceSummaryRead(BaseModel):
    id: str
    person_id: str
    org_id: str
    period_start: date
    period_end: date
    period_days: int
    total_minutes: int
    first_in: datetime | None
    last_out: datetime | None
    status: AttendanceStatus
    created_at: datetime
    updated_at: datetime

    model_config = {**_CAMEL, "from_attributes": True}

    @field_validator("first_in", "last_out", "created_at", "updated_at")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None


class PunchResponse(BaseModel):
    event: AttendanceEventRead
    summary: AttendanceSummaryRead

    model_config = {**_CAMEL, "from_attributes": True}


# ── Range queries ───────────────────────────────────────────────────
class AttendanceRange(BaseModel):
    start_date: str = Field(min_length=1)
    end_date: str = Field(min_length=1)

    model_config = {**_CAMEL}


class AttendanceQuery(AttendanceRange):
    person_id: str | None = None

    @field_validator("person_id")
    @classmethod
    def _person_id(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


# ── Attendance Settings ─────────────────────────────────────────────
class AttendanceSettingsRead(BaseModel):
    org_id: str
    period_days: int
    week_start: WeekStart
    updated_by: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {**_CAMEL, "from_attributes": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class AttendanceSettingsUpdate(BaseModel):
    period_days: int = Field(ge=1, le=365)
    week_start: WeekStart

    model_config = {**_CAMEL}
