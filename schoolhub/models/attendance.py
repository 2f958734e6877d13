"""
Attendance event & periodic summary models: core business domain.

Events are append-only punches. Summaries are derived from them and
rewritten by upsert every time a punch lands inside their period.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (Column, Date, DateTime, ForeignKey, Index, Integer,
                        String, UniqueConstraint)

from schoolhub.db.base import Base


class AttendanceEvent(Base):
    __tablename__ = "attendance_events"
    __table_args__ = (Index("ix_attendance_events_person_event", "person_id", "event_at"),)

    id: str = Column(  # type: ignore[assignment]
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    person_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("people.id", ondelete="CASCADE"), nullable=False
    )
    event_type: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    # IN | OUT | BREAK_START | BREAK_END
    event_at: datetime = Column(DateTime(timezone=True), nullable=False, index=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class AttendancePeriodicSummary(Base):
    __tablename__ = "attendance_periodic_summaries"
    __table_args__ = (
        UniqueConstraint("person_id", "org_id", "period_start", name="uq_summary_person_org_period"),
        Index("ix_summary_org_period_start", "org_id", "period_start"),
    )

    id: str = Column(  # type: ignore[assignment]
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    person_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("people.id", ondelete="CASCADE"), nullable=False
    )
    org_id: str = Column(String(64), nullable=False)  # type: ignore[assignment]
    period_start: date = Column(Date, nullable=False)  # type: ignore[assignment]
    period_end: date = Column(Date, nullable=False)  # type: ignore[assignment]
    period_days: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    total_minutes: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    first_in: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    last_out: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    status: str = Column(String(10), nullable=False, default="ABSENT")  # type: ignore[assignment]
    # ABSENT | PRESENT | PARTIAL
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
