"""
Attendance Settings model: one row per org.

The row is created with defaults the first time an org's settings are
read, and only a super admin may change it afterwards. Period resolution
reads ``period_days`` and ``week_start`` from here on every punch.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from schoolhub.db.base import Base

DEFAULT_PERIOD_DAYS = 7
DEFAULT_WEEK_START = "TUESDAY"


class AttendanceSettings(Base):
    __tablename__ = "attendance_settings"

    org_id: str = Column(String(64), primary_key=True)  # type: ignore[assignment]
    period_days: int = Column(Integer, nullable=False, default=DEFAULT_PERIOD_DAYS)  # type: ignore[assignment]
    week_start: str = Column(  # type: ignore[assignment]
        String(10), nullable=False, default=DEFAULT_WEEK_START, index=True
    )
    updated_by: str | None = Column(  # type: ignore[assignment]
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
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
