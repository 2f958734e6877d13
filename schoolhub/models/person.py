"""
Person & org-assignment models.

Only the columns attendance needs: identity of the person and who manages
them inside an org.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, String

from schoolhub.db.base import Base


class Person(Base):
    __tablename__ = "people"

    id: str = Column(  # type: ignore[assignment]
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    first_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    last_name: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class EmployeeOrgAssignment(Base):
    __tablename__ = "employee_org_assignments"
    __table_args__ = (Index("ix_assignment_manager_org", "manager_id", "org_id"),)

    person_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("people.id", ondelete="CASCADE"), primary_key=True
    )
    org_id: str = Column(String(64), nullable=False, index=True)  # type: ignore[assignment]
    manager_id: str | None = Column(  # type: ignore[assignment]
        String(36), ForeignKey("people.id", ondelete="SET NULL"), nullable=True
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
