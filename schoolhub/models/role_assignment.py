"""
RoleAssignment model: scoped role grants.

A grant in the ``GLOBAL`` scope applies in every org; any other scope id
is an org id.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Column, DateTime, ForeignKey, Index, Integer, String,
                        UniqueConstraint)

from schoolhub.db.base import Base


class RoleAssignment(Base):
    __tablename__ = "role_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "role", "scope_id", name="uq_role_user_scope"),
        Index("ix_role_assignments_user_scope", "user_id", "scope_id"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: str = Column(  # type: ignore[assignment]
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    # SUPER_ADMIN | ADMIN | STAFF | TEACHER | STUDENT | PARENT | PENDING
    scope_id: str = Column(String(64), nullable=False, default="GLOBAL")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
