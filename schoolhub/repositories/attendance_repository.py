"""
Attendance persistence: every query the attendance service issues.

Writes commit immediately. Settings and summaries are written with
``INSERT ... ON CONFLICT`` so concurrent writers race on the unique key
instead of on a read-then-write window (last writer wins).
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import date, datetime, timezone

from sqlalchemy import Table, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.models.attendance import AttendanceEvent, AttendancePeriodicSummary
from schoolhub.models.attendance_settings import (DEFAULT_PERIOD_DAYS,
                                                  DEFAULT_WEEK_START,
                                                  AttendanceSettings)
from schoolhub.models.person import EmployeeOrgAssignment, Person


class AttendanceRepository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    def _insert(self, table: Table):
        """Dialect-specific INSERT supporting ``on_conflict_*``."""
        if self._db.bind.dialect.name == "postgresql":
            return postgresql.insert(table)
        return sqlite.insert(table)

    # ── People ──────────────────────────────────────────────────────
    async def get_person(self, person_id: str) -> Person | None:
        result = await self._db.execute(select(Person).where(Person.id == person_id))
        return result.scalar_one_or_none()

    async def list_direct_report_ids(self, manager_id: str, org_id: str) -> list[str]:
        result = await self._db.execute(
            select(EmployeeOrgAssignment.person_id).where(
                EmployeeOrgAssignment.manager_id == manager_id,
                EmployeeOrgAssignment.org_id == org_id,
            )
        )
        return list(result.scalars().all())

    # ── Events ──────────────────────────────────────────────────────
    async def get_latest_event(
        self, person_id: str, *, for_update: bool = False
    ) -> AttendanceEvent | None:
        query = (
            select(AttendanceEvent)
            .where(AttendanceEvent.person_id == person_id)
            .order_by(AttendanceEvent.event_at.desc(), AttendanceEvent.created_at.desc())
            .limit(1)
        )
        if for_update:
            # Row lock on PostgreSQL; SQLite renders no FOR UPDATE clause.
            query = query.with_for_update()
        result = await self._db.execute(query)
        return result.scalar_one_or_none()

    async def create_event(
        self, person_id: str, event_type: str, event_at: datetime
    ) -> AttendanceEvent:
        event = AttendanceEvent(
            person_id=person_id,
            event_type=event_type,
            event_at=event_at,
            created_at=datetime.now(timezone.utc),
        )
        self._db.add(event)
        await self._db.commit()
        await self._db.refresh(event)
        return event

    async def list_events(
        self, person_id: str, start: datetime, end: datetime
    ) -> list[AttendanceEvent]:
        result = await self._db.execute(
            select(AttendanceEvent)
            .where(
                AttendanceEvent.person_id == person_id,
                AttendanceEvent.event_at >= start,
                AttendanceEvent.event_at <= end,
            )
            .order_by(AttendanceEvent.event_at.asc(), AttendanceEvent.created_at.asc())
        )
        return list(result.scalars().all())

    # ── Settings ────────────────────────────────────────────────────
    async def get_settings(self, org_id: str) -> AttendanceSettings | None:
        result = await self._db.execute(
            select(AttendanceSettings)
            .where(AttendanceSettings.org_id == org_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def insert_default_settings(self, org_id: str) -> bool:
        """Insert the default row for *org_id*; ``False`` if one already exists."""
        now = datetime.now(timezone.utc)
        stmt = (
            self._insert(AttendanceSettings.__table__)
            .values(
                org_id=org_id,
                period_days=DEFAULT_PERIOD_DAYS,
                week_start=DEFAULT_WEEK_START,
                updated_by=None,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["org_id"])
        )
        result = await self._db.execute(stmt)
        await self._db.commit()
        return result.rowcount == 1

    async def upsert_settings(
        self,
        org_id: str,
        *,
        period_days: int,
        week_start: str,
        updated_by: str | None,
    ) -> AttendanceSettings:
        now = datetime.now(timezone.utc)
        stmt = self._insert(AttendanceSettings.__table__).values(
            org_id=org_id,
            period_days=period_days,
            week_start=week_start,
            updated_by=updated_by,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["org_id"],
            set_={
                "period_days": stmt.excluded.period_days,
                "week_start": stmt.excluded.week_start,
                "updated_by": stmt.excluded.updated_by,
                "updated_at": now,
            },
        )
        await self._db.execute(stmt)
        await self._db.commit()

        result = await self._db.execute(
            select(AttendanceSettings)
            .where(AttendanceSettings.org_id == org_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    # ── Summaries ───────────────────────────────────────────────────
    async def upsert_summary(
        self,
        *,
        person_id: str,
        org_id: str,
        period_start: date,
        period_end: date,
        period_days: int,
        total_minutes: int,
        first_in: datetime | None,
        last_out: datetime | None,
        status: str,
    ) -> AttendancePeriodicSummary:
        now = datetime.now(timezone.utc)
        stmt = self._insert(AttendancePeriodicSummary.__table__).values(
            id=str(uuid.uuid4()),
            person_id=person_id,
            org_id=org_id,
            period_start=period_start,
            period_end=period_end,
            period_days=period_days,
            total_minutes=total_minutes,
            first_in=first_in,
            last_out=last_out,
            status=status,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["person_id", "org_id", "period_start"],
            set_={
                "period_end": stmt.excluded.period_end,
                "period_days": stmt.excluded.period_days,
                "total_minutes": stmt.excluded.total_minutes,
                "first_in": stmt.excluded.first_in,
                "last_out": stmt.excluded.last_out,
                "status": stmt.excluded.status,
                "updated_at": now,
            },
        )
        await self._db.execute(stmt)
        await self._db.commit()

        result = await self._db.execute(
            select(AttendancePeriodicSummary)
            .where(
                AttendancePeriodicSummary.person_id == person_id,
                AttendancePeriodicSummary.org_id == org_id,
                AttendancePeriodicSummary.period_start == period_start,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_summaries(
        self, person_id: str, org_id: str, start: date, end: date
    ) -> list[AttendancePeriodicSummary]:
        return await self.list_summaries_for_people([person_id], org_id, start, end)

    async def list_summaries_for_people(
        self, person_ids: Sequence[str], org_id: str, start: date, end: date
    ) -> list[AttendancePeriodicSummary]:
        if not person_ids:
            return []
        result = await self._db.execute(
            select(AttendancePeriodicSummary)
            .where(
                AttendancePeriodicSummary.org_id == org_id,
                AttendancePeriodicSummary.person_id.in_(person_ids),
                AttendancePeriodicSummary.period_start >= start,
                AttendancePeriodicSummary.period_start <= end,
            )
            .order_by(
                AttendancePeriodicSummary.period_start.asc(),
                AttendancePeriodicSummary.person_id.asc(),
            )
        )
        return list(result.scalars().all())
