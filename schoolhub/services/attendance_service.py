"""
Attendance coordinator.

Every write goes authorize -> validate sequence -> persist event ->
resolve period -> recompute and upsert the period summary. Reads return
stored rows without recomputation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Protocol

from schoolhub.core.config import settings as app_settings
from schoolhub.core.enums import Role
from schoolhub.core.exceptions import (InvalidInputError, InvalidSequenceError,
                                       NotFoundError, UnauthenticatedError,
                                       UnauthorizedError)
from schoolhub.models.attendance import AttendanceEvent, AttendancePeriodicSummary
from schoolhub.models.attendance_settings import AttendanceSettings
from schoolhub.models.user import User
from schoolhub.repositories.attendance_repository import AttendanceRepository
from schoolhub.schemas.attendance import (AttendanceQuery, AttendanceRange,
                                          AttendanceSettingsUpdate, PunchRequest)
from schoolhub.services.periods import (local_day_bounds, parse_date_range,
                                        parse_date_window, parse_instant,
                                        resolve_period)
from schoolhub.services.punch_rules import validate_sequence
from schoolhub.services.summaries import build_summary, classify_status

logger = logging.getLogger(__name__)

MAX_PERIOD_DAYS = 365


class AccessControl(Protocol):
    """Capability checks the coordinator delegates to."""

    async def has_any_role(
        self, actor: User, scope_id: str, roles: Iterable[Role | str]
    ) -> bool: ...

    async def manages(self, actor: User, person_id: str, org_id: str) -> bool: ...


@dataclass(frozen=True)
class PunchResult:
    event: AttendanceEvent
    summary: AttendancePeriodicSummary


class AttendanceService:
    def __init__(
        self,
        repository: AttendanceRepository,
        access: AccessControl,
        *,
        tz: tzinfo | None = None,
        elevated_roles: Iterable[Role | str] | None = None,
    ) -> None:
        self._repo = repository
        self._access = access
        self._tz = tz or app_settings.tz
        self._elevated_roles = tuple(elevated_roles or app_settings.ELEVATED_ROLES)

    # ── Access ──────────────────────────────────────────────────────
    @staticmethod
    def _require_actor(actor: User | None) -> User:
        if actor is None:
            raise UnauthenticatedError("Not authenticated")
        return actor

    async def _is_elevated(self, actor: User, org_id: str) -> bool:
        return await self._access.has_any_role(actor, org_id, self._elevated_roles)

    async def _ensure_access(
        self,
        actor: User | None,
        person_id: str,
        org_id: str,
        *,
        include_reports: bool = False,
    ) -> User:
        """Allow self, elevated roles and (optionally) the person's manager."""
        actor = self._require_actor(actor)
        if actor.person_id and actor.person_id == person_id:
            return actor
        if await self._is_elevated(actor, org_id):
            return actor
        if include_reports and await self._access.manages(actor, person_id, org_id):
            return actor

        logger.warning(
            "Denied attendance access: user %s -> person %s (org %s)",
            actor.id,
            person_id,
            org_id,
        )
        raise UnauthorizedError("Insufficient privileges")

    # ── Settings ────────────────────────────────────────────────────
    async def get_or_create_settings(self, org_id: str) -> tuple[AttendanceSettings, bool]:
        """Return the org's settings and whether this call created them."""
        existing = await self._repo.get_settings(org_id)
        if existing is not None:
            return existing, False

        created = await self._repo.insert_default_settings(org_id)
        if created:
            logger.info("Created default attendance settings for org %s", org_id)
        loaded = await self._repo.get_settings(org_id)
        if loaded is None:
            raise NotFoundError(f"Attendance settings for org {org_id} not found")
        return loaded, created

    async def get_settings(self, org_id: str) -> AttendanceSettings:
        settings, _ = await self.get_or_create_settings(org_id)
        return settings

    async def update_settings(
        self,
        actor: User | None,
        org_id: str,
        payload: AttendanceSettingsUpdate,
    ) -> AttendanceSettings:
        actor = self._require_actor(actor)
        if not await self._access.has_any_role(actor, org_id, [Role.SUPER_ADMIN]):
            logger.warning("Denied settings update for user %s (org %s)", actor.id, org_id)
            raise UnauthorizedError("Insufficient privileges")
        if not 1 <= payload.period_days <= MAX_PERIOD_DAYS:
            raise InvalidInputError(f"periodDays must be between 1 and {MAX_PERIOD_DAYS}")

        settings = await self._repo.upsert_settings(
            org_id,
            period_days=payload.period_days,
            week_start=payload.week_start.value,
            updated_by=actor.id,
        )
        logger.info(
            "Attendance settings for org %s updated by %s: periodDays=%d weekStart=%s",
            org_id,
            actor.id,
            settings.period_days,
            settings.week_start,
        )
        return settings

    # ── Punch ───────────────────────────────────────────────────────
    def _parse_event_at(self, value: str | None) -> datetime:
        if value is None:
            return datetime.now(timezone.utc)
        try:
            return parse_instant(value, self._tz)
        except ValueError as exc:
            raise InvalidInputError("Invalid eventAt timestamp") from exc

    async def punch(
        self,
        actor: User | None,
        person_id: str,
        org_id: str,
        payload: PunchRequest,
    ) -> PunchResult:
        await self._ensure_access(actor, person_id, org_id)
        event_at = self._parse_event_at(payload.event_at)

        if await self._repo.get_person(person_id) is None:
            raise NotFoundError("Person not found")

        last_event = await self._repo.get_latest_event(person_id, for_update=True)
        try:
            validate_sequence(last_event, payload.event_type)
        except InvalidSequenceError as exc:
            logger.warning(
                "Rejected %s punch for person %s: %s",
                payload.event_type.value,
                person_id,
                exc.detail,
            )
            raise

        event = await self._repo.create_event(person_id, payload.event_type.value, event_at)
        logger.info(
            "Punch %s for person %s at %s (org %s)",
            event.event_type,
            person_id,
            event_at.isoformat(),
            org_id,
        )

        # The event is committed; a failed recompute leaves it in place.
        try:
            summary = await self.refresh_summary(person_id, org_id, event_at)
        except Exception:
            logger.error(
                "Event %s stored but summary refresh failed for person %s (org %s)",
                event.id,
                person_id,
                org_id,
                exc_info=True,
            )
            raise
        return PunchResult(event=event, summary=summary)

    async def refresh_summary(
        self, person_id: str, org_id: str, event_at: datetime
    ) -> AttendancePeriodicSummary:
        """Recompute the summary of the period containing *event_at*."""
        settings, _ = await self.get_or_create_settings(org_id)
        period = resolve_period(event_at, settings.period_days, settings.week_start, self._tz)
        start, end = local_day_bounds(period.start, period.end, self._tz)

        events = await self._repo.list_events(person_id, start, end)
        totals = build_summary(events)
        status = classify_status(totals.total_minutes, totals.first_in, totals.last_out)

        return await self._repo.upsert_summary(
            person_id=person_id,
            org_id=org_id,
            period_start=period.start,
            period_end=period.end,
            period_days=settings.period_days,
            total_minutes=totals.total_minutes,
            first_in=totals.first_in,
            last_out=totals.last_out,
            status=status.value,
        )

    # ── Reads ───────────────────────────────────────────────────────
    async def list_events(
        self,
        actor: User | None,
        person_id: str,
        org_id: str,
        date_range: AttendanceRange,
    ) -> list[AttendanceEvent]:
        await self._ensure_access(actor, person_id, org_id, include_reports=True)
        start, end = parse_date_range(date_range.start_date, date_range.end_date, self._tz)
        return await self._repo.list_events(person_id, start, end)

    async def list_summaries(
        self,
        actor: User | None,
        query: AttendanceQuery,
        org_id: str,
    ) -> list[AttendancePeriodicSummary]:
        actor = self._require_actor(actor)
        target = query.person_id or actor.person_id
        if not target:
            raise InvalidInputError("personId is required")

        await self._ensure_access(actor, target, org_id, include_reports=True)
        start, end = parse_date_window(query.start_date, query.end_date, self._tz)
        return await self._repo.list_summaries(target, org_id, start, end)

    async def list_team_summaries(
        self,
        actor: User | None,
        date_range: AttendanceRange,
        org_id: str,
    ) -> list[AttendancePeriodicSummary]:
        actor = self._require_actor(actor)
        if not actor.person_id:
            raise UnauthorizedError("Actor is not linked to a person")
        if not await self._is_elevated(actor, org_id):
            logger.warning("Denied team summaries for user %s (org %s)", actor.id, org_id)
            raise UnauthorizedError("Insufficient privileges")

        start, end = parse_date_window(date_range.start_date, date_range.end_date, self._tz)
        reports = await self._repo.list_direct_report_ids(actor.person_id, org_id)
        if not reports:
            return []
        return await self._repo.list_summaries_for_people(reports, org_id, start, end)
