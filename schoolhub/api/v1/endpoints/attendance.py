"""
Attendance punch & reporting endpoints.

- POST /attendance/punch/{person_id}: self or elevated role.
- GET  /attendance/events/{person_id}, /attendance/summaries: self, elevated
  role, or the person's manager.
- GET  /attendance/team-summaries: elevated role, own direct reports.

Every route needs a verified actor and the org header.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from schoolhub.api.v1.deps import get_attendance_service, get_org_id, get_verified_user
from schoolhub.models.attendance import AttendanceEvent, AttendancePeriodicSummary
from schoolhub.models.user import User
from schoolhub.schemas.attendance import (AttendanceEventRead, AttendanceQuery,
                                          AttendanceRange,
                                          AttendanceSummaryRead, PunchRequest,
                                          PunchResponse)
from schoolhub.services.attendance_service import AttendanceService

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/punch/{person_id}", response_model=PunchResponse, status_code=201)
async def punch(
    person_id: str,
    body: PunchRequest,
    actor: User = Depends(get_verified_user),
    org_id: str = Depends(get_org_id),
    service: AttendanceService = Depends(get_attendance_service),
) -> PunchResponse:
    """Record an attendance punch and return it with the refreshed period summary."""
    result = await service.punch(actor, person_id, org_id, body)
    return PunchResponse.model_validate(result, from_attributes=True)


@router.get("/events/{person_id}", response_model=list[AttendanceEventRead])
async def list_events(
    person_id: str,
    start_date: str = Query(alias="startDate", min_length=1),
    end_date: str = Query(alias="endDate", min_length=1),
    actor: User = Depends(get_verified_user),
    org_id: str = Depends(get_org_id),
    service: AttendanceService = Depends(get_attendance_service),
) -> list[AttendanceEvent]:
    """Raw punches for a person, oldest first."""
    date_range = AttendanceRange(start_date=start_date, end_date=end_date)
    return await service.list_events(actor, person_id, org_id, date_range)


@router.get("/summaries", response_model=list[AttendanceSummaryRead])
async def list_summaries(
    start_date: str = Query(alias="startDate", min_length=1),
    end_date: str = Query(alias="endDate", min_length=1),
    person_id: str | None = Query(default=None, alias="personId"),
    actor: User = Depends(get_verified_user),
    org_id: str = Depends(get_org_id),
    service: AttendanceService = Depends(get_attendance_service),
) -> list[AttendancePeriodicSummary]:
    """Stored period summaries for one person (the caller when omitted)."""
    query = AttendanceQuery(start_date=start_date, end_date=end_date, person_id=person_id)
    return await service.list_summaries(actor, query, org_id)


@router.get("/team-summaries", response_model=list[AttendanceSummaryRead])
async def list_team_summaries(
    start_date: str = Query(alias="startDate", min_length=1),
    end_date: str = Query(alias="endDate", min_length=1),
    actor: User = Depends(get_verified_user),
    org_id: str = Depends(get_org_id),
    service: AttendanceService = Depends(get_attendance_service),
) -> list[AttendancePeriodicSummary]:
    """Stored period summaries for the caller's direct reports."""
    date_range = AttendanceRange(start_date=start_date, end_date=end_date)
    return await service.list_team_summaries(actor, date_range, org_id)
