"""
Attendance settings endpoints: one row per org.

GET creates the row with defaults on first access; PATCH is reserved for
super admins.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from schoolhub.api.v1.deps import get_attendance_service, get_org_id, get_verified_user
from schoolhub.models.attendance_settings import AttendanceSettings
from schoolhub.models.user import User
from schoolhub.schemas.attendance import AttendanceSettingsRead, AttendanceSettingsUpdate
from schoolhub.services.attendance_service import AttendanceService

router = APIRouter(prefix="/attendance", tags=["settings"])


@router.get("/settings", response_model=AttendanceSettingsRead)
async def get_settings(
    _actor: User = Depends(get_verified_user),
    org_id: str = Depends(get_org_id),
    service: AttendanceService = Depends(get_attendance_service),
) -> AttendanceSettings:
    """Get the org's period length and week anchor."""
    return await service.get_settings(org_id)


@router.patch("/settings", response_model=AttendanceSettingsRead)
async def update_settings(
    body: AttendanceSettingsUpdate,
    actor: User = Depends(get_verified_user),
    org_id: str = Depends(get_org_id),
    service: AttendanceService = Depends(get_attendance_service),
) -> AttendanceSettings:
    """Update the org's period length and week anchor (super admin only)."""
    return await service.update_settings(actor, org_id, body)
