"""
Role lookups and the manager relation, as consumed by the attendance service.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.enums import GLOBAL_SCOPE_ID, Role
from schoolhub.models.person import EmployeeOrgAssignment
from schoolhub.models.role_assignment import RoleAssignment
from schoolhub.models.user import User


class RbacService:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_user_scope_roles(
        self, user_id: str, scope_id: str = GLOBAL_SCOPE_ID
    ) -> set[str]:
        """Roles held in *scope_id*, plus those granted globally."""
        result = await self._db.execute(
            select(RoleAssignment.role).where(
                RoleAssignment.user_id == user_id,
                RoleAssignment.scope_id.in_({scope_id, GLOBAL_SCOPE_ID}),
            )
        )
        return set(result.scalars().all())

    async def has_any_role(
        self, actor: User, scope_id: str, roles: Iterable[Role | str]
    ) -> bool:
        held = await self.get_user_scope_roles(actor.id, scope_id)
        wanted = {role.value if isinstance(role, Role) else role for role in roles}
        return not held.isdisjoint(wanted)

    async def manages(self, actor: User, person_id: str, org_id: str) -> bool:
        """True if *person_id* reports directly to the actor's person in *org_id*."""
        if not actor.person_id:
            return False
        result = await self._db.execute(
            select(EmployeeOrgAssignment.person_id).where(
                EmployeeOrgAssignment.person_id == person_id,
                EmployeeOrgAssignment.org_id == org_id,
                EmployeeOrgAssignment.manager_id == actor.person_id,
            )
        )
        return result.scalar_one_or_none() is not None
