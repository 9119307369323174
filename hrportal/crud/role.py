"""
Standard role, uploaded role and role mapping CRUD
"""
from typing import Optional, List, Dict
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.models.employee import Employee
from hrportal.models.standard_role import StandardRole, UploadedRole, RoleMapping
from .base import CRUDBase


class CRUDStandardRole(CRUDBase[StandardRole]):
    """Standard role CRUD"""

    async def get_active(self, db: AsyncSession) -> List[StandardRole]:
        """All active roles, ordered by title"""
        result = await db.execute(
            select(self.model)
            .where(self.model.is_active == True)
            .order_by(self.model.role_title)
        )
        return list(result.scalars().all())

    async def get_by_title(self, db: AsyncSession, role_title: str) -> Optional[StandardRole]:
        result = await db.execute(
            select(self.model).where(func.lower(self.model.role_title) == role_title.lower())
        )
        return result.scalars().first()

    async def employee_counts(self, db: AsyncSession) -> Dict[str, int]:
        """role id -> assigned employee count"""
        result = await db.execute(
            select(Employee.standard_role_id, func.count())
            .where(Employee.standard_role_id.is_not(None))
            .group_by(Employee.standard_role_id)
        )
        return {role_id: count for role_id, count in result.all()}


class CRUDUploadedRole(CRUDBase[UploadedRole]):
    """Uploaded role CRUD"""

    async def get_by_session(self, db: AsyncSession, session_id: str) -> List[UploadedRole]:
        result = await db.execute(
            select(self.model)
            .where(self.model.session_id == session_id)
            .order_by(self.model.source_company, self.model.role_title)
        )
        return list(result.scalars().all())


class CRUDRoleMapping(CRUDBase[RoleMapping]):
    """Role mapping CRUD"""

    async def count_by_status(self, db: AsyncSession) -> Dict[str, int]:
        result = await db.execute(
            select(self.model.mapping_status, func.count()).group_by(self.model.mapping_status)
        )
        return {status: count for status, count in result.all()}


standard_role_crud = CRUDStandardRole(StandardRole)
uploaded_role_crud = CRUDUploadedRole(UploadedRole)
role_mapping_crud = CRUDRoleMapping(RoleMapping)
