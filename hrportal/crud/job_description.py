"""
Job description CRUD
"""
from typing import Optional, List, Dict
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.models.base import utcnow
from hrportal.models.job_description import JobDescription, JDStatus
from .base import CRUDBase


class CRUDJobDescription(CRUDBase[JobDescription]):
    """Job description CRUD"""

    async def get_for_analysis(
        self,
        db: AsyncSession,
        *,
        department: Optional[str] = None,
        role: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[JobDescription]:
        """JDs fed to the intelligence prompts, newest first"""
        query = select(self.model)
        if department:
            query = query.where(self.model.job_identity["department"].as_string() == department)
        if role:
            query = query.where(self.model.title.ilike(f"%{role}%"))
        query = query.order_by(self.model.created_at.desc())
        if limit:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def count_by_status(self, db: AsyncSession) -> Dict[str, int]:
        result = await db.execute(
            select(self.model.status, func.count()).group_by(self.model.status)
        )
        return {status: count for status, count in result.all()}

    async def set_status(
        self,
        db: AsyncSession,
        *,
        db_obj: JobDescription,
        status: JDStatus,
        user_id: Optional[str] = None
    ) -> JobDescription:
        """Apply an already validated lifecycle transition"""
        now = utcnow()
        db_obj.status = status.value
        if status == JDStatus.REVIEW:
            db_obj.reviewed_by = user_id
        elif status == JDStatus.APPROVED:
            db_obj.approved_by = user_id
            db_obj.approved_at = now
        elif status == JDStatus.PUBLISHED:
            db_obj.published_at = now
        db_obj.updated_at = now
        await db.flush()
        await db.refresh(db_obj)
        return db_obj


job_description_crud = CRUDJobDescription(JobDescription)
