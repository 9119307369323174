"""
Skill CRUD
"""
from typing import Optional, List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.models.skill import SkillMaster, EmployeeSkill, SkillAssessment
from .base import CRUDBase


class CRUDSkill(CRUDBase[SkillMaster]):
    """Skills catalogue CRUD"""

    async def get_by_name(self, db: AsyncSession, name: str) -> Optional[SkillMaster]:
        result = await db.execute(
            select(self.model).where(func.lower(self.model.name) == name.lower())
        )
        return result.scalar_one_or_none()

    async def categories(self, db: AsyncSession) -> List[str]:
        result = await db.execute(
            select(self.model.category).where(self.model.category.is_not(None)).distinct()
        )
        return list(result.scalars().all())


class CRUDEmployeeSkill(CRUDBase[EmployeeSkill]):
    """Employee skill rating CRUD"""

    async def get_pair(self, db: AsyncSession, employee_id: str, skill_id: str) -> Optional[EmployeeSkill]:
        result = await db.execute(
            select(self.model)
            .where(self.model.employee_id == employee_id)
            .where(self.model.skill_id == skill_id)
        )
        return result.scalar_one_or_none()

    async def get_by_employee(self, db: AsyncSession, employee_id: str) -> List[tuple]:
        """(EmployeeSkill, skill name) pairs of one employee"""
        result = await db.execute(
            select(self.model, SkillMaster.name)
            .join(SkillMaster, SkillMaster.id == self.model.skill_id)
            .where(self.model.employee_id == employee_id)
            .order_by(SkillMaster.name)
        )
        return list(result.all())

    async def count_distinct_employees(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(func.distinct(self.model.employee_id))))
        return result.scalar() or 0


class CRUDSkillAssessment(CRUDBase[SkillAssessment]):
    """Skill assessment CRUD"""

    async def get_by_employee(self, db: AsyncSession, employee_id: str) -> List[SkillAssessment]:
        result = await db.execute(
            select(self.model)
            .where(self.model.employee_id == employee_id)
            .order_by(self.model.created_at.desc())
        )
        return list(result.scalars().all())

    async def average_match(self, db: AsyncSession) -> float:
        result = await db.execute(select(func.avg(self.model.overall_match_percentage)))
        value = result.scalar()
        return round(float(value), 1) if value is not None else 0.0

    async def count_distinct_employees(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(func.distinct(self.model.employee_id))))
        return result.scalar() or 0


skill_crud = CRUDSkill(SkillMaster)
employee_skill_crud = CRUDEmployeeSkill(EmployeeSkill)
skill_assessment_crud = CRUDSkillAssessment(SkillAssessment)
