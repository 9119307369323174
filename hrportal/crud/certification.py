"""
Employee certification CRUD
"""
from datetime import date, timedelta
from typing import Dict, List
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.models.certification import EmployeeCertification
from .base import CRUDBase

# certifications expiring within this many days count as expiring soon
EXPIRY_WINDOW_DAYS = 90


class CRUDEmployeeCertification(CRUDBase[EmployeeCertification]):
    """Employee certification CRUD"""

    async def get_by_employee(self, db: AsyncSession, employee_id: str) -> List[EmployeeCertification]:
        result = await db.execute(
            select(self.model)
            .where(self.model.employee_id == employee_id)
            .order_by(self.model.expiry_date.is_(None), self.model.expiry_date, self.model.certification_name)
        )
        return list(result.scalars().all())

    async def expiry_counts(self, db: AsyncSession, today: date) -> Dict[str, int]:
        """
        total, active (no expiry date or expiring after today), expiring_soon
        (within EXPIRY_WINDOW_DAYS) and the number of certified employees
        """
        window_end = today + timedelta(days=EXPIRY_WINDOW_DAYS)
        total = await self.count(db)
        active = (await db.execute(
            select(func.count()).select_from(self.model).where(or_(
                self.model.expiry_date.is_(None),
                self.model.expiry_date > today,
            ))
        )).scalar() or 0
        expiring_soon = (await db.execute(
            select(func.count()).select_from(self.model)
            .where(self.model.expiry_date > today)
            .where(self.model.expiry_date <= window_end)
        )).scalar() or 0
        certified = (await db.execute(
            select(func.count(func.distinct(self.model.employee_id)))
        )).scalar() or 0
        return {
            "total": total,
            "active": active,
            "expiring_soon": expiring_soon,
            "certified_employees": certified,
        }


employee_certification_crud = CRUDEmployeeCertification(EmployeeCertification)
