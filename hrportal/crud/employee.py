"""
Employee CRUD
"""
from typing import Optional, List, Sequence, Tuple, Dict
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.models.employee import Employee, EmployeeCreate, RoleAssignmentStatus
from .base import CRUDBase


class CRUDEmployee(CRUDBase[Employee]):
    """Employee CRUD"""

    async def get_by_number(self, db: AsyncSession, employee_number: str) -> Optional[Employee]:
        """Look up by employee number"""
        result = await db.execute(
            select(self.model).where(self.model.employee_number == employee_number)
        )
        return result.scalar_one_or_none()

    def _search_query(
        self,
        query,
        *,
        department: Optional[str] = None,
        source_company: Optional[str] = None,
        role_assignment_status: Optional[str] = None,
        standard_role_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ):
        if department:
            query = query.where(self.model.current_department == department)
        if source_company:
            query = query.where(self.model.source_company == source_company)
        if role_assignment_status:
            query = query.where(self.model.role_assignment_status == role_assignment_status)
        if standard_role_id:
            query = query.where(self.model.standard_role_id == standard_role_id)
        if is_active is not None:
            query = query.where(self.model.is_active == is_active)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                self.model.first_name.ilike(pattern),
                self.model.last_name.ilike(pattern),
                self.model.employee_number.ilike(pattern),
                self.model.current_position.ilike(pattern),
            ))
        return query

    async def search(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 20,
        **filters
    ) -> Tuple[List[Employee], int]:
        """Filtered page plus total"""
        query = self._search_query(select(self.model), **filters)
        count_query = self._search_query(select(func.count()).select_from(self.model), **filters)

        total = (await db.execute(count_query)).scalar() or 0
        result = await db.execute(
            query.order_by(self.model.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total

    async def select_for_bulk(
        self,
        db: AsyncSession,
        *,
        selection_type: str,
        identifier: Optional[str] = None,
        employee_ids: Optional[List[str]] = None,
    ) -> List[Employee]:
        """
        Employees targeted by a bulk job

        selection_type: company | department | role | all. An explicit id
        list wins over the filter.
        """
        query = select(self.model).where(self.model.is_active == True)
        if employee_ids:
            query = query.where(self.model.id.in_(employee_ids))
        elif selection_type == "company" and identifier:
            query = query.where(func.lower(self.model.source_company) == identifier.lower())
        elif selection_type == "department" and identifier:
            query = query.where(self.model.current_department == identifier)
        elif selection_type == "role" and identifier:
            query = query.where(or_(
                self.model.current_position == identifier,
                self.model.standard_role_id == identifier,
            ))
        result = await db.execute(query.order_by(self.model.employee_number))
        return list(result.scalars().all())

    async def get_for_analysis(
        self,
        db: AsyncSession,
        *,
        department: Optional[str] = None,
        title_keywords: Sequence[str] = (),
        limit: int = 25,
    ) -> List[Employee]:
        """
        Active employees that go into an analysis prompt

        title_keywords keeps employees whose position contains any of them,
        case-insensitively.
        """
        query = select(self.model).where(self.model.is_active == True)
        if department:
            query = query.where(self.model.current_department == department)
        if title_keywords:
            position = func.lower(self.model.current_position)
            query = query.where(or_(*[position.contains(k.lower()) for k in title_keywords]))
        result = await db.execute(query.order_by(self.model.employee_number).limit(limit))
        return list(result.scalars().all())

    async def get_unassigned_in_session(self, db: AsyncSession, session_id: str) -> List[Employee]:
        """Employees of an upload session without a standard role"""
        result = await db.execute(
            select(self.model)
            .where(self.model.upload_session_id == session_id)
            .where(self.model.standard_role_id.is_(None))
            .order_by(self.model.employee_number)
        )
        return list(result.scalars().all())

    async def upsert(
        self,
        db: AsyncSession,
        *,
        obj_in: EmployeeCreate,
        session_id: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> Tuple[Employee, bool]:
        """Insert, or update the row with the same employee number. Returns (row, created)"""
        data = obj_in.model_dump()
        data["upload_session_id"] = session_id
        data["uploaded_by"] = uploaded_by

        existing = await self.get_by_number(db, obj_in.employee_number)
        if existing:
            return await self.update(db, db_obj=existing, obj_in=data), False
        return await self.create(db, obj_in=data), True

    async def assign_role(
        self,
        db: AsyncSession,
        *,
        db_obj: Employee,
        role_id: Optional[str],
        status: RoleAssignmentStatus,
        notes: Optional[str] = None,
    ) -> Employee:
        """Record the result of a role assignment"""
        db_obj.role_assignment_status = status.value
        db_obj.assignment_notes = notes
        if role_id:
            db_obj.standard_role_id = role_id
            db_obj.ai_suggested_role_id = role_id
        await db.flush()
        return db_obj

    async def departments(self, db: AsyncSession) -> List[str]:
        """Distinct department names"""
        result = await db.execute(
            select(self.model.current_department)
            .where(self.model.current_department.is_not(None))
            .distinct()
            .order_by(self.model.current_department)
        )
        return [row for row in result.scalars().all()]

    async def count_grouped(self, db: AsyncSession, field: str) -> Dict[str, int]:
        """value of `field` -> employee count, active employees only"""
        column = getattr(self.model, field)
        result = await db.execute(
            select(column, func.count())
            .where(self.model.is_active == True)
            .group_by(column)
        )
        return {value or "Unspecified": count for value, count in result.all()}

    async def count_assigned(self, db: AsyncSession) -> int:
        """Active employees with a standard role"""
        result = await db.execute(
            select(func.count()).select_from(self.model)
            .where(self.model.is_active == True)
            .where(self.model.standard_role_id.is_not(None))
        )
        return result.scalar() or 0

    async def count_at_risk(self, db: AsyncSession) -> int:
        """Active employees rated below 3 or without a standard role"""
        result = await db.execute(
            select(func.count()).select_from(self.model)
            .where(self.model.is_active == True)
            .where(or_(
                self.model.performance_rating < 3,
                self.model.standard_role_id.is_(None),
            ))
        )
        return result.scalar() or 0

    async def average_performance(self, db: AsyncSession) -> float:
        result = await db.execute(select(func.avg(self.model.performance_rating)))
        value = result.scalar()
        return round(float(value), 2) if value is not None else 0.0


employee_crud = CRUDEmployee(Employee)
