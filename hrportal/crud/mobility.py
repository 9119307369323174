"""
Employee move and development plan CRUD
"""
from datetime import date, timedelta
from typing import Optional, List, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.models.employee import Employee
from hrportal.models.base import utcnow
from hrportal.models.employee_move import EmployeeMove, EmployeeMoveCreate, MoveStatus
from hrportal.models.development_plan import DevelopmentPlan
from .base import CRUDBase


class CRUDEmployeeMove(CRUDBase[EmployeeMove]):
    """Employee move CRUD"""

    async def list_with_employee(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 20,
        employee_id: Optional[str] = None,
        move_type: Optional[str] = None,
    ) -> Tuple[List[tuple], int]:
        """(move, employee) pairs, newest first, plus total"""
        query = select(self.model, Employee).join(Employee, Employee.id == self.model.employee_id)
        count_query = select(func.count()).select_from(self.model)
        if employee_id:
            query = query.where(self.model.employee_id == employee_id)
            count_query = count_query.where(self.model.employee_id == employee_id)
        if move_type:
            query = query.where(self.model.move_type == move_type)
            count_query = count_query.where(self.model.move_type == move_type)

        total = (await db.execute(count_query)).scalar() or 0
        result = await db.execute(
            query.order_by(self.model.move_date.desc(), self.model.created_at.desc())
            .offset(skip).limit(limit)
        )
        return list(result.all()), total

    async def count_moved_employees(self, db: AsyncSession, *, days: int = 365) -> int:
        """Distinct employees with an executed move in the last `days` days"""
        since = date.today() - timedelta(days=days)
        result = await db.execute(
            select(func.count(func.distinct(self.model.employee_id)))
            .where(self.model.move_status == MoveStatus.EXECUTED.value)
            .where(self.model.move_date >= since)
        )
        return result.scalar() or 0

    async def execute(
        self,
        db: AsyncSession,
        *,
        employee: Employee,
        obj_in: EmployeeMoveCreate,
        requested_by: Optional[str] = None,
    ) -> EmployeeMove:
        """
        Record an executed move and apply it to the employee

        Both writes share the caller's transaction; nothing is committed here,
        so a failure in either leaves neither behind once the session rolls back.
        """
        move = EmployeeMove(
            employee_id=employee.id,
            move_type=obj_in.move_type.value,
            previous_position=employee.current_position,
            new_position=obj_in.new_position,
            previous_department=employee.current_department,
            new_department=obj_in.new_department or employee.current_department,
            previous_level=employee.current_level,
            new_level=obj_in.new_level or employee.current_level,
            effective_date=obj_in.effective_date,
            move_status=MoveStatus.EXECUTED.value,
            reason=obj_in.reason,
            notes=obj_in.notes,
            mobility_plan_id=obj_in.mobility_plan_id,
            requested_by=requested_by,
            approved_by=requested_by,
            approval_date=utcnow(),
        )
        db.add(move)

        employee.current_position = move.new_position
        employee.current_department = move.new_department
        employee.current_level = move.new_level
        employee.updated_at = utcnow()

        await db.flush()
        await db.refresh(move)
        return move

    async def count_by_type(self, db: AsyncSession) -> dict:
        result = await db.execute(
            select(self.model.move_type, func.count()).group_by(self.model.move_type)
        )
        return {move_type: count for move_type, count in result.all()}


class CRUDDevelopmentPlan(CRUDBase[DevelopmentPlan]):
    """Development plan CRUD"""

    async def average_progress(self, db: AsyncSession) -> float:
        result = await db.execute(select(func.avg(self.model.progress_percentage)))
        value = result.scalar()
        return round(float(value), 1) if value is not None else 0.0

    async def count_by_status(self, db: AsyncSession) -> dict:
        result = await db.execute(
            select(self.model.plan_status, func.count()).group_by(self.model.plan_status)
        )
        return {
            getattr(status, "value", status): count for status, count in result.all()
        }

    async def count_distinct_employees(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(func.distinct(self.model.employee_id))))
        return result.scalar() or 0


employee_move_crud = CRUDEmployeeMove(EmployeeMove)
development_plan_crud = CRUDDevelopmentPlan(DevelopmentPlan)
