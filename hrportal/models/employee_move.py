"""
Employee move model

A recorded change of position, department or level
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Literal
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class MoveType(str, Enum):
    PROMOTION = "promotion"
    LATERAL_MOVE = "lateral_move"
    DEPARTMENT_TRANSFER = "department_transfer"
    OTHER = "other"


class MoveStatus(str, Enum):
    PENDING = "pending"
    EXECUTED = "executed"
    CANCELLED = "cancelled"


class EmployeeMove(TimestampMixin, IDMixin, table=True):
    """Employee move table"""
    __tablename__ = "employee_moves"

    employee_id: str = Field(..., foreign_key="employees.id", index=True)
    move_type: str = Field(..., max_length=30)
    previous_position: Optional[str] = Field(default=None, max_length=200)
    new_position: str = Field(..., max_length=200)
    previous_department: Optional[str] = Field(default=None, max_length=200)
    new_department: Optional[str] = Field(default=None, max_length=200)
    previous_level: Optional[str] = Field(default=None, max_length=50)
    new_level: Optional[str] = Field(default=None, max_length=50)
    move_date: date = Field(default_factory=date.today)
    effective_date: Optional[date] = None
    move_status: str = Field(default=MoveStatus.EXECUTED.value, max_length=20, index=True)
    reason: Optional[str] = None
    notes: Optional[str] = None
    mobility_plan_id: Optional[str] = Field(default=None, foreign_key="ai_analysis_results.id")
    requested_by: Optional[str] = None
    approved_by: Optional[str] = None
    approval_date: Optional[datetime] = None


class EmployeeMoveCreate(SQLModelBase):
    """Execute a move"""
    employee_id: str
    move_type: MoveType
    new_position: str = Field(..., min_length=1, max_length=200)
    new_department: Optional[str] = Field(None, max_length=200)
    new_level: Optional[str] = Field(None, max_length=50)
    effective_date: Optional[date] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    mobility_plan_id: Optional[str] = None


class EmployeeMoveResponse(TimestampResponse):
    employee_id: str
    move_type: str
    previous_position: Optional[str]
    new_position: str
    previous_department: Optional[str]
    new_department: Optional[str]
    previous_level: Optional[str]
    new_level: Optional[str]
    move_date: date
    effective_date: Optional[date]
    move_status: str
    reason: Optional[str]
    notes: Optional[str]
    mobility_plan_id: Optional[str]
    requested_by: Optional[str]
    approved_by: Optional[str]
    employee_name: Optional[str] = None
    employee_number: Optional[str] = None


class BulkMobilityRequest(SQLModelBase):
    """Mobility plans for a company, department, role or everyone"""
    selection_type: Literal["company", "department", "role", "all"]
    identifier: Optional[str] = None
    employee_ids: Optional[List[str]] = None
