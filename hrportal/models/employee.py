"""
Employee model

Roster rows uploaded by HR, optionally mapped to a standard role
"""
from datetime import date
from enum import Enum
from typing import Optional, List
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class RoleAssignmentStatus(str, Enum):
    """Role assignment status"""
    UNASSIGNED = "unassigned"
    AI_SUGGESTED = "ai_suggested"
    ASSIGNED = "assigned"
    AI_NO_MATCH = "ai_no_match"
    MANUAL = "manual"


# ==================== Base fields ====================

class EmployeeBase(SQLModelBase):
    """Employee fields shared by create and table models"""
    employee_number: str = Field(..., min_length=1, max_length=50, description="Employee number")
    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field("", max_length=100, description="Last name")
    email: Optional[str] = Field(None, max_length=200, description="Email")
    phone: Optional[str] = Field(None, max_length=50, description="Phone")
    current_position: str = Field(..., min_length=1, max_length=200, description="Current position")
    current_department: Optional[str] = Field(None, max_length=200, index=True, description="Current department")
    current_level: Optional[str] = Field(None, max_length=50, description="Current level/grade")
    years_of_experience: Optional[int] = Field(None, ge=0, description="Years of experience")
    performance_rating: Optional[float] = Field(None, ge=0, le=5, description="Performance rating (0-5)")
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Skills")
    certifications: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Certifications")
    salary: Optional[float] = Field(None, ge=0, description="Salary")
    currency: Optional[str] = Field("IDR", max_length=10, description="Salary currency")
    hire_date: Optional[date] = Field(None, description="Hire date")
    source_company: str = Field("xlsmart", max_length=50, index=True, description="Source company (xl/smart/xlsmart)")


# ==================== Table ====================

class Employee(EmployeeBase, TimestampMixin, IDMixin, table=True):
    """Employee table"""
    __tablename__ = "employees"

    employee_number: str = Field(..., max_length=50, unique=True, index=True)
    is_active: bool = Field(default=True, index=True, description="Active flag")
    standard_role_id: Optional[str] = Field(
        default=None, foreign_key="standard_roles.id", index=True, description="Assigned standard role"
    )
    ai_suggested_role_id: Optional[str] = Field(default=None, description="Role suggested by AI")
    role_assignment_status: str = Field(
        default=RoleAssignmentStatus.UNASSIGNED.value, max_length=30, description="Role assignment status"
    )
    assignment_notes: Optional[str] = Field(default=None, description="Assignment notes")
    manager_id: Optional[str] = Field(default=None, description="Manager employee id")
    upload_session_id: Optional[str] = Field(
        default=None, foreign_key="upload_sessions.id", index=True, description="Upload session"
    )
    uploaded_by: Optional[str] = Field(default=None, description="Uploader user id")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, number={self.employee_number})>"


# ==================== Request schemas ====================

class EmployeeCreate(EmployeeBase):
    """Create employee"""
    standard_role_id: Optional[str] = None
    manager_id: Optional[str] = None


class EmployeeUpdate(SQLModelBase):
    """Update employee - every field optional"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    current_position: Optional[str] = Field(None, min_length=1, max_length=200)
    current_department: Optional[str] = Field(None, max_length=200)
    current_level: Optional[str] = Field(None, max_length=50)
    years_of_experience: Optional[int] = Field(None, ge=0)
    performance_rating: Optional[float] = Field(None, ge=0, le=5)
    skills: Optional[List[str]] = None
    certifications: Optional[List[str]] = None
    salary: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, max_length=10)
    hire_date: Optional[date] = None
    source_company: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None
    standard_role_id: Optional[str] = None
    manager_id: Optional[str] = None


# ==================== Response schemas ====================

class EmployeeResponse(TimestampResponse):
    """Employee detail"""
    employee_number: str
    first_name: str
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    current_position: str
    current_department: Optional[str]
    current_level: Optional[str]
    years_of_experience: Optional[int]
    performance_rating: Optional[float]
    skills: List[str]
    certifications: List[str]
    salary: Optional[float]
    currency: Optional[str]
    hire_date: Optional[date]
    source_company: str
    is_active: bool
    standard_role_id: Optional[str]
    ai_suggested_role_id: Optional[str]
    role_assignment_status: str
    assignment_notes: Optional[str]
    manager_id: Optional[str]
    upload_session_id: Optional[str]
    standard_role_title: Optional[str] = Field(None, description="Assigned standard role title")


class EmployeeListResponse(TimestampResponse):
    """Employee list item"""
    employee_number: str
    first_name: str
    last_name: str
    current_position: str
    current_department: Optional[str]
    current_level: Optional[str]
    source_company: str
    is_active: bool
    standard_role_id: Optional[str]
    role_assignment_status: str
