"""
Development plan model
"""
from enum import Enum
from typing import Optional, List, Any, Literal
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class PlanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class DevelopmentPlanBase(SQLModelBase):
    employee_id: str = Field(..., foreign_key="employees.id", index=True)
    target_role: Optional[str] = Field(None, max_length=200)
    development_areas: List[Any] = Field(default_factory=list, sa_column=Column(JSON))
    recommended_courses: List[Any] = Field(default_factory=list, sa_column=Column(JSON))
    recommended_certifications: List[Any] = Field(default_factory=list, sa_column=Column(JSON))
    recommended_projects: List[Any] = Field(default_factory=list, sa_column=Column(JSON))
    timeline_months: int = Field(12, ge=1, le=60)
    plan_status: PlanStatus = Field(PlanStatus.ACTIVE)
    progress_percentage: float = Field(0, ge=0, le=100)
    plan_text: Optional[str] = None


class DevelopmentPlan(DevelopmentPlanBase, TimestampMixin, IDMixin, table=True):
    """Development plan table"""
    __tablename__ = "development_plans"

    is_fallback: bool = Field(default=False)
    session_id: Optional[str] = Field(default=None, foreign_key="upload_sessions.id", index=True)
    created_by: Optional[str] = None


class DevelopmentPlanCreate(DevelopmentPlanBase):
    pass


class DevelopmentPlanUpdate(SQLModelBase):
    target_role: Optional[str] = Field(None, max_length=200)
    development_areas: Optional[List[Any]] = None
    recommended_courses: Optional[List[Any]] = None
    recommended_certifications: Optional[List[Any]] = None
    recommended_projects: Optional[List[Any]] = None
    timeline_months: Optional[int] = Field(None, ge=1, le=60)
    plan_status: Optional[PlanStatus] = None
    progress_percentage: Optional[float] = Field(None, ge=0, le=100)
    plan_text: Optional[str] = None


class DevelopmentPlanResponse(TimestampResponse):
    employee_id: str
    target_role: Optional[str]
    development_areas: List[Any]
    recommended_courses: List[Any]
    recommended_certifications: List[Any]
    recommended_projects: List[Any]
    timeline_months: int
    plan_status: PlanStatus
    progress_percentage: float
    plan_text: Optional[str]
    is_fallback: bool
    session_id: Optional[str]


class PathwayRequest(SQLModelBase):
    """Free-text development pathway for an ad-hoc profile"""
    employee_profile: dict = Field(..., description="Name, current role, experience")
    career_goals: Optional[str] = None
    current_skills: List[Any] = Field(default_factory=list)
    industry_trends: Optional[str] = None


class DevelopmentPlanRequest(SQLModelBase):
    target_role: Optional[str] = None
    timeline_months: Optional[int] = Field(None, ge=1, le=60)


class BulkPathwayRequest(SQLModelBase):
    pathway_type: Literal["company", "department", "role", "all"]
    identifier: Optional[str] = None
    employee_ids: Optional[List[str]] = None
