"""
Skill models

Skills catalogue, per-employee skill ratings and AI skill assessments
"""
from typing import Optional, List, Dict, Any, Literal
from sqlmodel import Field, Column, JSON, UniqueConstraint

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


# ==================== Skills master ====================

class SkillBase(SQLModelBase):
    """Skill fields"""
    name: str = Field(..., min_length=1, max_length=200, description="Skill name")
    category: Optional[str] = Field(None, max_length=100, index=True, description="Category")
    description: Optional[str] = Field(None, description="Description")


class SkillMaster(SkillBase, TimestampMixin, IDMixin, table=True):
    """Skills catalogue table"""
    __tablename__ = "skills_master"

    name: str = Field(..., max_length=200, unique=True, index=True)

    def __repr__(self) -> str:
        return f"<SkillMaster(id={self.id}, name={self.name})>"


class SkillCreate(SkillBase):
    """Create skill"""
    pass


class SkillUpdate(SQLModelBase):
    """Update skill"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class SkillResponse(TimestampResponse):
    """Skill"""
    name: str
    category: Optional[str]
    description: Optional[str]


# ==================== Employee skills ====================

class EmployeeSkillBase(SQLModelBase):
    employee_id: str = Field(..., foreign_key="employees.id", index=True)
    skill_id: str = Field(..., foreign_key="skills_master.id", index=True)
    proficiency_level: int = Field(1, ge=1, le=5, description="Proficiency 1-5")
    years_experience: Optional[float] = Field(None, ge=0)


class EmployeeSkill(EmployeeSkillBase, TimestampMixin, IDMixin, table=True):
    """Employee skill rating table"""
    __tablename__ = "employee_skills"
    __table_args__ = (UniqueConstraint("employee_id", "skill_id"),)


class EmployeeSkillCreate(EmployeeSkillBase):
    pass


class EmployeeSkillUpdate(SQLModelBase):
    proficiency_level: Optional[int] = Field(None, ge=1, le=5)
    years_experience: Optional[float] = Field(None, ge=0)


class EmployeeSkillResponse(TimestampResponse):
    employee_id: str
    skill_id: str
    proficiency_level: int
    years_experience: Optional[float]
    skill_name: Optional[str] = None


# ==================== Skill assessments ====================

class SkillAssessment(TimestampMixin, IDMixin, table=True):
    """AI skill assessment of one employee"""
    __tablename__ = "skill_assessments"

    employee_id: str = Field(..., foreign_key="employees.id", index=True)
    job_description_id: Optional[str] = Field(default=None, foreign_key="job_descriptions.id")
    overall_match_percentage: float = Field(default=0, ge=0, le=100)
    skill_gaps: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    recommendations: Optional[str] = None
    next_role_recommendations: List[Any] = Field(default_factory=list, sa_column=Column(JSON))
    ai_analysis: Optional[str] = None
    is_fallback: bool = Field(default=False, description="Stored from the fallback result")
    session_id: Optional[str] = Field(default=None, foreign_key="upload_sessions.id", index=True)
    assessed_by: Optional[str] = None


class SkillAssessmentRequest(SQLModelBase):
    """Single employee assessment"""
    job_description_id: Optional[str] = None


class BulkAssessmentRequest(SQLModelBase):
    """Bulk assessment by company, department, role or everyone"""
    assessment_type: Literal["company", "department", "role", "all"]
    identifier: Optional[str] = Field(None, description="Company, department or role to select")
    target_job_description_id: Optional[str] = None
    employee_ids: Optional[List[str]] = Field(None, description="Explicit selection overriding the filter")


class SkillAssessmentResponse(TimestampResponse):
    employee_id: str
    job_description_id: Optional[str]
    overall_match_percentage: float
    skill_gaps: List[Dict[str, Any]]
    recommendations: Optional[str]
    next_role_recommendations: List[Any]
    is_fallback: bool
    session_id: Optional[str]
