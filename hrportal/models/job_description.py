"""
Job description model

Includes the review/approval lifecycle. Status only moves along
JD_TRANSITIONS; everything else is rejected by the API layer.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class JDStatus(str, Enum):
    """Job description status"""
    DRAFT = "draft"
    REVIEW = "review"
    APPROVED = "approved"
    PUBLISHED = "published"


# current status -> statuses it may move to
JD_TRANSITIONS: Dict[JDStatus, set] = {
    JDStatus.DRAFT: {JDStatus.REVIEW, JDStatus.APPROVED},
    JDStatus.REVIEW: {JDStatus.APPROVED},
    JDStatus.APPROVED: {JDStatus.PUBLISHED},
    JDStatus.PUBLISHED: set(),
}


def can_transition(current: str, target: str) -> bool:
    """Whether a JD in `current` may move to `target`"""
    try:
        return JDStatus(target) in JD_TRANSITIONS[JDStatus(current)]
    except ValueError:
        return False


class EmploymentType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"


class LocationType(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"
    HYBRID = "hybrid"


# ==================== Base fields ====================

class JobDescriptionBase(SQLModelBase):
    """Job description fields"""
    title: str = Field(..., min_length=1, max_length=200, index=True, description="Title")
    summary: Optional[str] = Field(None, description="Summary")
    responsibilities: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Responsibilities")
    required_qualifications: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Required qualifications")
    preferred_qualifications: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Preferred qualifications")
    required_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Required skills")
    preferred_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Preferred skills")
    benefits: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Benefits")
    salary_range_min: Optional[float] = Field(None, ge=0, description="Salary range min")
    salary_range_max: Optional[float] = Field(None, ge=0, description="Salary range max")
    currency: str = Field("IDR", max_length=10, description="Currency")
    experience_level: Optional[str] = Field(None, max_length=50, description="Experience level")
    education_level: Optional[str] = Field(None, max_length=100, description="Education level")
    employment_type: EmploymentType = Field(EmploymentType.FULL_TIME, description="Employment type")
    location_type: LocationType = Field(LocationType.OFFICE, description="Location type")
    tone: str = Field("professional", max_length=50, description="Writing tone")
    language: str = Field("en", max_length=10, description="Language")
    full_description: Optional[str] = Field(None, description="Full formatted description")
    standard_role_id: Optional[str] = Field(None, foreign_key="standard_roles.id", index=True)


# ==================== Table ====================

class JobDescription(JobDescriptionBase, TimestampMixin, IDMixin, table=True):
    """Job description table"""
    __tablename__ = "job_descriptions"

    status: str = Field(default=JDStatus.DRAFT.value, max_length=20, index=True, description="Lifecycle status")
    ai_generated: bool = Field(default=False, description="Generated by AI")
    ai_prompt_used: Optional[str] = Field(default=None, description="Prompt used, truncated")
    template_version: Optional[str] = Field(default=None, max_length=50)
    keywords: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    job_identity: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    key_contacts: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    competencies: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    generated_by: Optional[str] = Field(default=None, description="Creator user id")
    reviewed_by: Optional[str] = Field(default=None)
    approved_by: Optional[str] = Field(default=None)
    approved_at: Optional[datetime] = Field(default=None)
    published_at: Optional[datetime] = Field(default=None)

    def __repr__(self) -> str:
        return f"<JobDescription(id={self.id}, title={self.title}, status={self.status})>"


# ==================== Request schemas ====================

class JobDescriptionCreate(JobDescriptionBase):
    """Create job description (always starts as draft)"""
    pass


class JobDescriptionUpdate(SQLModelBase):
    """Update job description - status is changed through the lifecycle endpoints only"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    summary: Optional[str] = None
    responsibilities: Optional[List[str]] = None
    required_qualifications: Optional[List[str]] = None
    preferred_qualifications: Optional[List[str]] = None
    required_skills: Optional[List[str]] = None
    preferred_skills: Optional[List[str]] = None
    benefits: Optional[List[str]] = None
    salary_range_min: Optional[float] = Field(None, ge=0)
    salary_range_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, max_length=10)
    experience_level: Optional[str] = Field(None, max_length=50)
    education_level: Optional[str] = Field(None, max_length=100)
    employment_type: Optional[EmploymentType] = None
    location_type: Optional[LocationType] = None
    full_description: Optional[str] = None
    standard_role_id: Optional[str] = None

    model_config = {"extra": "forbid", "str_strip_whitespace": True}


class JDGenerateRequest(SQLModelBase):
    """AI job description generation request"""
    role_title: str = Field(..., max_length=200, description="Role title")
    department: Optional[str] = None
    level: Optional[str] = None
    standard_role_id: Optional[str] = None
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    location_status: LocationType = LocationType.OFFICE
    salary_range: Optional[str] = None
    requirements: Optional[str] = None
    custom_instructions: Optional[str] = None
    tone: str = "professional"
    language: str = "en"


class JDUpdateRequest(SQLModelBase):
    """AI rewrite of an existing job description"""
    update_request: str = Field(..., min_length=1, description="What to change")
    current_content: Optional[str] = Field(None, description="Override of the stored content")
    save: bool = Field(False, description="Persist the result into full_description")


# ==================== Response schemas ====================

class JobDescriptionResponse(TimestampResponse):
    """Job description detail"""
    title: str
    summary: Optional[str]
    responsibilities: List[str]
    required_qualifications: List[str]
    preferred_qualifications: List[str]
    required_skills: List[str]
    preferred_skills: List[str]
    benefits: List[str]
    salary_range_min: Optional[float]
    salary_range_max: Optional[float]
    currency: str
    experience_level: Optional[str]
    education_level: Optional[str]
    employment_type: EmploymentType
    location_type: LocationType
    tone: str
    language: str
    full_description: Optional[str]
    standard_role_id: Optional[str]
    status: str
    ai_generated: bool
    template_version: Optional[str]
    keywords: List[str]
    job_identity: Dict[str, Any]
    key_contacts: Dict[str, Any]
    competencies: Dict[str, Any]
    generated_by: Optional[str]
    reviewed_by: Optional[str]
    approved_by: Optional[str]
    approved_at: Optional[datetime]
    published_at: Optional[datetime]


class JobDescriptionListResponse(TimestampResponse):
    """Job description list item"""
    title: str
    experience_level: Optional[str]
    standard_role_id: Optional[str]
    status: str
    ai_generated: bool
