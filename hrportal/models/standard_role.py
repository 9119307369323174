"""
Standard role models

Canonical roles, the raw uploaded roles they are derived from, and the
mappings between the two
"""
from enum import Enum
from typing import Optional, List
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class MappingStatus(str, Enum):
    """Role mapping status"""
    AUTO_MAPPED = "auto_mapped"
    MANUAL_REVIEW = "manual_review"
    APPROVED = "approved"
    REJECTED = "rejected"


# Mappings at or above this confidence are applied without review
AUTO_MAP_CONFIDENCE = 80


# ==================== Standard role ====================

class StandardRoleBase(SQLModelBase):
    """Standard role fields"""
    role_title: str = Field(..., min_length=1, max_length=200, index=True, description="Role title")
    department: Optional[str] = Field(None, max_length=200, description="Department")
    job_family: str = Field("General", max_length=100, description="Job family")
    role_level: str = Field("mid", max_length=50, description="Role level")
    role_category: str = Field("General", max_length=100, description="Role category")
    standard_description: Optional[str] = Field(None, description="Standard description")
    core_responsibilities: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Core responsibilities")
    required_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Required skills")
    education_requirements: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Education requirements")
    experience_range_min: int = Field(0, ge=0, description="Minimum years of experience")
    experience_range_max: int = Field(5, ge=0, description="Maximum years of experience")
    keywords: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="Search keywords")
    industry_alignment: str = Field("Telecommunications", max_length=100, description="Industry")


class StandardRole(StandardRoleBase, TimestampMixin, IDMixin, table=True):
    """Standard role table"""
    __tablename__ = "standard_roles"

    is_active: bool = Field(default=True, index=True, description="Active flag")
    version: int = Field(default=1, description="Version")
    created_by: Optional[str] = Field(default=None, description="Creator user id")

    def __repr__(self) -> str:
        return f"<StandardRole(id={self.id}, title={self.role_title})>"


class StandardRoleCreate(StandardRoleBase):
    """Create standard role"""
    pass


class StandardRoleUpdate(SQLModelBase):
    """Update standard role - every field optional"""
    role_title: Optional[str] = Field(None, min_length=1, max_length=200)
    department: Optional[str] = Field(None, max_length=200)
    job_family: Optional[str] = Field(None, max_length=100)
    role_level: Optional[str] = Field(None, max_length=50)
    role_category: Optional[str] = Field(None, max_length=100)
    standard_description: Optional[str] = None
    core_responsibilities: Optional[List[str]] = None
    required_skills: Optional[List[str]] = None
    education_requirements: Optional[List[str]] = None
    experience_range_min: Optional[int] = Field(None, ge=0)
    experience_range_max: Optional[int] = Field(None, ge=0)
    keywords: Optional[List[str]] = None
    industry_alignment: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None


class StandardRoleResponse(TimestampResponse):
    """Standard role detail"""
    role_title: str
    department: Optional[str]
    job_family: str
    role_level: str
    role_category: str
    standard_description: Optional[str]
    core_responsibilities: List[str]
    required_skills: List[str]
    education_requirements: List[str]
    experience_range_min: int
    experience_range_max: int
    keywords: List[str]
    industry_alignment: str
    is_active: bool
    version: int
    employee_count: int = Field(0, description="Employees assigned to this role")


# ==================== Uploaded role ====================

class UploadedRole(TimestampMixin, IDMixin, table=True):
    """Raw role row from an XL or SMART catalogue upload"""
    __tablename__ = "uploaded_roles"

    session_id: str = Field(..., foreign_key="upload_sessions.id", index=True)
    source_company: str = Field(..., max_length=20, description="xl or smart")
    role_code: Optional[str] = Field(default=None, max_length=100)
    role_title: str = Field(..., max_length=300)
    department: Optional[str] = Field(default=None, max_length=200)
    role_family: Optional[str] = Field(default=None, max_length=200)
    seniority_band: Optional[str] = Field(default=None, max_length=100)
    role_purpose: Optional[str] = None
    core_responsibilities: Optional[str] = None
    required_skills: Optional[str] = None
    preferred_skills: Optional[str] = None
    certifications: Optional[str] = None
    tools_platforms: Optional[str] = None
    experience_min_years: Optional[int] = None
    education: Optional[str] = None
    location: Optional[str] = None
    role_variant: Optional[str] = None
    alternate_titles: Optional[str] = None


class UploadedRoleResponse(TimestampResponse):
    """Uploaded role row"""
    session_id: str
    source_company: str
    role_code: Optional[str]
    role_title: str
    department: Optional[str]
    role_family: Optional[str]
    seniority_band: Optional[str]
    experience_min_years: Optional[int]


# ==================== Role mapping ====================

class RoleMapping(TimestampMixin, IDMixin, table=True):
    """Original role title mapped onto a standard role"""
    __tablename__ = "role_mappings"

    original_role_title: str = Field(..., max_length=300, index=True)
    original_department: Optional[str] = Field(default=None, max_length=200)
    original_level: Optional[str] = Field(default=None, max_length=100)
    standardized_role_title: str = Field(..., max_length=200)
    standardized_department: Optional[str] = Field(default=None, max_length=200)
    standardized_level: Optional[str] = Field(default=None, max_length=50)
    job_family: Optional[str] = Field(default=None, max_length=100)
    standard_role_id: Optional[str] = Field(default=None, foreign_key="standard_roles.id", index=True)
    mapping_confidence: float = Field(default=0, ge=0, le=100)
    mapping_status: str = Field(default=MappingStatus.MANUAL_REVIEW.value, max_length=30)
    requires_manual_review: bool = Field(default=True)
    catalog_id: Optional[str] = Field(default=None, foreign_key="upload_sessions.id", index=True)
    created_by: Optional[str] = None


class RoleMappingUpdate(SQLModelBase):
    """Manual review of a mapping"""
    standard_role_id: Optional[str] = None
    mapping_status: Optional[MappingStatus] = None


class RoleMappingResponse(TimestampResponse):
    """Role mapping"""
    original_role_title: str
    original_department: Optional[str]
    original_level: Optional[str]
    standardized_role_title: str
    standardized_department: Optional[str]
    standardized_level: Optional[str]
    job_family: Optional[str]
    standard_role_id: Optional[str]
    mapping_confidence: float
    mapping_status: str
    requires_manual_review: bool
    catalog_id: Optional[str]


def mapping_status_for(confidence: float) -> MappingStatus:
    """Status a mapping gets from its confidence score"""
    if confidence >= AUTO_MAP_CONFIDENCE:
        return MappingStatus.AUTO_MAPPED
    return MappingStatus.MANUAL_REVIEW
