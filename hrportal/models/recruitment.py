"""
Recruitment models

Job postings, candidates, applications, interviews and offers
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional, List
from pydantic import field_validator
from sqlmodel import Field, Column, JSON, UniqueConstraint

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse, as_utc, utcnow


class JobStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"


class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    OFFERED = "offered"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class OfferStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


# ==================== Job ====================

class JobBase(SQLModelBase):
    title: str = Field(..., min_length=1, max_length=200, index=True)
    description: Optional[str] = None
    department: Optional[str] = Field(None, max_length=200)
    location: Optional[str] = Field(None, max_length=200)
    employment_type: Optional[str] = Field("full_time", max_length=30)
    experience_level: Optional[str] = Field(None, max_length=50)
    requirements: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field("IDR", max_length=10)
    remote_allowed: bool = False
    job_description_id: Optional[str] = Field(None, foreign_key="job_descriptions.id")
    status: JobStatus = JobStatus.DRAFT


class Job(JobBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "jobs"

    created_by: Optional[str] = None


class JobCreate(JobBase):
    pass


class JobUpdate(SQLModelBase):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = None
    experience_level: Optional[str] = None
    requirements: Optional[List[str]] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    remote_allowed: Optional[bool] = None
    job_description_id: Optional[str] = None
    status: Optional[JobStatus] = None


class JobResponse(TimestampResponse):
    title: str
    description: Optional[str]
    department: Optional[str]
    location: Optional[str]
    employment_type: Optional[str]
    experience_level: Optional[str]
    requirements: List[str]
    salary_min: Optional[float]
    salary_max: Optional[float]
    currency: Optional[str]
    remote_allowed: bool
    job_description_id: Optional[str]
    status: JobStatus
    created_by: Optional[str]


# ==================== Candidate ====================

class CandidateBase(SQLModelBase):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    email: str = Field(..., min_length=3, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    current_location: Optional[str] = Field(None, max_length=200)
    experience_years: Optional[int] = Field(None, ge=0)
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    expected_salary: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field("IDR", max_length=10)
    availability_date: Optional[date] = None
    willing_to_relocate: bool = False
    resume_text: Optional[str] = None
    resume_url: Optional[str] = None


class Candidate(CandidateBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "candidates"

    email: str = Field(..., max_length=200, unique=True, index=True)


class CandidateCreate(CandidateBase):
    pass


class CandidateUpdate(SQLModelBase):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = None
    phone: Optional[str] = None
    current_location: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0)
    skills: Optional[List[str]] = None
    expected_salary: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    availability_date: Optional[date] = None
    willing_to_relocate: Optional[bool] = None
    resume_text: Optional[str] = None
    resume_url: Optional[str] = None


class CandidateResponse(TimestampResponse):
    first_name: str
    last_name: str
    email: str
    phone: Optional[str]
    current_location: Optional[str]
    experience_years: Optional[int]
    skills: List[str]
    expected_salary: Optional[float]
    currency: Optional[str]
    availability_date: Optional[date]
    willing_to_relocate: bool
    resume_url: Optional[str]


# ==================== Application ====================

class JobApplication(TimestampMixin, IDMixin, table=True):
    __tablename__ = "job_applications"
    __table_args__ = (UniqueConstraint("job_id", "candidate_id"),)

    job_id: str = Field(..., foreign_key="jobs.id", index=True)
    candidate_id: str = Field(..., foreign_key="candidates.id", index=True)
    cover_letter: Optional[str] = None
    status: str = Field(default=ApplicationStatus.APPLIED.value, max_length=20, index=True)
    applied_at: datetime = Field(default_factory=utcnow)
    screening_score: Optional[float] = Field(default=None, ge=0, le=100)
    screening_notes: Optional[str] = None


class JobApplicationCreate(SQLModelBase):
    job_id: str
    candidate_id: str
    cover_letter: Optional[str] = None


class JobApplicationUpdate(SQLModelBase):
    status: Optional[ApplicationStatus] = None
    screening_score: Optional[float] = Field(None, ge=0, le=100)
    screening_notes: Optional[str] = None


class JobApplicationResponse(TimestampResponse):
    job_id: str
    candidate_id: str
    cover_letter: Optional[str]
    status: str
    applied_at: datetime
    screening_score: Optional[float]
    screening_notes: Optional[str]

    _applied_at_utc = field_validator("applied_at")(as_utc)


# ==================== Interview ====================

class InterviewBase(SQLModelBase):
    application_id: str = Field(..., foreign_key="job_applications.id", index=True)
    type: str = Field("video", max_length=30)
    scheduled_at: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(60, ge=1)
    interviewer_id: Optional[str] = None
    meeting_url: Optional[str] = None
    notes: Optional[str] = None

    _scheduled_at_utc = field_validator("scheduled_at")(as_utc)


class Interview(InterviewBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "interviews"

    status: str = Field(default=InterviewStatus.SCHEDULED.value, max_length=20)
    feedback: Optional[str] = None
    interviewer_score: Optional[float] = Field(default=None, ge=0, le=100)


class InterviewCreate(InterviewBase):
    pass


class InterviewUpdate(SQLModelBase):
    scheduled_at: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, ge=1)
    interviewer_id: Optional[str] = None
    meeting_url: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[InterviewStatus] = None
    feedback: Optional[str] = None
    interviewer_score: Optional[float] = Field(None, ge=0, le=100)

    _scheduled_at_utc = field_validator("scheduled_at")(as_utc)


class InterviewResponse(TimestampResponse):
    application_id: str
    type: str
    scheduled_at: Optional[datetime]
    duration_minutes: Optional[int]
    interviewer_id: Optional[str]
    meeting_url: Optional[str]
    notes: Optional[str]
    status: str
    feedback: Optional[str]
    interviewer_score: Optional[float]

    _scheduled_at_utc = field_validator("scheduled_at")(as_utc)


# ==================== Offer ====================

class OfferBase(SQLModelBase):
    application_id: str = Field(..., foreign_key="job_applications.id", index=True)
    salary_amount: float = Field(..., ge=0)
    currency: str = Field("IDR", max_length=10)
    benefits: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    start_date: Optional[date] = None
    expires_at: Optional[datetime] = None

    _expires_at_utc = field_validator("expires_at")(as_utc)


class Offer(OfferBase, TimestampMixin, IDMixin, table=True):
    __tablename__ = "offers"

    status: str = Field(default=OfferStatus.DRAFT.value, max_length=20)
    sent_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None


class OfferCreate(OfferBase):
    pass


class OfferUpdate(SQLModelBase):
    salary_amount: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    benefits: Optional[List[str]] = None
    start_date: Optional[date] = None
    expires_at: Optional[datetime] = None
    status: Optional[OfferStatus] = None

    _expires_at_utc = field_validator("expires_at")(as_utc)


class OfferResponse(TimestampResponse):
    application_id: str
    salary_amount: float
    currency: str
    benefits: List[str]
    start_date: Optional[date]
    expires_at: Optional[datetime]
    status: str
    sent_at: Optional[datetime]
    responded_at: Optional[datetime]

    _offer_dates_utc = field_validator("expires_at", "sent_at", "responded_at")(as_utc)
