"""
Upload session model

Tracks one bulk job; background workers write progress counters into
ai_analysis after every batch and clients poll them.
"""
from enum import Enum
from typing import Optional, List, Dict, Any
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class SessionType(str, Enum):
    EMPLOYEE_UPLOAD = "employee_upload"
    ROLE_UPLOAD = "role_upload"
    ROLE_ASSIGNMENT = "role_assignment"
    SKILLS_ASSESSMENT = "skills_assessment"
    MOBILITY_PLANNING = "mobility_planning"
    DEVELOPMENT_PLANNING = "development_planning"


class SessionStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    UPLOADED = "uploaded"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    ERROR = "error"
    FAILED = "failed"


TERMINAL_STATUSES = {
    SessionStatus.UPLOADED.value,
    SessionStatus.COMPLETED.value,
    SessionStatus.COMPLETED_WITH_ERRORS.value,
    SessionStatus.ERROR.value,
    SessionStatus.FAILED.value,
}


class UploadSession(TimestampMixin, IDMixin, table=True):
    """Bulk job session"""
    __tablename__ = "upload_sessions"

    session_name: str = Field(..., max_length=200)
    session_type: str = Field(default=SessionType.EMPLOYEE_UPLOAD.value, max_length=50, index=True)
    file_names: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    total_rows: int = Field(default=0, ge=0)
    status: str = Field(default=SessionStatus.PENDING.value, max_length=30, index=True)
    ai_analysis: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    error_message: Optional[str] = None
    created_by: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class UploadSessionResponse(TimestampResponse):
    session_name: str
    session_type: str
    file_names: List[str]
    total_rows: int
    status: str
    ai_analysis: Dict[str, Any]
    error_message: Optional[str]
    created_by: Optional[str]


class ProgressCounters(SQLModelBase):
    total: int = 0
    processed: int = 0
    assigned: int = 0
    errors: int = 0


class SessionProgressResponse(SQLModelBase):
    """What the polling client reads"""
    session_id: str
    status: str
    progress: ProgressCounters
    error_message: Optional[str] = None
    is_terminal: bool = False


class JobStartedResponse(SQLModelBase):
    """Returned by every bulk start call"""
    session_id: str
    status: str
    total: int
    message: str


# ==================== Upload requests ====================

class EmployeeUploadRequest(SQLModelBase):
    """Roster rows already parsed client-side, keyed by spreadsheet header"""
    employees: List[Dict[str, Any]] = Field(..., description="Rows keyed by header")
    session_name: Optional[str] = Field(None, max_length=200)
    source_company: str = Field("xlsmart", max_length=50, description="Used when a row has no company column")


class RoleUploadRequest(SQLModelBase):
    """XL and SMART role catalogue rows"""
    session_name: Optional[str] = Field(None, max_length=200)
    xl_roles: List[Dict[str, Any]] = Field(default_factory=list)
    smart_roles: List[Dict[str, Any]] = Field(default_factory=list)
