"""
SQLModel models

Table models and their request/response schemas live side by side
"""
from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse
from .upload_session import (
    UploadSession, UploadSessionResponse, SessionProgressResponse, ProgressCounters,
    JobStartedResponse, SessionType, SessionStatus, TERMINAL_STATUSES,
    EmployeeUploadRequest, RoleUploadRequest,
)
from .standard_role import (
    StandardRole, StandardRoleCreate, StandardRoleUpdate, StandardRoleResponse,
    UploadedRole, UploadedRoleResponse,
    RoleMapping, RoleMappingUpdate, RoleMappingResponse, MappingStatus, mapping_status_for
)
from .employee import (
    Employee, EmployeeCreate, EmployeeUpdate, EmployeeResponse, EmployeeListResponse,
    RoleAssignmentStatus
)
from .job_description import (
    JobDescription, JobDescriptionCreate, JobDescriptionUpdate, JobDescriptionResponse,
    JobDescriptionListResponse, JDGenerateRequest, JDUpdateRequest,
    JDStatus, JD_TRANSITIONS, can_transition
)
from .skill import (
    SkillMaster, SkillCreate, SkillUpdate, SkillResponse,
    EmployeeSkill, EmployeeSkillCreate, EmployeeSkillUpdate, EmployeeSkillResponse,
    SkillAssessment, SkillAssessmentRequest, BulkAssessmentRequest, SkillAssessmentResponse
)
from .certification import (
    EmployeeCertification, EmployeeCertificationCreate, EmployeeCertificationUpdate,
    EmployeeCertificationResponse,
)
from .analysis_result import (
    AnalysisResult, AnalysisResultResponse, AnalysisType, AnalysisStatus,
    JDIntelligenceRequest, WorkforceAnalysisRequest,
)
from .employee_move import (
    EmployeeMove, EmployeeMoveCreate, EmployeeMoveResponse, BulkMobilityRequest, MoveType, MoveStatus,
)
from .development_plan import (
    DevelopmentPlan, DevelopmentPlanCreate, DevelopmentPlanUpdate, DevelopmentPlanResponse,
    PathwayRequest, DevelopmentPlanRequest, BulkPathwayRequest, PlanStatus
)
from .recruitment import (
    Job, JobCreate, JobUpdate, JobResponse, JobStatus,
    Candidate, CandidateCreate, CandidateUpdate, CandidateResponse,
    JobApplication, JobApplicationCreate, JobApplicationUpdate, JobApplicationResponse, ApplicationStatus,
    Interview, InterviewCreate, InterviewUpdate, InterviewResponse, InterviewStatus,
    Offer, OfferCreate, OfferUpdate, OfferResponse, OfferStatus
)

__all__ = [
    # Base
    "SQLModelBase",
    "TimestampMixin",
    "IDMixin",
    "TimestampResponse",
    # Upload session
    "UploadSession",
    "UploadSessionResponse",
    "SessionProgressResponse",
    "ProgressCounters",
    "JobStartedResponse",
    "EmployeeUploadRequest",
    "RoleUploadRequest",
    "SessionType",
    "SessionStatus",
    "TERMINAL_STATUSES",
    # Roles
    "StandardRole",
    "StandardRoleCreate",
    "StandardRoleUpdate",
    "StandardRoleResponse",
    "UploadedRole",
    "UploadedRoleResponse",
    "RoleMapping",
    "RoleMappingUpdate",
    "RoleMappingResponse",
    "MappingStatus",
    "mapping_status_for",
    # Employee
    "Employee",
    "EmployeeCreate",
    "EmployeeUpdate",
    "EmployeeResponse",
    "EmployeeListResponse",
    "RoleAssignmentStatus",
    # Job description
    "JobDescription",
    "JobDescriptionCreate",
    "JobDescriptionUpdate",
    "JobDescriptionResponse",
    "JobDescriptionListResponse",
    "JDGenerateRequest",
    "JDUpdateRequest",
    "JDStatus",
    "JD_TRANSITIONS",
    "can_transition",
    # Skills
    "SkillMaster",
    "SkillCreate",
    "SkillUpdate",
    "SkillResponse",
    "EmployeeSkill",
    "EmployeeSkillCreate",
    "EmployeeSkillUpdate",
    "EmployeeSkillResponse",
    "SkillAssessment",
    "SkillAssessmentRequest",
    "BulkAssessmentRequest",
    "SkillAssessmentResponse",
    # Certifications
    "EmployeeCertification",
    "EmployeeCertificationCreate",
    "EmployeeCertificationUpdate",
    "EmployeeCertificationResponse",
    # Analysis
    "AnalysisResult",
    "AnalysisResultResponse",
    "AnalysisType",
    "AnalysisStatus",
    "JDIntelligenceRequest",
    "WorkforceAnalysisRequest",
    # Moves
    "EmployeeMove",
    "EmployeeMoveCreate",
    "EmployeeMoveResponse",
    "BulkMobilityRequest",
    "MoveType",
    "MoveStatus",
    # Development
    "DevelopmentPlan",
    "DevelopmentPlanCreate",
    "DevelopmentPlanUpdate",
    "DevelopmentPlanResponse",
    "PathwayRequest",
    "DevelopmentPlanRequest",
    "BulkPathwayRequest",
    "PlanStatus",
    # Recruitment
    "Job",
    "JobCreate",
    "JobUpdate",
    "JobResponse",
    "JobStatus",
    "Candidate",
    "CandidateCreate",
    "CandidateUpdate",
    "CandidateResponse",
    "JobApplication",
    "JobApplicationCreate",
    "JobApplicationUpdate",
    "JobApplicationResponse",
    "ApplicationStatus",
    "Interview",
    "InterviewCreate",
    "InterviewUpdate",
    "InterviewResponse",
    "InterviewStatus",
    "Offer",
    "OfferCreate",
    "OfferUpdate",
    "OfferResponse",
    "OfferStatus",
]
