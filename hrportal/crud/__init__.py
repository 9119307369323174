"""
CRUD operations
"""
from .employee import employee_crud
from .role import standard_role_crud, uploaded_role_crud, role_mapping_crud
from .job_description import job_description_crud
from .skill import skill_crud, employee_skill_crud, skill_assessment_crud
from .certification import employee_certification_crud
from .session import upload_session_crud, analysis_result_crud
from .mobility import employee_move_crud, development_plan_crud
from .recruitment import job_crud, candidate_crud, job_application_crud, interview_crud, offer_crud

__all__ = [
    "employee_crud",
    "standard_role_crud",
    "uploaded_role_crud",
    "role_mapping_crud",
    "job_description_crud",
    "skill_crud",
    "employee_skill_crud",
    "skill_assessment_crud",
    "employee_certification_crud",
    "upload_session_crud",
    "analysis_result_crud",
    "employee_move_crud",
    "development_plan_crud",
    "job_crud",
    "candidate_crud",
    "job_application_crud",
    "interview_crud",
    "offer_crud",
]
