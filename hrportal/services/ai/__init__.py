"""
AI services

Every service talks to the model through the shared LLMClient and loads its
prompts from the YAML files under prompts/
"""
from .llm_client import LLMClient, LLMResponseError, get_llm_client, extract_json
from .job_description import JobDescriptionService, get_job_description_service
from .jd_intelligence import JDIntelligenceService, get_jd_intelligence_service, ANALYSIS_TYPES
from .workforce_intelligence import (
    WorkforceIntelligenceService, get_workforce_intelligence_service, ANALYSIS_AREAS,
)
from .skills_assessment import SkillsAssessmentService, get_skills_assessment_service
from .role_standardization import RoleStandardizationService, get_role_standardization_service
from .role_assignment import RoleAssignmentService, RoleSuggestion, get_role_assignment_service
from .mobility import MobilityService, get_mobility_service, mobility_score
from .development import DevelopmentService, get_development_service

__all__ = [
    # LLM client
    "LLMClient",
    "LLMResponseError",
    "get_llm_client",
    "extract_json",
    # Services
    "JobDescriptionService",
    "get_job_description_service",
    "JDIntelligenceService",
    "get_jd_intelligence_service",
    "ANALYSIS_TYPES",
    "WorkforceIntelligenceService",
    "get_workforce_intelligence_service",
    "ANALYSIS_AREAS",
    "SkillsAssessmentService",
    "get_skills_assessment_service",
    "RoleStandardizationService",
    "get_role_standardization_service",
    "RoleAssignmentService",
    "RoleSuggestion",
    "get_role_assignment_service",
    "MobilityService",
    "get_mobility_service",
    "mobility_score",
    "DevelopmentService",
    "get_development_service",
]
