"""
Workforce intelligence: organization-wide analyses beyond job descriptions.

Four areas share the job description intelligence flow, each with its own
prompt file and four analysis types:

- succession_planning: leadership pipeline, readiness, high potentials, gaps
- diversity_inclusion: bias, representation, inclusion, pay equity
- role_intelligence: role evolution, redundancy, future roles, competitiveness
- learning_development: personalized learning, skills, training, strategy

The prompt file decides which context rows each analysis type sees.
"""
from __future__ import annotations

import copy
import json
from typing import Dict, Any, List, Optional, Sequence
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.core.exceptions import BadRequestException, NotFoundException
from hrportal.crud import (
    analysis_result_crud,
    development_plan_crud,
    employee_crud,
    job_description_crud,
    skill_assessment_crud,
    standard_role_crud,
)
from hrportal.models.analysis_result import AnalysisType, WorkforceAnalysisRequest
from hrportal.models.employee import Employee
from .llm_client import get_llm_client
from .prompts import get_prompt, get_config

ANALYSIS_AREAS: Dict[str, tuple] = {
    "succession_planning": (
        AnalysisType.LEADERSHIP_PIPELINE.value,
        AnalysisType.SUCCESSION_READINESS.value,
        AnalysisType.HIGH_POTENTIAL_IDENTIFICATION.value,
        AnalysisType.LEADERSHIP_GAP_ANALYSIS.value,
    ),
    "diversity_inclusion": (
        AnalysisType.BIAS_DETECTION.value,
        AnalysisType.DIVERSITY_METRICS.value,
        AnalysisType.INCLUSION_SENTIMENT.value,
        AnalysisType.PAY_EQUITY_ANALYSIS.value,
    ),
    "role_intelligence": (
        AnalysisType.ROLE_EVOLUTION.value,
        AnalysisType.REDUNDANCY_ANALYSIS.value,
        AnalysisType.FUTURE_PREDICTION.value,
        AnalysisType.COMPETITIVENESS_SCORING.value,
    ),
    "learning_development": (
        AnalysisType.PERSONALIZED_LEARNING.value,
        AnalysisType.SKILLS_DEVELOPMENT.value,
        AnalysisType.TRAINING_EFFECTIVENESS.value,
        AnalysisType.LEARNING_STRATEGY.value,
    ),
}

FUNCTION_NAMES = {
    "succession_planning": "ai-succession-planning",
    "diversity_inclusion": "ai-diversity-inclusion",
    "role_intelligence": "ai-advanced-role-intelligence",
    "learning_development": "ai-learning-development",
}

# positions and role titles that count as leadership
LEADERSHIP_KEYWORDS = ("manager", "director", "lead")


def _employee_context(employee: Employee, with_salary: bool = False) -> Dict[str, Any]:
    row = {
        "id": employee.id,
        "name": employee.full_name,
        "department": employee.current_department,
        "role": employee.current_position,
        "level": employee.current_level,
        "performance": employee.performance_rating,
        "experience": employee.years_of_experience,
        "skills": employee.skills,
        "certifications": employee.certifications,
        "hire_date": employee.hire_date,
    }
    if with_salary:
        row["salary"] = employee.salary
        row["currency"] = employee.currency
    return row


def _role_context(role) -> Dict[str, Any]:
    return {
        "title": role.role_title,
        "department": role.department,
        "level": role.role_level,
        "job_family": role.job_family,
        "skills": role.required_skills,
        "responsibilities": role.core_responsibilities,
    }


def _jd_context(jd) -> Dict[str, Any]:
    return {
        "role": jd.title,
        "summary": jd.summary,
        "requirements": jd.required_qualifications,
        "responsibilities": jd.responsibilities,
    }


def _assessment_context(assessment) -> Dict[str, Any]:
    return {
        "employee_id": assessment.employee_id,
        "overall_match": assessment.overall_match_percentage,
        "skill_gaps": assessment.skill_gaps,
        "assessed_at": assessment.created_at,
    }


def _plan_context(plan) -> Dict[str, Any]:
    return {
        "employee_id": plan.employee_id,
        "target_role": plan.target_role,
        "development_areas": plan.development_areas,
        "courses": plan.recommended_courses,
        "status": plan.plan_status,
        "progress": plan.progress_percentage,
    }


def _dump(rows: List[Dict[str, Any]]) -> str:
    return json.dumps(rows, ensure_ascii=False, default=str)


def _is_leadership(title: Optional[str]) -> bool:
    title = (title or "").lower()
    return any(keyword in title for keyword in LEADERSHIP_KEYWORDS)


class WorkforceIntelligenceService:
    """Succession, diversity, role intelligence and learning analyses."""

    def __init__(self):
        self._llm = get_llm_client()

    def fallback_for(self, area: str, analysis_type: str, employees: Sequence[Employee]) -> Dict[str, Any]:
        """
        Static result of one analysis type

        Learning fallbacks get a templated plan for the first employees.
        """
        fallback = copy.deepcopy(get_config(area, f"fallbacks.{analysis_type}"))
        if "personalizedPlans" in fallback:
            template = get_config(area, "plan_template")
            fallback["personalizedPlans"] = [
                self._templated_plan(template, employee)
                for employee in list(employees)[:get_config(area, "fallback_plans")]
            ]
        return fallback

    @staticmethod
    def _templated_plan(template: Dict[str, Any], employee: Employee) -> Dict[str, Any]:
        plan = copy.deepcopy(template)
        plan["employeeId"] = employee.id
        plan["currentProfile"] = {
            "role": employee.current_position,
            "experience": employee.years_of_experience,
            **plan.get("currentProfile", {}),
        }
        return plan

    async def _context(
        self,
        db: AsyncSession,
        limits: Dict[str, int],
        request: WorkforceAnalysisRequest,
        focus_employee: Optional[Employee],
    ) -> tuple[Dict[str, str], List[Employee]]:
        """Prompt variables for the sources named in limits, plus the employees used"""
        department = request.department_filter
        prompt_vars: Dict[str, str] = {}
        employees: List[Employee] = []

        for source in ("employees", "compensation"):
            if source in limits:
                employees = await employee_crud.get_for_analysis(
                    db, department=department, limit=limits[source]
                )
                if focus_employee is not None:
                    others = [e for e in employees if e.id != focus_employee.id]
                    employees = [focus_employee] + others[:limits[source] - 1]
                prompt_vars[source] = _dump([
                    _employee_context(e, with_salary=source == "compensation") for e in employees
                ])
        if "leaders" in limits:
            employees = await employee_crud.get_for_analysis(
                db, department=department, title_keywords=LEADERSHIP_KEYWORDS, limit=limits["leaders"]
            )
            prompt_vars["leaders"] = _dump([_employee_context(e) for e in employees])

        if "standard_roles" in limits or "leadership_roles" in limits:
            roles = await standard_role_crud.get_active(db)
            if department:
                roles = [r for r in roles if r.department == department]
            if "standard_roles" in limits:
                prompt_vars["standard_roles"] = _dump(
                    [_role_context(r) for r in roles[:limits["standard_roles"]]]
                )
            if "leadership_roles" in limits:
                leadership = [r for r in roles if _is_leadership(r.role_title)]
                prompt_vars["leadership_roles"] = _dump(
                    [_role_context(r) for r in leadership[:limits["leadership_roles"]]]
                )

        if "job_descriptions" in limits:
            jds = await job_description_crud.get_for_analysis(
                db, department=department, limit=limits["job_descriptions"]
            )
            prompt_vars["job_descriptions"] = _dump([_jd_context(jd) for jd in jds])
        if "skill_assessments" in limits:
            assessments = await skill_assessment_crud.get_multi(db, limit=limits["skill_assessments"])
            prompt_vars["skill_assessments"] = _dump([_assessment_context(a) for a in assessments])
        if "development_plans" in limits:
            plans = await development_plan_crud.get_multi(db, limit=limits["development_plans"])
            prompt_vars["development_plans"] = _dump([_plan_context(p) for p in plans])

        prompt_vars["employee_count"] = str(len(employees))
        return prompt_vars, employees

    async def analyze(
        self,
        db: AsyncSession,
        area: str,
        request: WorkforceAnalysisRequest,
        user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run one analysis of an area

        Returns {analysis_id, analysis_type, total_analyzed, fallback, result}.
        """
        allowed = ANALYSIS_AREAS[area]
        analysis_type = request.analysis_type
        if analysis_type not in allowed:
            raise BadRequestException(
                f"Invalid analysis type: {analysis_type}",
                data={"allowed": list(allowed)},
            )

        focus_employee = None
        if request.employee_id:
            focus_employee = await employee_crud.get(db, request.employee_id)
            if focus_employee is None:
                raise NotFoundException(f"Employee not found: {request.employee_id}")

        limits = get_config(area, f"context.{analysis_type}")
        prompt_vars, employees = await self._context(db, limits, request, focus_employee)
        prompt_vars["focus"] = self._focus(request, focus_employee)

        section = get_config(area, analysis_type)
        system_key = f"{analysis_type}.system" if "system" in section else "system"
        result, is_fallback = await self._llm.complete_json_or_fallback(
            get_prompt(area, system_key),
            get_prompt(area, f"{analysis_type}.user", **prompt_vars),
            fallback=self.fallback_for(area, analysis_type, employees),
        )
        logger.info(
            "{} {} over {} employees finished (fallback={})",
            area, analysis_type, len(employees), is_fallback,
        )

        record = await analysis_result_crud.record(
            db,
            analysis_type=analysis_type,
            function_name=FUNCTION_NAMES[area],
            input_parameters=request.model_dump(exclude_none=True),
            analysis_result=result,
            is_fallback=is_fallback,
            employee_id=focus_employee.id if focus_employee else None,
            created_by=user_id,
        )
        return {
            "analysis_id": record.id,
            "analysis_type": analysis_type,
            "total_analyzed": len(employees),
            "fallback": is_fallback,
            "result": result,
        }

    @staticmethod
    def _focus(request: WorkforceAnalysisRequest, focus_employee: Optional[Employee]) -> str:
        parts = []
        if request.department_filter:
            parts.append(f"Focus on department: {request.department_filter}")
        if request.position_level:
            parts.append(f"Focus on position level: {request.position_level}")
        if request.metric_type:
            parts.append(f"Focus on metric type: {request.metric_type}")
        if request.time_horizon:
            parts.append(f"Time horizon: {request.time_horizon}")
        if focus_employee is not None:
            parts.append(f"Focus on employee: {focus_employee.full_name} ({focus_employee.id})")
        return "\n".join(parts)


_workforce_service: WorkforceIntelligenceService | None = None


def get_workforce_intelligence_service() -> WorkforceIntelligenceService:
    """WorkforceIntelligenceService singleton"""
    global _workforce_service
    if _workforce_service is None:
        _workforce_service = WorkforceIntelligenceService()
    return _workforce_service
