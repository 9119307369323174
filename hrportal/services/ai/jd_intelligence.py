"""
Job description intelligence: portfolio-level analysis of the stored JDs.

Four analysis types share one flow: load context rows, render the type's
prompt, call the model, fall back to the type's static result when the call
or its JSON fails, and store the outcome as an analysis result.
"""
from __future__ import annotations

import copy
import json
from typing import Dict, Any, List, Optional
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.core.exceptions import BadRequestException
from hrportal.crud import job_description_crud, standard_role_crud, employee_crud, analysis_result_crud
from .llm_client import get_llm_client
from .prompts import get_prompt, get_config

ANALYSIS_TYPES = ("jd_optimization", "market_alignment", "skills_mapping", "compliance_analysis")


def _jd_context(jd) -> Dict[str, Any]:
    return {
        "title": jd.title,
        "status": jd.status,
        "summary": jd.summary,
        "responsibilities": jd.responsibilities,
        "required_qualifications": jd.required_qualifications,
        "required_skills": jd.required_skills,
        "experience_level": jd.experience_level,
        "salary_range": [jd.salary_range_min, jd.salary_range_max],
        "department": (jd.job_identity or {}).get("department"),
    }


def _role_context(role) -> Dict[str, Any]:
    return {
        "role_title": role.role_title,
        "department": role.department,
        "job_family": role.job_family,
        "role_level": role.role_level,
        "required_skills": role.required_skills,
    }


def _employee_context(employee) -> Dict[str, Any]:
    return {
        "role": employee.current_position,
        "skills": employee.skills,
        "experience": employee.years_of_experience,
    }


def _dump(rows: List[Dict[str, Any]]) -> str:
    return json.dumps(rows, ensure_ascii=False, default=str)


class JDIntelligenceService:
    """Portfolio analysis of job descriptions."""

    def __init__(self):
        self._llm = get_llm_client()

    def fallback_for(self, analysis_type: str, total_analyzed: int) -> Dict[str, Any]:
        """Static result of one analysis type"""
        fallback = copy.deepcopy(get_config("jd_intelligence", f"fallbacks.{analysis_type}"))
        if analysis_type == "jd_optimization":
            fallback["summary"]["totalAnalyzed"] = total_analyzed
        return fallback

    async def analyze(
        self,
        db: AsyncSession,
        *,
        analysis_type: str,
        department_filter: Optional[str] = None,
        role_filter: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run one analysis

        Returns {analysis_id, analysis_type, total_analyzed, fallback, result}.
        """
        if analysis_type not in ANALYSIS_TYPES:
            raise BadRequestException(
                f"Invalid analysis type: {analysis_type}",
                data={"allowed": list(ANALYSIS_TYPES)},
            )

        limits = get_config("jd_intelligence", f"context_limits.{analysis_type}")
        job_descriptions = await job_description_crud.get_for_analysis(
            db, department=department_filter, role=role_filter
        )
        prompt_vars = {
            "job_descriptions": _dump([_jd_context(jd) for jd in job_descriptions[:limits["job_descriptions"]]]),
            "focus": self._focus(department_filter, role_filter),
        }
        if "standard_roles" in limits:
            roles = await standard_role_crud.get_active(db)
            prompt_vars["standard_roles"] = _dump([_role_context(r) for r in roles[:limits["standard_roles"]]])
        if "employees" in limits:
            employees = await employee_crud.get_multi(db, limit=limits["employees"])
            prompt_vars["employees"] = _dump([_employee_context(e) for e in employees])

        system_prompt = get_prompt("jd_intelligence", f"{analysis_type}.system")
        user_prompt = get_prompt("jd_intelligence", f"{analysis_type}.user", **prompt_vars)

        result, is_fallback = await self._llm.complete_json_or_fallback(
            system_prompt,
            user_prompt,
            fallback=self.fallback_for(analysis_type, len(job_descriptions)),
        )
        logger.info(
            "JD intelligence {} over {} JDs finished (fallback={})",
            analysis_type, len(job_descriptions), is_fallback,
        )

        record = await analysis_result_crud.record(
            db,
            analysis_type=analysis_type,
            function_name="ai-job-descriptions-intelligence",
            input_parameters={
                "analysis_type": analysis_type,
                "department_filter": department_filter,
                "role_filter": role_filter,
            },
            analysis_result=result,
            is_fallback=is_fallback,
            created_by=user_id,
        )
        return {
            "analysis_id": record.id,
            "analysis_type": analysis_type,
            "total_analyzed": len(job_descriptions),
            "fallback": is_fallback,
            "result": result,
        }

    @staticmethod
    def _focus(department_filter: Optional[str], role_filter: Optional[str]) -> str:
        parts = []
        if department_filter:
            parts.append(f"Focus on department: {department_filter}")
        if role_filter:
            parts.append(f"Focus on role: {role_filter}")
        return "\n".join(parts)


_intelligence_service: JDIntelligenceService | None = None


def get_jd_intelligence_service() -> JDIntelligenceService:
    """JDIntelligenceService singleton"""
    global _intelligence_service
    if _intelligence_service is None:
        _intelligence_service = JDIntelligenceService()
    return _intelligence_service
