"""
Skills assessment service: scores one employee against a target JD or
their general progression.
"""
from __future__ import annotations

import copy
from typing import Dict, Any, Optional, Tuple
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.crud import skill_assessment_crud
from hrportal.models.employee import Employee
from hrportal.models.job_description import JobDescription
from hrportal.models.skill import SkillAssessment
from .llm_client import get_llm_client
from .prompts import get_prompt, get_config


def _join(values) -> str:
    if isinstance(values, list):
        return ", ".join(str(v) for v in values) or "Not specified"
    return values or "Not specified"


def _percentage(value: Any, default: float = 50) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return max(0.0, min(100.0, number))


class SkillsAssessmentService:
    """Employee skills assessment."""

    def __init__(self):
        self._llm = get_llm_client()

    def build_prompt(self, employee: Employee, target: Optional[JobDescription]) -> str:
        if target is not None:
            target_text = get_prompt(
                "skills",
                "target_role",
                title=target.title,
                required_skills=_join(target.required_skills),
                required_qualifications=_join(target.required_qualifications),
                experience_level=target.experience_level or "Not specified",
            )
        else:
            target_text = get_prompt("skills", "no_target_role")
        return get_prompt(
            "skills",
            "assessment_user",
            name=employee.full_name,
            current_position=employee.current_position,
            department=employee.current_department or "Not specified",
            experience=employee.years_of_experience or 0,
            skills=_join(employee.skills),
            certifications=_join(employee.certifications),
            target_role=target_text,
        )

    async def assess(
        self,
        employee: Employee,
        target: Optional[JobDescription] = None,
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Assess one employee

        Returns ({overallMatch, skillGaps, recommendations, nextRoles}, is_fallback)
        """
        fallback = copy.deepcopy(get_config("skills", "fallback"))
        if not self._llm.is_configured():
            logger.warning("LLM not configured, fallback assessment for {}", employee.employee_number)
            return fallback, True

        data, is_fallback = await self._llm.complete_json_or_fallback(
            get_prompt("skills", "assessment_system"),
            self.build_prompt(employee, target),
            fallback=fallback,
            max_tokens=get_config("skills", "max_tokens"),
        )
        if is_fallback:
            return data, True

        gaps = data.get("skillGaps") or []
        next_roles = data.get("nextRoles") or []
        return {
            "overallMatch": _percentage(data.get("overallMatch")),
            "skillGaps": gaps if isinstance(gaps, list) else [],
            "recommendations": data.get("recommendations") or "No specific recommendations available",
            "nextRoles": next_roles if isinstance(next_roles, list) else [],
        }, False

    async def store(
        self,
        db: AsyncSession,
        *,
        employee: Employee,
        result: Dict[str, Any],
        is_fallback: bool,
        target_id: Optional[str] = None,
        session_id: Optional[str] = None,
        assessed_by: Optional[str] = None,
        note: Optional[str] = None,
    ) -> SkillAssessment:
        """Persist an assessment"""
        recommendations = result.get("recommendations")
        if not isinstance(recommendations, str):
            recommendations = str(recommendations)
        return await skill_assessment_crud.create(db, obj_in={
            "employee_id": employee.id,
            "job_description_id": target_id,
            "overall_match_percentage": _percentage(result.get("overallMatch")),
            "skill_gaps": [g for g in result.get("skillGaps", []) if isinstance(g, dict)],
            "recommendations": recommendations,
            "next_role_recommendations": result.get("nextRoles", []),
            "ai_analysis": note,
            "is_fallback": is_fallback,
            "session_id": session_id,
            "assessed_by": assessed_by,
        })


_skills_service: SkillsAssessmentService | None = None


def get_skills_assessment_service() -> SkillsAssessmentService:
    """SkillsAssessmentService singleton"""
    global _skills_service
    if _skills_service is None:
        _skills_service = SkillsAssessmentService()
    return _skills_service
