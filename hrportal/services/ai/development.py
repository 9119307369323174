"""
Development service: free-text pathways and structured development plans.
"""
from __future__ import annotations

import copy
import json
from typing import Dict, Any, List, Optional
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.core.exceptions import UpstreamAIException
from hrportal.crud import development_plan_crud
from hrportal.models.development_plan import DevelopmentPlan, PathwayRequest
from hrportal.models.employee import Employee
from .llm_client import get_llm_client
from .prompts import get_prompt, get_config


def _list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value] if value else []


def _months(value: Any, default: int) -> int:
    try:
        months = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(1, min(60, months))


class DevelopmentService:
    """Career development pathways."""

    def __init__(self):
        self._llm = get_llm_client()

    async def pathway(self, request: PathwayRequest) -> str:
        """Free-text pathway for an ad-hoc profile"""
        user_prompt = get_prompt(
            "development",
            "pathway_user",
            employee_profile=json.dumps(request.employee_profile, ensure_ascii=False, default=str),
            career_goals=request.career_goals or "Not specified",
            current_skills=json.dumps(request.current_skills, ensure_ascii=False, default=str),
            industry_trends=request.industry_trends or "Consider current market trends",
        )
        try:
            return await self._llm.complete(
                get_prompt("development", "pathway_system"),
                user_prompt,
                max_tokens=get_config("development", "pathway_max_tokens"),
            )
        except Exception as exc:
            logger.error("Development pathway failed: {}", exc)
            raise UpstreamAIException(f"AI service error: {exc}")

    async def generate_plan(
        self,
        employee: Employee,
        target_role: Optional[str] = None,
        timeline_months: Optional[int] = None,
    ) -> tuple[Dict[str, Any], bool]:
        """Structured plan JSON, (data, is_fallback)"""
        fallback = copy.deepcopy(get_config("development", "plan_fallback"))
        fallback["targetRole"] = target_role
        fallback["timelineMonths"] = timeline_months or fallback["timelineMonths"]

        user_prompt = get_prompt(
            "development",
            "plan_user",
            name=employee.full_name,
            current_position=employee.current_position,
            department=employee.current_department or "Not specified",
            experience=employee.years_of_experience or 0,
            skills=", ".join(employee.skills or []) or "Not specified",
            certifications=", ".join(employee.certifications or []) or "None",
            target_role=target_role or "Natural next step in the current career track",
            timeline_months=timeline_months or 12,
        )
        return await self._llm.complete_json_or_fallback(
            get_prompt("development", "plan_system"),
            user_prompt,
            fallback=fallback,
            max_tokens=get_config("development", "plan_max_tokens"),
        )

    async def create_plan(
        self,
        db: AsyncSession,
        employee: Employee,
        *,
        target_role: Optional[str] = None,
        timeline_months: Optional[int] = None,
        session_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> DevelopmentPlan:
        """Generate and store a development plan"""
        data, is_fallback = await self.generate_plan(employee, target_role, timeline_months)
        plan_target = data.get("targetRole") or target_role
        return await development_plan_crud.create(db, obj_in={
            "employee_id": employee.id,
            "target_role": str(plan_target)[:200] if plan_target else None,
            "development_areas": _list(data.get("developmentAreas")),
            "recommended_courses": _list(data.get("recommendedCourses")),
            "recommended_certifications": _list(data.get("recommendedCertifications")),
            "recommended_projects": _list(data.get("recommendedProjects")),
            "timeline_months": _months(data.get("timelineMonths"), timeline_months or 12),
            "plan_text": data.get("summary"),
            "is_fallback": is_fallback,
            "session_id": session_id,
            "created_by": user_id,
        })


_development_service: DevelopmentService | None = None


def get_development_service() -> DevelopmentService:
    """DevelopmentService singleton"""
    global _development_service
    if _development_service is None:
        _development_service = DevelopmentService()
    return _development_service
