"""
Mobility planning service: free-text internal move plans per employee.
"""
from __future__ import annotations

from typing import Dict, Any, Optional, Sequence
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.crud import analysis_result_crud
from hrportal.models.analysis_result import AnalysisResult, AnalysisType
from hrportal.models.employee import Employee
from hrportal.models.standard_role import StandardRole
from .llm_client import get_llm_client, LLMResponseError
from .prompts import get_prompt, get_config

# roles listed in the prompt
MAX_PROMPT_ROLES = 25


def mobility_score(employee: Employee) -> int:
    """
    Rule-based mobility likelihood, 0-100

    Base 50, plus experience (>5y: 20, >2y: 10), performance relative to a
    rating of 3 (10 per point) and breadth of skills (5 each, up to 20).
    """
    score = 50.0
    experience = employee.years_of_experience or 0
    if experience > 5:
        score += 20
    elif experience > 2:
        score += 10
    score += ((employee.performance_rating or 0) - 3) * 10
    score += min(len(employee.skills or []) * 5, 20)
    return int(max(0, min(100, score)))


def mobility_risk(score: int) -> str:
    if score >= 80:
        return "High"
    if score >= 60:
        return "Medium"
    return "Low"


class MobilityService:
    """Mobility plan generation."""

    def __init__(self):
        self._llm = get_llm_client()

    async def generate_plan(
        self,
        employee: Employee,
        roles: Sequence[StandardRole],
    ) -> Dict[str, Any]:
        """Returns {plan, mobility_score, mobility_risk, fallback}"""
        score = mobility_score(employee)
        risk = mobility_risk(score)
        role_lines = "\n".join(
            f"- {role.role_title} ({role.department or 'N/A'}, {role.role_level})"
            for role in list(roles)[:MAX_PROMPT_ROLES]
        ) or "None defined"
        user_prompt = get_prompt(
            "mobility",
            "plan_user",
            name=employee.full_name,
            current_position=employee.current_position,
            department=employee.current_department or "N/A",
            level=employee.current_level or "N/A",
            experience=employee.years_of_experience or 0,
            performance_rating=employee.performance_rating if employee.performance_rating is not None else "N/A",
            skills=", ".join(employee.skills or []) or "Not specified",
            mobility_score=score,
            mobility_risk=risk,
            roles=role_lines,
        )
        try:
            if not self._llm.is_configured():
                raise LLMResponseError("LLM not configured")
            plan = await self._llm.complete(
                get_prompt("mobility", "plan_system"),
                user_prompt,
                max_tokens=get_config("mobility", "max_tokens"),
            )
            is_fallback = False
        except Exception as exc:
            logger.warning("Mobility plan fallback for {}: {}", employee.employee_number, exc)
            plan = get_prompt("mobility", "fallback_text", mobility_score=score, mobility_risk=risk)
            is_fallback = True
        return {
            "plan": plan,
            "mobility_score": score,
            "mobility_risk": risk,
            "fallback": is_fallback,
        }

    async def create_plan(
        self,
        db: AsyncSession,
        employee: Employee,
        roles: Sequence[StandardRole],
        user_id: Optional[str] = None,
    ) -> AnalysisResult:
        """Generate a plan and store it as a mobility_plan analysis result"""
        outcome = await self.generate_plan(employee, roles)
        return await analysis_result_crud.record(
            db,
            analysis_type=AnalysisType.MOBILITY_PLAN.value,
            function_name="employee-mobility-planning",
            input_parameters={"employee_id": employee.id},
            analysis_result=outcome,
            is_fallback=outcome["fallback"],
            employee_id=employee.id,
            created_by=user_id,
        )


_mobility_service: MobilityService | None = None


def get_mobility_service() -> MobilityService:
    """MobilityService singleton"""
    global _mobility_service
    if _mobility_service is None:
        _mobility_service = MobilityService()
    return _mobility_service
