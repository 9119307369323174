"""
Role assignment service: picks the standard role that best fits an employee.

With a configured LLM the model chooses one role id from the active roles;
any reply that is not one of those ids counts as no match. Without an LLM a
weighted rule-based matcher is used instead.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.crud import employee_crud
from hrportal.models.employee import Employee, RoleAssignmentStatus
from hrportal.models.standard_role import StandardRole
from .llm_client import get_llm_client
from .prompts import get_prompt, get_config


@dataclass
class RoleSuggestion:
    """Outcome of matching one employee"""
    role_id: Optional[str]
    method: str  # "ai" | "heuristic"
    score: Optional[float] = None

    @property
    def matched(self) -> bool:
        return self.role_id is not None


def heuristic_score(employee: Employee, role: StandardRole, weights: dict) -> float:
    """
    Weighted similarity in [0, 1]

    title containment, share of role skills the employee has, same
    department, experience inside the role's range
    """
    score = 0.0
    position = (employee.current_position or "").lower()
    title = (role.role_title or "").lower()
    if position and title and (title in position or position in title):
        score += weights["title"]

    role_skills = [s.lower() for s in role.required_skills or [] if s]
    employee_skills = [s.lower() for s in employee.skills or [] if s]
    if role_skills:
        matches = sum(
            1 for skill in employee_skills
            if any(skill in rs or rs in skill for rs in role_skills)
        )
        score += min(1.0, matches / len(role_skills)) * weights["skills"]

    if (
        role.department and employee.current_department
        and role.department.lower() == employee.current_department.lower()
    ):
        score += weights["department"]

    experience = employee.years_of_experience or 0
    if (role.experience_range_min or 0) <= experience <= (role.experience_range_max or 50):
        score += weights["experience"]
    return round(score, 4)


class RoleAssignmentService:
    """Employee to standard role assignment."""

    def __init__(self):
        self._llm = get_llm_client()

    def match_heuristically(
        self, employee: Employee, roles: Sequence[StandardRole]
    ) -> RoleSuggestion:
        weights = get_config("roles", "heuristic_weights")
        threshold = get_config("roles", "heuristic_min_score")
        best_role, best_score = None, 0.0
        for role in roles:
            score = heuristic_score(employee, role, weights)
            if score > best_score:
                best_role, best_score = role, score
        if best_role is None or best_score < threshold:
            return RoleSuggestion(role_id=None, method="heuristic", score=best_score)
        return RoleSuggestion(role_id=best_role.id, method="heuristic", score=best_score)

    def build_prompt(self, employee: Employee, roles: Sequence[StandardRole]) -> str:
        role_lines = "\n".join(
            get_prompt(
                "roles",
                "assignment_role_line",
                id=role.id,
                role_title=role.role_title,
                job_family=role.job_family,
                role_level=role.role_level,
                role_category=role.role_category,
                department=role.department or "N/A",
            )
            for role in roles
        )
        return get_prompt(
            "roles",
            "assignment_user",
            name=employee.full_name,
            current_position=employee.current_position,
            department=employee.current_department or "N/A",
            level=employee.current_level or "N/A",
            experience=employee.years_of_experience or 0,
            skills=", ".join(employee.skills or []),
            certifications=", ".join(employee.certifications or []),
            roles=role_lines,
        )

    async def suggest(
        self, employee: Employee, roles: Sequence[StandardRole]
    ) -> RoleSuggestion:
        """
        Suggest a role

        Raises whatever the LLM client raises on transport failure.
        """
        if not self._llm.is_configured():
            return self.match_heuristically(employee, roles)

        reply = await self._llm.complete(
            get_prompt("roles", "assignment_system"),
            self.build_prompt(employee, roles),
            temperature=get_config("roles", "assignment_temperature"),
            max_tokens=get_config("roles", "assignment_max_tokens"),
        )
        candidate = reply.strip().strip('"').strip("'").strip()
        valid_ids = {role.id for role in roles}
        if candidate in valid_ids:
            return RoleSuggestion(role_id=candidate, method="ai")
        logger.info("No valid role id in LLM reply for {}: {!r}", employee.employee_number, reply[:80])
        return RoleSuggestion(role_id=None, method="ai")

    async def assign(
        self,
        db: AsyncSession,
        employee: Employee,
        roles: Sequence[StandardRole],
    ) -> RoleSuggestion:
        """Suggest a role and record the outcome on the employee"""
        suggestion = await self.suggest(employee, roles)
        if suggestion.matched:
            status = (
                RoleAssignmentStatus.ASSIGNED if suggestion.method == "ai"
                else RoleAssignmentStatus.AI_SUGGESTED
            )
            notes = "Assigned by AI" if suggestion.method == "ai" else (
                f"Rule-based match (score {suggestion.score})"
            )
        else:
            status = RoleAssignmentStatus.AI_NO_MATCH
            notes = "AI could not find suitable role match"
        await employee_crud.assign_role(
            db, db_obj=employee, role_id=suggestion.role_id, status=status, notes=notes
        )
        return suggestion


_assignment_service: RoleAssignmentService | None = None


def get_role_assignment_service() -> RoleAssignmentService:
    """RoleAssignmentService singleton"""
    global _assignment_service
    if _assignment_service is None:
        _assignment_service = RoleAssignmentService()
    return _assignment_service
