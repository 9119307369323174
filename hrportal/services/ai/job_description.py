"""
Job description AI service: generation of new JDs and rewriting of existing ones.
"""
from __future__ import annotations

from typing import Dict, Any, List, Optional
from loguru import logger

from hrportal.core.exceptions import BadRequestException, UpstreamAIException
from hrportal.models.job_description import JDGenerateRequest
from .llm_client import get_llm_client, LLMResponseError
from .prompts import get_prompt, get_config

# stored prompt is cut to this length
PROMPT_STORE_LIMIT = 1000


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _to_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


class JobDescriptionService:
    """Generate and rewrite job descriptions."""

    def __init__(self):
        self._llm = get_llm_client()

    def build_prompt(self, request: JDGenerateRequest) -> str:
        return get_prompt(
            "job_description",
            "generator_user",
            role_title=request.role_title,
            department=request.department or "",
            level=request.level or "",
            employment_type=request.employment_type.value,
            location_status=request.location_status.value,
            salary_range=request.salary_range or "Competitive package",
            requirements=request.requirements or "Standard telecommunications industry requirements",
            custom_instructions=request.custom_instructions or "",
            tone=request.tone,
            language=request.language,
        )

    async def generate(self, request: JDGenerateRequest) -> Dict[str, Any]:
        """
        Generate a job description

        Returns the normalized JD plus "prompt" (truncated) for storage.
        Raises BadRequestException for a blank title (no LLM call is made) and
        UpstreamAIException when the model fails or answers without JSON.
        """
        if not request.role_title or not request.role_title.strip():
            raise BadRequestException("Role title is required")

        user_prompt = self.build_prompt(request)
        system_prompt = get_prompt("job_description", "generator_system")
        try:
            data = await self._llm.complete_json(system_prompt, user_prompt)
        except LLMResponseError as exc:
            raise UpstreamAIException(f"Failed to generate job description - invalid AI response format: {exc}")
        except Exception as exc:
            logger.error("JD generation failed for {}: {}", request.role_title, exc)
            raise UpstreamAIException(f"AI service error: {exc}")

        jd = self._normalize(data, request)
        jd["prompt"] = user_prompt[:PROMPT_STORE_LIMIT]
        return jd

    def _normalize(self, data: Dict[str, Any], request: JDGenerateRequest) -> Dict[str, Any]:
        """Map the camelCase reply onto column names, filling gaps"""
        salary = data.get("estimatedSalary") or {}
        if not isinstance(salary, dict):
            salary = {}
        return {
            "title": str(data.get("title") or request.role_title)[:200],
            "summary": data.get("summary"),
            "responsibilities": _as_list(data.get("responsibilities")),
            "required_qualifications": _as_list(data.get("requiredQualifications")),
            "preferred_qualifications": _as_list(data.get("preferredQualifications")),
            "required_skills": _as_list(data.get("requiredSkills")),
            "preferred_skills": _as_list(data.get("preferredSkills")),
            "benefits": _as_list(data.get("benefits")),
            "full_description": data.get("fullDescription"),
            "keywords": _as_list(data.get("keywords")),
            "estimated_salary": salary,
            "job_identity": data.get("jobIdentity") or {},
            "key_contacts": data.get("keyContacts") or {},
            "competencies": data.get("competencies") or {},
        }

    def to_row(
        self,
        jd: Dict[str, Any],
        request: JDGenerateRequest,
        user_id: Optional[str],
    ) -> Dict[str, Any]:
        """Column values of the draft stored for a generated JD"""
        salary = jd.get("estimated_salary") or {}
        return {
            "title": jd["title"],
            "summary": jd.get("summary"),
            "responsibilities": jd["responsibilities"],
            "required_qualifications": jd["required_qualifications"],
            "preferred_qualifications": jd["preferred_qualifications"],
            "required_skills": jd["required_skills"],
            "preferred_skills": jd["preferred_skills"],
            "benefits": jd["benefits"],
            "full_description": jd.get("full_description"),
            "salary_range_min": _to_number(salary.get("min")),
            "salary_range_max": _to_number(salary.get("max")),
            "currency": salary.get("currency") or "IDR",
            "experience_level": request.level,
            "employment_type": request.employment_type,
            "location_type": request.location_status,
            "tone": request.tone,
            "language": request.language,
            "standard_role_id": request.standard_role_id,
            "status": "draft",
            "ai_generated": True,
            "ai_prompt_used": jd.get("prompt"),
            "template_version": get_config("job_description", "template_version"),
            "keywords": jd["keywords"],
            "job_identity": jd["job_identity"],
            "key_contacts": jd["key_contacts"],
            "competencies": jd["competencies"],
            "generated_by": user_id,
        }

    async def rewrite(self, current_content: str, update_request: str) -> str:
        """Apply a free-text change request to JD text"""
        if not update_request or not update_request.strip():
            raise BadRequestException("Update request is required")
        system_prompt = get_prompt("job_description", "updater_system")
        user_prompt = get_prompt(
            "job_description",
            "updater_user",
            current_content=current_content,
            update_request=update_request,
        )
        try:
            return await self._llm.complete(system_prompt, user_prompt)
        except Exception as exc:
            logger.error("JD update failed: {}", exc)
            raise UpstreamAIException(f"AI service error: {exc}")


def render_jd_text(jd) -> str:
    """Plain-text rendering of a stored JD, used when it has no full_description"""
    lines = [jd.title, ""]
    if jd.summary:
        lines += [jd.summary, ""]
    for heading, items in (
        ("Responsibilities", jd.responsibilities),
        ("Required Qualifications", jd.required_qualifications),
        ("Preferred Qualifications", jd.preferred_qualifications),
        ("Required Skills", jd.required_skills),
    ):
        if items:
            lines.append(f"{heading}:")
            lines += [f"- {item}" for item in items]
            lines.append("")
    return "\n".join(lines).strip()


_jd_service: JobDescriptionService | None = None


def get_job_description_service() -> JobDescriptionService:
    """JobDescriptionService singleton"""
    global _jd_service
    if _jd_service is None:
        _jd_service = JobDescriptionService()
    return _jd_service
