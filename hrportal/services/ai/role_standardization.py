"""
Role standardization service: turns uploaded XL/SMART role catalogues into
standard roles plus original-to-standard mappings.
"""
from __future__ import annotations

import json
from typing import Dict, Any, List, Optional
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.core.exceptions import BadRequestException, NotFoundException, UpstreamAIException
from hrportal.crud import upload_session_crud, uploaded_role_crud, standard_role_crud, role_mapping_crud
from hrportal.models.standard_role import UploadedRole, mapping_status_for, AUTO_MAP_CONFIDENCE
from hrportal.models.upload_session import SessionStatus
from .llm_client import get_llm_client
from .prompts import get_prompt, get_config


def split_csv(value: Any) -> List[str]:
    """'a, b,c' -> ['a', 'b', 'c']; lists pass through"""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def _int(value: Any, default: int = 0) -> int:
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError):
        return default


def _role_sample(role: UploadedRole) -> str:
    return json.dumps({
        "role_title": role.role_title,
        "department": role.department,
        "role_family": role.role_family,
        "seniority_band": role.seniority_band,
        "required_skills": role.required_skills,
        "experience_min_years": role.experience_min_years,
    }, ensure_ascii=False)


class RoleStandardizationService:
    """Standardize uploaded roles."""

    def __init__(self):
        self._llm = get_llm_client()

    async def standardize(
        self,
        db: AsyncSession,
        session_id: str,
        user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Standardize the roles of one upload session

        Returns counts of created standard roles and mappings.
        """
        session = await upload_session_crud.get(db, session_id)
        if not session:
            raise NotFoundException("Upload session not found")

        roles = await uploaded_role_crud.get_by_session(db, session_id)
        if not roles:
            raise BadRequestException("No uploaded roles found for this session")

        xl_roles = [r for r in roles if r.source_company == "xl"]
        smart_roles = [r for r in roles if r.source_company == "smart"]
        sample_size = get_config("roles", "standardization_sample_size")

        user_prompt = get_prompt(
            "roles",
            "standardization_user",
            xl_total=len(xl_roles),
            xl_sample="\n".join(_role_sample(r) for r in xl_roles[:sample_size]),
            smart_total=len(smart_roles),
            smart_sample="\n".join(_role_sample(r) for r in smart_roles[:sample_size]),
        )

        try:
            data = await self._llm.complete_json(
                get_prompt("roles", "standardization_system"),
                user_prompt,
                temperature=get_config("roles", "standardization_temperature"),
                max_tokens=get_config("roles", "standardization_max_tokens"),
            )
        except Exception as exc:
            logger.error("Role standardization failed for session {}: {}", session_id, exc)
            raise UpstreamAIException(f"Role standardization failed: {exc}")

        created_roles = await self._create_roles(db, data.get("standardizedRoles") or [], user_id)
        mapping_counts = await self._create_mappings(
            db, data.get("mappings") or [], created_roles, roles, session_id, user_id
        )

        summary = {
            "standardization": "completed",
            "standard_roles_created": len(created_roles),
            **mapping_counts,
        }
        await upload_session_crud.update_progress(
            db, db_obj=session, progress=summary, status=SessionStatus.COMPLETED
        )
        logger.info("Session {} standardized: {}", session_id, summary)
        return {"session_id": session_id, **summary}

    async def _create_roles(
        self,
        db: AsyncSession,
        items: List[Dict[str, Any]],
        user_id: Optional[str],
    ) -> Dict[str, Any]:
        """Insert standard roles, returns {role title: (row, source item)}"""
        created: Dict[str, Any] = {}
        for item in items:
            title = str(item.get("standardized_role_title") or "").strip()[:200]
            if not title or title in created:
                continue
            family = item.get("standardized_role_family") or "General"
            min_years = _int(item.get("standardized_experience_min_years"))
            responsibilities = item.get("standardized_core_responsibilities")
            education = item.get("standardized_education")
            role = await standard_role_crud.create(db, obj_in={
                "role_title": title,
                "department": item.get("standardized_department"),
                "job_family": str(family)[:100],
                "role_level": str(item.get("standardized_seniority_band") or "mid")[:50],
                "role_category": str(family)[:100],
                "standard_description": item.get("standardized_role_purpose"),
                "core_responsibilities": [responsibilities] if responsibilities else [],
                "required_skills": split_csv(item.get("standardized_required_skills")),
                "education_requirements": [education] if education else [],
                "experience_range_min": min_years,
                "experience_range_max": min_years + 5,
                "keywords": split_csv(item.get("standardized_tools_platforms")),
                "industry_alignment": "Telecommunications",
                "created_by": user_id,
            })
            created[title] = (role, item)
        return created

    async def _create_mappings(
        self,
        db: AsyncSession,
        items: List[Dict[str, Any]],
        created_roles: Dict[str, Any],
        uploaded: List[UploadedRole],
        session_id: str,
        user_id: Optional[str],
    ) -> Dict[str, int]:
        """Insert mappings whose target role exists"""
        by_source_title = {(r.source_company, r.role_title): r for r in uploaded}
        counts = {"mappings_created": 0, "auto_mapped": 0, "manual_review": 0, "mappings_skipped": 0}

        for item in items:
            target = created_roles.get(str(item.get("standardized_role_title") or "").strip())
            original_title = str(item.get("original_role_title") or "").strip()
            if target is None or not original_title:
                counts["mappings_skipped"] += 1
                continue
            role, _ = target
            original = by_source_title.get((item.get("original_source"), original_title))
            confidence = min(100.0, float(_int(item.get("mapping_confidence"))))
            status = mapping_status_for(confidence)

            await role_mapping_crud.create(db, obj_in={
                "original_role_title": original_title[:300],
                "original_department": original.department if original else None,
                "original_level": original.seniority_band if original else None,
                "standardized_role_title": role.role_title,
                "standardized_department": role.department,
                "standardized_level": role.role_level,
                "job_family": role.job_family,
                "standard_role_id": role.id,
                "mapping_confidence": confidence,
                "mapping_status": status.value,
                "requires_manual_review": confidence < AUTO_MAP_CONFIDENCE,
                "catalog_id": session_id,
                "created_by": user_id,
            })
            counts["mappings_created"] += 1
            counts[status.value] += 1
        return counts


_standardization_service: RoleStandardizationService | None = None


def get_role_standardization_service() -> RoleStandardizationService:
    """RoleStandardizationService singleton"""
    global _standardization_service
    if _standardization_service is None:
        _standardization_service = RoleStandardizationService()
    return _standardization_service
