"""
Job description API routes

CRUD, AI generation and rewrite, and the review/approval lifecycle
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.core.auth import get_current_user_id
from hrportal.core.database import get_db
from hrportal.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    MessageResponse,
    DictResponse,
)
from hrportal.core.exceptions import NotFoundException, ConflictException, BadRequestException
from hrportal.crud import job_description_crud, standard_role_crud
from hrportal.models import (
    JobDescription,
    JobDescriptionCreate,
    JobDescriptionUpdate,
    JobDescriptionResponse,
    JobDescriptionListResponse,
    JDGenerateRequest,
    JDUpdateRequest,
    JDStatus,
    can_transition,
)
from hrportal.services.ai import get_job_description_service
from hrportal.services.ai.job_description import render_jd_text

router = APIRouter()


async def _get_jd(db: AsyncSession, jd_id: str) -> JobDescription:
    jd = await job_description_crud.get(db, jd_id)
    if not jd:
        raise NotFoundException(f"Job description not found: {jd_id}")
    return jd


async def _check_role(db: AsyncSession, standard_role_id: Optional[str]) -> None:
    if standard_role_id and not await standard_role_crud.get(db, standard_role_id):
        raise BadRequestException(f"Standard role not found: {standard_role_id}")


@router.get("", summary="List job descriptions", response_model=PagedResponseModel[JobDescriptionListResponse])
async def get_job_descriptions(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    status: Optional[JDStatus] = Query(None, description="Lifecycle status"),
    standard_role_id: Optional[str] = Query(None, description="Standard role"),
    ai_generated: Optional[bool] = Query(None, description="Generated by AI"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {
        "status": status.value if status else None,
        "standard_role_id": standard_role_id,
        "ai_generated": ai_generated,
    }
    jds = await job_description_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await job_description_crud.count(db, filters=filters)
    items = [JobDescriptionListResponse.model_validate(jd).model_dump() for jd in jds]
    return paged_response(items, total, page, page_size)


@router.post("", summary="Create job description", response_model=ResponseModel[JobDescriptionResponse])
async def create_job_description(
    data: JobDescriptionCreate,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Create a job description by hand; it starts as draft
    """
    await _check_role(db, data.standard_role_id)
    obj_in = data.model_dump()
    obj_in["generated_by"] = user_id
    jd = await job_description_crud.create(db, obj_in=obj_in)
    return success_response(
        data=JobDescriptionResponse.model_validate(jd).model_dump(),
        message="Job description created"
    )


@router.post("/generate", summary="AI job description generation", response_model=DictResponse)
async def generate_job_description(
    data: JDGenerateRequest,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Generate a structured job description and save it as a draft

    A blank role title is rejected before the model is called. A reply that
    is not JSON is reported as an upstream failure (502).
    """
    await _check_role(db, data.standard_role_id)
    service = get_job_description_service()
    generated = await service.generate(data)
    jd = await job_description_crud.create(db, obj_in=service.to_row(generated, data, user_id))

    generated.pop("prompt", None)
    return success_response(
        data={
            "id": jd.id,
            "status": jd.status,
            "job_description": generated,
        },
        message="Job description generated"
    )


@router.get("/{jd_id}", summary="Get job description", response_model=ResponseModel[JobDescriptionResponse])
async def get_job_description(
    jd_id: str,
    db: AsyncSession = Depends(get_db),
):
    jd = await _get_jd(db, jd_id)
    return success_response(data=JobDescriptionResponse.model_validate(jd).model_dump())


@router.patch("/{jd_id}", summary="Update job description", response_model=ResponseModel[JobDescriptionResponse])
async def update_job_description(
    jd_id: str,
    data: JobDescriptionUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Edit content; status changes go through the lifecycle endpoints
    """
    jd = await _get_jd(db, jd_id)
    await _check_role(db, data.standard_role_id)
    jd = await job_description_crud.update(db, db_obj=jd, obj_in=data)
    return success_response(
        data=JobDescriptionResponse.model_validate(jd).model_dump(),
        message="Job description updated"
    )


@router.delete("/{jd_id}", summary="Delete job description", response_model=MessageResponse)
async def delete_job_description(
    jd_id: str,
    db: AsyncSession = Depends(get_db),
):
    await _get_jd(db, jd_id)
    await job_description_crud.delete(db, id=jd_id)
    return success_response(message="Job description deleted")


@router.post("/{jd_id}/ai-update", summary="AI job description rewrite", response_model=DictResponse)
async def ai_update_job_description(
    jd_id: str,
    data: JDUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Apply a free-text change request to a job description

    With save=true the result replaces full_description.
    """
    jd = await _get_jd(db, jd_id)
    current = data.current_content or jd.full_description or render_jd_text(jd)
    updated = await get_job_description_service().rewrite(current, data.update_request)

    if data.save:
        await job_description_crud.update(db, db_obj=jd, obj_in={"full_description": updated})
    return success_response(
        data={"id": jd.id, "updated_content": updated, "saved": data.save},
        message="Job description updated by AI"
    )


# ==================== Lifecycle ====================

async def _transition(db: AsyncSession, jd_id: str, target: JDStatus, user_id: str) -> dict:
    jd = await _get_jd(db, jd_id)
    if not can_transition(jd.status, target.value):
        raise ConflictException(
            f"Cannot move job description from '{jd.status}' to '{target.value}'",
            data={"current_status": jd.status, "requested_status": target.value},
        )
    jd = await job_description_crud.set_status(db, db_obj=jd, status=target, user_id=user_id)
    return JobDescriptionResponse.model_validate(jd).model_dump()


@router.post("/{jd_id}/submit-review", summary="Submit for review", response_model=ResponseModel[JobDescriptionResponse])
async def submit_for_review(
    jd_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """draft -> review"""
    data = await _transition(db, jd_id, JDStatus.REVIEW, user_id)
    return success_response(data=data, message="Submitted for review")


@router.post("/{jd_id}/approve", summary="Approve", response_model=ResponseModel[JobDescriptionResponse])
async def approve(
    jd_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """draft or review -> approved, records the approver"""
    data = await _transition(db, jd_id, JDStatus.APPROVED, user_id)
    return success_response(data=data, message="Job description approved")


@router.post("/{jd_id}/publish", summary="Publish", response_model=ResponseModel[JobDescriptionResponse])
async def publish(
    jd_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """approved -> published"""
    data = await _transition(db, jd_id, JDStatus.PUBLISHED, user_id)
    return success_response(data=data, message="Job description published")
