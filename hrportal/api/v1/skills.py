"""
Skills API routes

Skills catalogue and AI skill assessments (single and bulk)
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrportal.core.auth import get_current_user_id
from hrportal.core.database import get_db, get_session_factory
from hrportal.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    MessageResponse,
    DictResponse,
)
from hrportal.core.exceptions import NotFoundException, ConflictException, BadRequestException
from hrportal.crud import (
    skill_crud,
    skill_assessment_crud,
    employee_crud,
    job_description_crud,
    upload_session_crud,
)
from hrportal.models import (
    SkillCreate,
    SkillUpdate,
    SkillResponse,
    SkillAssessmentRequest,
    BulkAssessmentRequest,
    SkillAssessmentResponse,
    JobStartedResponse,
    SessionType,
)
from hrportal.services.ai import get_skills_assessment_service
from hrportal.services.bulk import run_skills_assessment

router = APIRouter()


# ==================== Assessments ====================

@router.post(
    "/assessments/employee/{employee_id}",
    summary="AI skills assessment",
    response_model=DictResponse,
)
async def assess_employee(
    employee_id: str,
    data: Optional[SkillAssessmentRequest] = None,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Assess one employee, optionally against a target job description

    When the model is unavailable or answers without JSON the stored
    assessment is the fallback (overallMatch 50) and `fallback` is true.
    """
    employee = await employee_crud.get(db, employee_id)
    if not employee:
        raise NotFoundException(f"Employee not found: {employee_id}")

    target = None
    target_id = data.job_description_id if data else None
    if target_id:
        target = await job_description_crud.get(db, target_id)
        if not target:
            raise NotFoundException(f"Job description not found: {target_id}")

    service = get_skills_assessment_service()
    result, is_fallback = await service.assess(employee, target)
    assessment = await service.store(
        db,
        employee=employee,
        result=result,
        is_fallback=is_fallback,
        target_id=target_id,
        assessed_by=user_id,
    )
    return success_response(
        data={
            "assessment_id": assessment.id,
            "employee_id": employee.id,
            "fallback": is_fallback,
            "result": result,
        },
        message="Skills assessment completed"
    )


@router.post("/assessments/bulk", summary="Bulk skills assessment", response_model=ResponseModel[JobStartedResponse])
async def bulk_assess(
    data: BulkAssessmentRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    user_id: str = Depends(get_current_user_id),
):
    """
    Start assessments for a company, department, role or everyone

    An explicit employee_ids list overrides the selection filter.
    """
    if data.assessment_type != "all" and not data.identifier and not data.employee_ids:
        raise BadRequestException(f"identifier is required for assessment_type '{data.assessment_type}'")
    if data.target_job_description_id and not await job_description_crud.get(db, data.target_job_description_id):
        raise NotFoundException(f"Job description not found: {data.target_job_description_id}")

    employees = await employee_crud.select_for_bulk(
        db,
        selection_type=data.assessment_type,
        identifier=data.identifier,
        employee_ids=data.employee_ids,
    )
    if not employees:
        raise BadRequestException("No employees match the selection")

    session = await upload_session_crud.start(
        db,
        session_name=f"Skills assessment: {data.assessment_type} {data.identifier or ''}".strip(),
        session_type=SessionType.SKILLS_ASSESSMENT.value,
        total=len(employees),
        created_by=user_id,
        extra={
            "assessment_type": data.assessment_type,
            "identifier": data.identifier,
            "target_job_description_id": data.target_job_description_id,
        },
    )
    await db.commit()

    background_tasks.add_task(
        run_skills_assessment,
        session.id,
        [e.id for e in employees],
        target_job_description_id=data.target_job_description_id,
        assessed_by=user_id,
        session_factory=session_factory,
    )
    return success_response(
        data=JobStartedResponse(
            session_id=session.id,
            status=session.status,
            total=len(employees),
            message="Assessment started, poll the progress endpoint",
        ).model_dump(),
        message="Bulk assessment started"
    )


@router.get("/assessments", summary="List skill assessments", response_model=PagedResponseModel[SkillAssessmentResponse])
async def get_assessments(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    employee_id: Optional[str] = Query(None, description="Employee"),
    session_id: Optional[str] = Query(None, description="Bulk session"),
    is_fallback: Optional[bool] = Query(None, description="Fallback results only"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {"employee_id": employee_id, "session_id": session_id, "is_fallback": is_fallback}
    assessments = await skill_assessment_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await skill_assessment_crud.count(db, filters=filters)
    items = [SkillAssessmentResponse.model_validate(a).model_dump() for a in assessments]
    return paged_response(items, total, page, page_size)


@router.get(
    "/assessments/{assessment_id}",
    summary="Get skill assessment",
    response_model=ResponseModel[SkillAssessmentResponse],
)
async def get_assessment(
    assessment_id: str,
    db: AsyncSession = Depends(get_db),
):
    assessment = await skill_assessment_crud.get(db, assessment_id)
    if not assessment:
        raise NotFoundException(f"Skill assessment not found: {assessment_id}")
    return success_response(data=SkillAssessmentResponse.model_validate(assessment).model_dump())


# ==================== Skills catalogue ====================

@router.get("", summary="List skills", response_model=PagedResponseModel[SkillResponse])
async def get_skills(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(50, ge=1, le=200, description="Page size"),
    category: Optional[str] = Query(None, description="Category"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {"category": category}
    skills = await skill_crud.get_multi(db, skip=skip, limit=page_size, filters=filters, order_by=skill_crud.model.name)
    total = await skill_crud.count(db, filters=filters)
    items = [SkillResponse.model_validate(s).model_dump() for s in skills]
    return paged_response(items, total, page, page_size)


@router.get("/categories", summary="List skill categories", response_model=ResponseModel[list[str]])
async def get_categories(db: AsyncSession = Depends(get_db)):
    return success_response(data=sorted(await skill_crud.categories(db)))


@router.post("", summary="Create skill", response_model=ResponseModel[SkillResponse])
async def create_skill(
    data: SkillCreate,
    db: AsyncSession = Depends(get_db),
):
    if await skill_crud.get_by_name(db, data.name):
        raise ConflictException(f"Skill '{data.name}' already exists")
    skill = await skill_crud.create(db, obj_in=data)
    return success_response(data=SkillResponse.model_validate(skill).model_dump(), message="Skill created")


@router.get("/{skill_id}", summary="Get skill", response_model=ResponseModel[SkillResponse])
async def get_skill(
    skill_id: str,
    db: AsyncSession = Depends(get_db),
):
    skill = await skill_crud.get(db, skill_id)
    if not skill:
        raise NotFoundException(f"Skill not found: {skill_id}")
    return success_response(data=SkillResponse.model_validate(skill).model_dump())


@router.patch("/{skill_id}", summary="Update skill", response_model=ResponseModel[SkillResponse])
async def update_skill(
    skill_id: str,
    data: SkillUpdate,
    db: AsyncSession = Depends(get_db),
):
    skill = await skill_crud.get(db, skill_id)
    if not skill:
        raise NotFoundException(f"Skill not found: {skill_id}")
    if data.name and data.name.lower() != skill.name.lower():
        if await skill_crud.get_by_name(db, data.name):
            raise ConflictException(f"Skill '{data.name}' already exists")
    skill = await skill_crud.update(db, db_obj=skill, obj_in=data)
    return success_response(data=SkillResponse.model_validate(skill).model_dump(), message="Skill updated")


@router.delete("/{skill_id}", summary="Delete skill", response_model=MessageResponse)
async def delete_skill(
    skill_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await skill_crud.get(db, skill_id):
        raise NotFoundException(f"Skill not found: {skill_id}")
    await skill_crud.delete(db, id=skill_id)
    return success_response(message="Skill deleted")
