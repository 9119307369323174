"""
Development API routes

Free-text development pathways and structured development plans
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
from hrportal.core.exceptions import NotFoundException, BadRequestException
from hrportal.crud import (
    employee_crud,
    development_plan_crud,
    analysis_result_crud,
    upload_session_crud,
)
from hrportal.models import (
    PathwayRequest,
    DevelopmentPlanRequest,
    BulkPathwayRequest,
    DevelopmentPlanCreate,
    DevelopmentPlanUpdate,
    DevelopmentPlanResponse,
    PlanStatus,
    AnalysisType,
    JobStartedResponse,
    SessionType,
)
from hrportal.services.ai import get_development_service
from hrportal.services.bulk import run_development_planning

router = APIRouter()


@router.post("/pathways", summary="AI development pathway", response_model=DictResponse)
async def create_pathway(
    data: PathwayRequest,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Free-text development pathway for a supplied profile
    """
    pathway = await get_development_service().pathway(data)
    record = await analysis_result_crud.record(
        db,
        analysis_type=AnalysisType.DEVELOPMENT_PATHWAY.value,
        function_name="development-pathways",
        input_parameters=data.model_dump(),
        analysis_result={"pathway": pathway},
        created_by=user_id,
    )
    return success_response(
        data={"analysis_id": record.id, "pathway": pathway},
        message="Development pathway generated"
    )


@router.post("/plans/bulk", summary="Bulk development planning", response_model=ResponseModel[JobStartedResponse])
async def bulk_development_plans(
    data: BulkPathwayRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    user_id: str = Depends(get_current_user_id),
):
    if data.pathway_type != "all" and not data.identifier and not data.employee_ids:
        raise BadRequestException(f"identifier is required for pathway_type '{data.pathway_type}'")
    employees = await employee_crud.select_for_bulk(
        db,
        selection_type=data.pathway_type,
        identifier=data.identifier,
        employee_ids=data.employee_ids,
    )
    if not employees:
        raise BadRequestException("No employees match the selection")

    session = await upload_session_crud.start(
        db,
        session_name=f"Development planning: {data.pathway_type} {data.identifier or ''}".strip(),
        session_type=SessionType.DEVELOPMENT_PLANNING.value,
        total=len(employees),
        created_by=user_id,
        extra={"pathway_type": data.pathway_type, "identifier": data.identifier},
    )
    await db.commit()

    background_tasks.add_task(
        run_development_planning,
        session.id,
        [e.id for e in employees],
        user_id=user_id,
        session_factory=session_factory,
    )
    return success_response(
        data=JobStartedResponse(
            session_id=session.id,
            status=session.status,
            total=len(employees),
            message="Development planning started, poll the progress endpoint",
        ).model_dump(),
        message="Bulk development planning started"
    )


@router.post("/plans/{employee_id}", summary="AI development plan", response_model=DictResponse)
async def generate_plan(
    employee_id: str,
    data: Optional[DevelopmentPlanRequest] = None,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Generate a structured development plan for one employee

    An unusable model reply stores the empty fallback plan, flagged with
    is_fallback.
    """
    employee = await employee_crud.get(db, employee_id)
    if not employee:
        raise NotFoundException(f"Employee not found: {employee_id}")

    data = data or DevelopmentPlanRequest()
    plan = await get_development_service().create_plan(
        db,
        employee,
        target_role=data.target_role,
        timeline_months=data.timeline_months,
        user_id=user_id,
    )
    return success_response(
        data={
            "fallback": plan.is_fallback,
            "plan": DevelopmentPlanResponse.model_validate(plan).model_dump(),
        },
        message="Development plan created"
    )


@router.get("/plans", summary="List development plans", response_model=PagedResponseModel[DevelopmentPlanResponse])
async def get_plans(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    employee_id: Optional[str] = Query(None, description="Employee"),
    plan_status: Optional[PlanStatus] = Query(None, description="Plan status"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {"employee_id": employee_id, "plan_status": plan_status}
    plans = await development_plan_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await development_plan_crud.count(db, filters=filters)
    items = [DevelopmentPlanResponse.model_validate(p).model_dump() for p in plans]
    return paged_response(items, total, page, page_size)


@router.post("/plans", summary="Create development plan", response_model=ResponseModel[DevelopmentPlanResponse])
async def create_plan(
    data: DevelopmentPlanCreate,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not await employee_crud.get(db, data.employee_id):
        raise NotFoundException(f"Employee not found: {data.employee_id}")
    obj_in = data.model_dump()
    obj_in["created_by"] = user_id
    plan = await development_plan_crud.create(db, obj_in=obj_in)
    return success_response(
        data=DevelopmentPlanResponse.model_validate(plan).model_dump(),
        message="Development plan created"
    )


@router.get("/plans/{plan_id}", summary="Get development plan", response_model=ResponseModel[DevelopmentPlanResponse])
async def get_plan(
    plan_id: str,
    db: AsyncSession = Depends(get_db),
):
    plan = await development_plan_crud.get(db, plan_id)
    if not plan:
        raise NotFoundException(f"Development plan not found: {plan_id}")
    return success_response(data=DevelopmentPlanResponse.model_validate(plan).model_dump())


@router.patch("/plans/{plan_id}", summary="Update development plan", response_model=ResponseModel[DevelopmentPlanResponse])
async def update_plan(
    plan_id: str,
    data: DevelopmentPlanUpdate,
    db: AsyncSession = Depends(get_db),
):
    plan = await development_plan_crud.get(db, plan_id)
    if not plan:
        raise NotFoundException(f"Development plan not found: {plan_id}")
    plan = await development_plan_crud.update(db, db_obj=plan, obj_in=data)
    return success_response(
        data=DevelopmentPlanResponse.model_validate(plan).model_dump(),
        message="Development plan updated"
    )


@router.delete("/plans/{plan_id}", summary="Delete development plan", response_model=MessageResponse)
async def delete_plan(
    plan_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await development_plan_crud.get(db, plan_id):
        raise NotFoundException(f"Development plan not found: {plan_id}")
    await development_plan_crud.delete(db, id=plan_id)
    return success_response(message="Development plan deleted")
