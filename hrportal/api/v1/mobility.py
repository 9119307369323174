"""
Mobility API routes

Executed employee moves and AI mobility plans
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
    DictResponse,
)
from hrportal.core.exceptions import NotFoundException, BadRequestException
from hrportal.crud import (
    employee_crud,
    employee_move_crud,
    analysis_result_crud,
    standard_role_crud,
    upload_session_crud,
)
from hrportal.models import (
    EmployeeMoveCreate,
    EmployeeMoveResponse,
    BulkMobilityRequest,
    MoveType,
    AnalysisType,
    AnalysisResultResponse,
    JobStartedResponse,
    SessionType,
)
from hrportal.services.ai import get_mobility_service
from hrportal.services.bulk import run_mobility_planning

router = APIRouter()


# ==================== Moves ====================

@router.post("/moves", summary="Execute employee move", response_model=ResponseModel[EmployeeMoveResponse])
async def create_move(
    data: EmployeeMoveCreate,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Move an employee to a new position, department or level

    The move record and the employee update are committed together.
    """
    employee = await employee_crud.get(db, data.employee_id)
    if not employee:
        raise NotFoundException(f"Employee not found: {data.employee_id}")
    if data.mobility_plan_id and not await analysis_result_crud.get(db, data.mobility_plan_id):
        raise BadRequestException(f"Mobility plan not found: {data.mobility_plan_id}")

    move = await employee_move_crud.execute(db, employee=employee, obj_in=data, requested_by=user_id)

    response = EmployeeMoveResponse.model_validate(move)
    response.employee_name = employee.full_name
    response.employee_number = employee.employee_number
    return success_response(data=response.model_dump(), message="Employee move executed")


@router.get("/moves", summary="List employee moves", response_model=PagedResponseModel[EmployeeMoveResponse])
async def get_moves(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    employee_id: Optional[str] = Query(None, description="Employee"),
    move_type: Optional[MoveType] = Query(None, description="Move type"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    rows, total = await employee_move_crud.list_with_employee(
        db,
        skip=skip,
        limit=page_size,
        employee_id=employee_id,
        move_type=move_type.value if move_type else None,
    )
    items = []
    for move, employee in rows:
        response = EmployeeMoveResponse.model_validate(move)
        response.employee_name = employee.full_name
        response.employee_number = employee.employee_number
        items.append(response.model_dump())
    return paged_response(items, total, page, page_size)


# ==================== Mobility plans ====================

@router.post("/plans/bulk", summary="Bulk mobility planning", response_model=ResponseModel[JobStartedResponse])
async def bulk_mobility_plans(
    data: BulkMobilityRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    user_id: str = Depends(get_current_user_id),
):
    if data.selection_type != "all" and not data.identifier and not data.employee_ids:
        raise BadRequestException(f"identifier is required for selection_type '{data.selection_type}'")
    employees = await employee_crud.select_for_bulk(
        db,
        selection_type=data.selection_type,
        identifier=data.identifier,
        employee_ids=data.employee_ids,
    )
    if not employees:
        raise BadRequestException("No employees match the selection")

    session = await upload_session_crud.start(
        db,
        session_name=f"Mobility planning: {data.selection_type} {data.identifier or ''}".strip(),
        session_type=SessionType.MOBILITY_PLANNING.value,
        total=len(employees),
        created_by=user_id,
        extra={"selection_type": data.selection_type, "identifier": data.identifier},
    )
    await db.commit()

    background_tasks.add_task(
        run_mobility_planning,
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
            message="Mobility planning started, poll the progress endpoint",
        ).model_dump(),
        message="Bulk mobility planning started"
    )


@router.post("/plans/{employee_id}", summary="AI mobility plan", response_model=DictResponse)
async def create_mobility_plan(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Generate and store a mobility plan for one employee

    The plan text comes with the rule-based mobility score; when the model
    is unreachable the stored plan is the fallback text and `fallback` is true.
    """
    employee = await employee_crud.get(db, employee_id)
    if not employee:
        raise NotFoundException(f"Employee not found: {employee_id}")

    roles = await standard_role_crud.get_active(db)
    record = await get_mobility_service().create_plan(db, employee, roles, user_id=user_id)
    return success_response(
        data={"analysis_id": record.id, "employee_id": employee.id, **record.analysis_result},
        message="Mobility plan created"
    )


@router.get("/plans", summary="List mobility plans", response_model=PagedResponseModel[AnalysisResultResponse])
async def get_mobility_plans(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    employee_id: Optional[str] = Query(None, description="Employee"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {"analysis_type": AnalysisType.MOBILITY_PLAN.value, "employee_id": employee_id}
    plans = await analysis_result_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await analysis_result_crud.count(db, filters=filters)
    items = [AnalysisResultResponse.model_validate(p).model_dump() for p in plans]
    return paged_response(items, total, page, page_size)
