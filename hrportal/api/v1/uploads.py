"""
Upload API routes

Roster uploads, upload sessions and their progress, bulk role assignment
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, BackgroundTasks, UploadFile, File, Form
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrportal.core.auth import get_current_user_id
from hrportal.core.database import get_db, get_session_factory
from hrportal.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
)
from hrportal.core.exceptions import NotFoundException, BadRequestException
from hrportal.crud import upload_session_crud, employee_crud, standard_role_crud
from hrportal.models import (
    EmployeeUploadRequest,
    UploadSessionResponse,
    SessionProgressResponse,
    JobStartedResponse,
    SessionType,
)
from hrportal.services.bulk import run_employee_upload, run_role_assignment, session_progress
from hrportal.services.spreadsheet import read_spreadsheet

router = APIRouter()


async def _start_employee_upload(
    db: AsyncSession,
    background_tasks: BackgroundTasks,
    session_factory: async_sessionmaker,
    *,
    rows: List[dict],
    session_name: Optional[str],
    source_company: str,
    file_names: List[str],
    user_id: str,
) -> dict:
    if not rows:
        raise BadRequestException("No employee rows to upload")

    session = await upload_session_crud.start(
        db,
        session_name=session_name or f"Employee upload ({len(rows)} rows)",
        session_type=SessionType.EMPLOYEE_UPLOAD.value,
        total=len(rows),
        created_by=user_id,
        file_names=file_names,
    )
    # the job reads the session from its own connection
    await db.commit()

    background_tasks.add_task(
        run_employee_upload,
        session.id,
        rows,
        default_company=source_company,
        uploaded_by=user_id,
        session_factory=session_factory,
    )
    return JobStartedResponse(
        session_id=session.id,
        status=session.status,
        total=len(rows),
        message="Upload started, poll the progress endpoint",
    ).model_dump()


@router.post("/employees", summary="Upload employee rows", response_model=ResponseModel[JobStartedResponse])
async def upload_employees(
    data: EmployeeUploadRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    user_id: str = Depends(get_current_user_id),
):
    """
    Start a roster upload from rows keyed by spreadsheet header

    Rows missing employee number, name or position count as errors; an
    existing employee number updates that employee.
    """
    result = await _start_employee_upload(
        db,
        background_tasks,
        session_factory,
        rows=data.employees,
        session_name=data.session_name,
        source_company=data.source_company,
        file_names=[],
        user_id=user_id,
    )
    return success_response(data=result, message="Upload started")


@router.post("/employees/file", summary="Upload employee spreadsheets", response_model=ResponseModel[JobStartedResponse])
async def upload_employee_files(
    background_tasks: BackgroundTasks,
    files: List[UploadFile] = File(..., description=".xlsx, .xls or .csv files"),
    session_name: Optional[str] = Form(None),
    source_company: str = Form("xlsmart"),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    user_id: str = Depends(get_current_user_id),
):
    """
    Start a roster upload from spreadsheet files

    Every sheet of every file is read; rows are normalized the same way as
    JSON uploads.
    """
    rows: List[dict] = []
    file_names: List[str] = []
    for upload in files:
        content = await upload.read()
        rows.extend(read_spreadsheet(content, upload.filename or "upload.xlsx"))
        file_names.append(upload.filename or "upload.xlsx")

    result = await _start_employee_upload(
        db,
        background_tasks,
        session_factory,
        rows=rows,
        session_name=session_name,
        source_company=source_company,
        file_names=file_names,
        user_id=user_id,
    )
    return success_response(data=result, message="Upload started")


@router.get("/sessions", summary="List upload sessions", response_model=PagedResponseModel[UploadSessionResponse])
async def get_sessions(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    session_type: Optional[str] = Query(None, description="Session type"),
    status: Optional[str] = Query(None, description="Status"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {"session_type": session_type, "status": status}
    sessions = await upload_session_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await upload_session_crud.count(db, filters=filters)
    items = [UploadSessionResponse.model_validate(s).model_dump() for s in sessions]
    return paged_response(items, total, page, page_size)


@router.get("/sessions/{session_id}", summary="Get upload session", response_model=ResponseModel[UploadSessionResponse])
async def get_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    session = await upload_session_crud.get(db, session_id)
    if not session:
        raise NotFoundException(f"Upload session not found: {session_id}")
    return success_response(data=UploadSessionResponse.model_validate(session).model_dump())


@router.get(
    "/sessions/{session_id}/progress",
    summary="Get bulk job progress",
    response_model=ResponseModel[SessionProgressResponse],
)
async def get_session_progress(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    Progress of a bulk job (polled)
    """
    session = await upload_session_crud.get(db, session_id)
    if not session:
        raise NotFoundException(f"Upload session not found: {session_id}")
    return success_response(data=session_progress(session).model_dump())


@router.post(
    "/sessions/{session_id}/assign-roles",
    summary="Assign roles to an upload",
    response_model=ResponseModel[JobStartedResponse],
)
async def assign_session_roles(
    session_id: str,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    user_id: str = Depends(get_current_user_id),
):
    """
    Start role assignment for every unassigned employee of an upload session

    Progress is tracked on a new role_assignment session whose id is returned.
    """
    source = await upload_session_crud.get(db, session_id)
    if not source:
        raise NotFoundException(f"Upload session not found: {session_id}")
    if not await standard_role_crud.get_active(db):
        raise BadRequestException("No standard roles found. Please create standard roles first.")
    employees = await employee_crud.get_unassigned_in_session(db, session_id)
    if not employees:
        raise BadRequestException("No unassigned employees found for this session")

    job = await upload_session_crud.start(
        db,
        session_name=f"Role assignment for {source.session_name}",
        session_type=SessionType.ROLE_ASSIGNMENT.value,
        total=len(employees),
        created_by=user_id,
        extra={"source_session_id": session_id},
    )
    await db.commit()

    background_tasks.add_task(
        run_role_assignment,
        job.id,
        [e.id for e in employees],
        session_factory=session_factory,
    )
    return success_response(
        data=JobStartedResponse(
            session_id=job.id,
            status=job.status,
            total=len(employees),
            message="Role assignment started, poll the progress endpoint",
        ).model_dump(),
        message="Role assignment started"
    )
