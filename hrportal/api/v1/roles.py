"""
Standard role API routes

Standard roles, XL/SMART role catalogue uploads, AI standardization and
the resulting role mappings
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, UploadFile, File, Form
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
from hrportal.crud import (
    standard_role_crud,
    uploaded_role_crud,
    role_mapping_crud,
    upload_session_crud,
)
from hrportal.models import (
    StandardRoleCreate,
    StandardRoleUpdate,
    StandardRoleResponse,
    UploadedRoleResponse,
    RoleMappingUpdate,
    RoleMappingResponse,
    MappingStatus,
    RoleUploadRequest,
    SessionType,
    SessionStatus,
)
from hrportal.services.ai import get_role_standardization_service
from hrportal.services.spreadsheet import read_spreadsheet, normalize_role_row

router = APIRouter()


# ==================== Role catalogue uploads ====================

async def _store_uploaded_roles(
    db: AsyncSession,
    *,
    session_name: Optional[str],
    xl_rows: list,
    smart_rows: list,
    file_names: list,
    user_id: str,
) -> dict:
    total = len(xl_rows) + len(smart_rows)
    if total == 0:
        raise BadRequestException("No role rows to upload")

    session = await upload_session_crud.start(
        db,
        session_name=session_name or f"Role upload ({total} roles)",
        session_type=SessionType.ROLE_UPLOAD.value,
        total=total,
        created_by=user_id,
        file_names=file_names,
    )
    for source_company, rows in (("xl", xl_rows), ("smart", smart_rows)):
        for row in rows:
            await uploaded_role_crud.create(db, obj_in={
                "session_id": session.id,
                **normalize_role_row(row, source_company),
            })

    await upload_session_crud.update_progress(
        db,
        db_obj=session,
        progress={"processed": total, "completed": total, "xl_roles": len(xl_rows), "smart_roles": len(smart_rows)},
        status=SessionStatus.UPLOADED,
    )
    return {
        "session_id": session.id,
        "status": session.status,
        "xl_roles": len(xl_rows),
        "smart_roles": len(smart_rows),
        "total": total,
    }


@router.post("/uploads", summary="Upload role catalogues", response_model=DictResponse)
async def upload_roles(
    data: RoleUploadRequest,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Store XL and SMART role rows for standardization

    Rows are keyed by the catalogue headers (RoleTitle, Department,
    RoleFamily, SeniorityBand, ...). The session ends up `uploaded`.
    """
    result = await _store_uploaded_roles(
        db,
        session_name=data.session_name,
        xl_rows=data.xl_roles,
        smart_rows=data.smart_roles,
        file_names=[],
        user_id=user_id,
    )
    return success_response(data=result, message="Roles uploaded")


@router.post("/uploads/file", summary="Upload role catalogue files", response_model=DictResponse)
async def upload_role_files(
    xl_file: Optional[UploadFile] = File(None, description="XL role catalogue"),
    smart_file: Optional[UploadFile] = File(None, description="SMART role catalogue"),
    session_name: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if xl_file is None and smart_file is None:
        raise BadRequestException("Upload at least one of xl_file or smart_file")

    xl_rows, smart_rows, file_names = [], [], []
    if xl_file is not None:
        xl_rows = read_spreadsheet(await xl_file.read(), xl_file.filename or "xl.xlsx")
        file_names.append(xl_file.filename)
    if smart_file is not None:
        smart_rows = read_spreadsheet(await smart_file.read(), smart_file.filename or "smart.xlsx")
        file_names.append(smart_file.filename)

    result = await _store_uploaded_roles(
        db,
        session_name=session_name,
        xl_rows=xl_rows,
        smart_rows=smart_rows,
        file_names=file_names,
        user_id=user_id,
    )
    return success_response(data=result, message="Roles uploaded")


@router.get(
    "/uploads/{session_id}",
    summary="List uploaded roles",
    response_model=ResponseModel[list[UploadedRoleResponse]],
)
async def get_uploaded_roles(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await upload_session_crud.get(db, session_id):
        raise NotFoundException(f"Upload session not found: {session_id}")
    roles = await uploaded_role_crud.get_by_session(db, session_id)
    return success_response(data=[UploadedRoleResponse.model_validate(r).model_dump() for r in roles])


@router.post("/standardize/{session_id}", summary="AI role standardization", response_model=DictResponse)
async def standardize_roles(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Turn the uploaded roles of a session into standard roles and mappings

    Mappings with confidence of 80 or more are auto_mapped, the rest wait
    for manual review.
    """
    service = get_role_standardization_service()
    result = await service.standardize(db, session_id, user_id=user_id)
    return success_response(data=result, message="Roles standardized")


# ==================== Role mappings ====================

@router.get("/mappings", summary="List role mappings", response_model=PagedResponseModel[RoleMappingResponse])
async def get_mappings(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    mapping_status: Optional[MappingStatus] = Query(None, description="Mapping status"),
    catalog_id: Optional[str] = Query(None, description="Upload session"),
    standard_role_id: Optional[str] = Query(None, description="Standard role"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {
        "mapping_status": mapping_status.value if mapping_status else None,
        "catalog_id": catalog_id,
        "standard_role_id": standard_role_id,
    }
    mappings = await role_mapping_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await role_mapping_crud.count(db, filters=filters)
    items = [RoleMappingResponse.model_validate(m).model_dump() for m in mappings]
    return paged_response(items, total, page, page_size)


@router.patch("/mappings/{mapping_id}", summary="Review role mapping", response_model=ResponseModel[RoleMappingResponse])
async def update_mapping(
    mapping_id: str,
    data: RoleMappingUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Re-point a mapping or approve/reject it

    Approving or rejecting clears requires_manual_review.
    """
    mapping = await role_mapping_crud.get(db, mapping_id)
    if not mapping:
        raise NotFoundException(f"Role mapping not found: {mapping_id}")

    update_data = {}
    if data.standard_role_id:
        role = await standard_role_crud.get(db, data.standard_role_id)
        if not role:
            raise BadRequestException(f"Standard role not found: {data.standard_role_id}")
        update_data.update({
            "standard_role_id": role.id,
            "standardized_role_title": role.role_title,
            "standardized_department": role.department,
            "standardized_level": role.role_level,
            "job_family": role.job_family,
        })
    if data.mapping_status:
        update_data["mapping_status"] = data.mapping_status.value
        update_data["requires_manual_review"] = data.mapping_status == MappingStatus.MANUAL_REVIEW

    mapping = await role_mapping_crud.update(db, db_obj=mapping, obj_in=update_data)
    return success_response(
        data=RoleMappingResponse.model_validate(mapping).model_dump(),
        message="Mapping updated"
    )


# ==================== Standard roles ====================

@router.get("", summary="List standard roles", response_model=PagedResponseModel[StandardRoleResponse])
async def get_standard_roles(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    department: Optional[str] = Query(None, description="Department"),
    job_family: Optional[str] = Query(None, description="Job family"),
    role_level: Optional[str] = Query(None, description="Role level"),
    is_active: Optional[bool] = Query(None, description="Active flag"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {
        "department": department,
        "job_family": job_family,
        "role_level": role_level,
        "is_active": is_active,
    }
    roles = await standard_role_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await standard_role_crud.count(db, filters=filters)
    counts = await standard_role_crud.employee_counts(db)

    items = []
    for role in roles:
        response = StandardRoleResponse.model_validate(role)
        response.employee_count = counts.get(role.id, 0)
        items.append(response.model_dump())
    return paged_response(items, total, page, page_size)


@router.post("", summary="Create standard role", response_model=ResponseModel[StandardRoleResponse])
async def create_standard_role(
    data: StandardRoleCreate,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if await standard_role_crud.get_by_title(db, data.role_title):
        raise ConflictException(f"Standard role '{data.role_title}' already exists")
    if data.experience_range_max < data.experience_range_min:
        raise BadRequestException("experience_range_max must not be below experience_range_min")

    obj_in = data.model_dump()
    obj_in["created_by"] = user_id
    role = await standard_role_crud.create(db, obj_in=obj_in)
    return success_response(
        data=StandardRoleResponse.model_validate(role).model_dump(),
        message="Standard role created"
    )


@router.get("/{role_id}", summary="Get standard role", response_model=ResponseModel[StandardRoleResponse])
async def get_standard_role(
    role_id: str,
    db: AsyncSession = Depends(get_db),
):
    role = await standard_role_crud.get(db, role_id)
    if not role:
        raise NotFoundException(f"Standard role not found: {role_id}")
    response = StandardRoleResponse.model_validate(role)
    response.employee_count = (await standard_role_crud.employee_counts(db)).get(role.id, 0)
    return success_response(data=response.model_dump())


@router.patch("/{role_id}", summary="Update standard role", response_model=ResponseModel[StandardRoleResponse])
async def update_standard_role(
    role_id: str,
    data: StandardRoleUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a standard role; every change bumps its version
    """
    role = await standard_role_crud.get(db, role_id)
    if not role:
        raise NotFoundException(f"Standard role not found: {role_id}")
    if data.role_title and data.role_title.lower() != role.role_title.lower():
        if await standard_role_crud.get_by_title(db, data.role_title):
            raise ConflictException(f"Standard role '{data.role_title}' already exists")

    update_data = data.model_dump(exclude_unset=True)
    update_data["version"] = role.version + 1
    role = await standard_role_crud.update(db, db_obj=role, obj_in=update_data)
    if role.experience_range_max < role.experience_range_min:
        raise BadRequestException("experience_range_max must not be below experience_range_min")
    return success_response(
        data=StandardRoleResponse.model_validate(role).model_dump(),
        message="Standard role updated"
    )


@router.delete("/{role_id}", summary="Delete standard role", response_model=MessageResponse)
async def delete_standard_role(
    role_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a standard role that no employee is assigned to
    """
    role = await standard_role_crud.get(db, role_id)
    if not role:
        raise NotFoundException(f"Standard role not found: {role_id}")
    assigned = (await standard_role_crud.employee_counts(db)).get(role_id, 0)
    if assigned:
        raise ConflictException(
            f"Standard role is assigned to {assigned} employees",
            data={"employee_count": assigned},
        )
    await standard_role_crud.delete(db, id=role_id)
    return success_response(message="Standard role deleted")
