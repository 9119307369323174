"""
Employee API routes
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
from hrportal.core.exceptions import (
    NotFoundException,
    ConflictException,
    BadRequestException,
    UpstreamAIException,
)
from hrportal.crud import (
    employee_crud, standard_role_crud, skill_crud, employee_skill_crud, employee_certification_crud,
)
from hrportal.models import (
    Employee,
    EmployeeCreate,
    EmployeeUpdate,
    EmployeeResponse,
    EmployeeListResponse,
    RoleAssignmentStatus,
    EmployeeSkillCreate,
    EmployeeSkillUpdate,
    EmployeeSkillResponse,
    EmployeeCertificationCreate,
    EmployeeCertificationUpdate,
    EmployeeCertificationResponse,
)
from hrportal.services.ai import get_role_assignment_service, LLMResponseError

router = APIRouter()


async def _employee_response(db: AsyncSession, employee: Employee) -> dict:
    response = EmployeeResponse.model_validate(employee)
    if employee.standard_role_id:
        role = await standard_role_crud.get(db, employee.standard_role_id)
        response.standard_role_title = role.role_title if role else None
    return response.model_dump()


async def _get_employee(db: AsyncSession, employee_id: str) -> Employee:
    employee = await employee_crud.get(db, employee_id)
    if not employee:
        raise NotFoundException(f"Employee not found: {employee_id}")
    return employee


@router.get("", summary="List employees", response_model=PagedResponseModel[EmployeeListResponse])
async def get_employees(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    department: Optional[str] = Query(None, description="Department"),
    source_company: Optional[str] = Query(None, description="Source company"),
    role_assignment_status: Optional[str] = Query(None, description="Role assignment status"),
    standard_role_id: Optional[str] = Query(None, description="Assigned standard role"),
    is_active: Optional[bool] = Query(None, description="Active flag"),
    search: Optional[str] = Query(None, description="Name, number or position"),
    db: AsyncSession = Depends(get_db),
):
    """
    List employees with paging and filters
    """
    skip = (page - 1) * page_size
    employees, total = await employee_crud.search(
        db,
        skip=skip,
        limit=page_size,
        department=department,
        source_company=source_company,
        role_assignment_status=role_assignment_status,
        standard_role_id=standard_role_id,
        is_active=is_active,
        search=search,
    )
    items = [EmployeeListResponse.model_validate(e).model_dump() for e in employees]
    return paged_response(items, total, page, page_size)


@router.post("", summary="Create employee", response_model=ResponseModel[EmployeeResponse])
async def create_employee(
    data: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    existing = await employee_crud.get_by_number(db, data.employee_number)
    if existing:
        raise ConflictException(f"Employee number '{data.employee_number}' already exists")
    if data.standard_role_id and not await standard_role_crud.get(db, data.standard_role_id):
        raise BadRequestException(f"Standard role not found: {data.standard_role_id}")

    obj_in = data.model_dump()
    obj_in["uploaded_by"] = user_id
    if data.standard_role_id:
        obj_in["role_assignment_status"] = RoleAssignmentStatus.MANUAL.value
    employee = await employee_crud.create(db, obj_in=obj_in)
    return success_response(
        data=await _employee_response(db, employee),
        message="Employee created"
    )


@router.get("/departments", summary="List departments", response_model=ResponseModel[list[str]])
async def get_departments(db: AsyncSession = Depends(get_db)):
    return success_response(data=await employee_crud.departments(db))


@router.get("/{employee_id}", summary="Get employee", response_model=ResponseModel[EmployeeResponse])
async def get_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
):
    employee = await _get_employee(db, employee_id)
    return success_response(data=await _employee_response(db, employee))


@router.patch("/{employee_id}", summary="Update employee", response_model=ResponseModel[EmployeeResponse])
async def update_employee(
    employee_id: str,
    data: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update employee fields

    Setting standard_role_id here counts as a manual assignment.
    """
    employee = await _get_employee(db, employee_id)
    update_data = data.model_dump(exclude_unset=True)
    if data.standard_role_id:
        if not await standard_role_crud.get(db, data.standard_role_id):
            raise BadRequestException(f"Standard role not found: {data.standard_role_id}")
        update_data["role_assignment_status"] = RoleAssignmentStatus.MANUAL.value
        update_data["assignment_notes"] = "Assigned manually"

    employee = await employee_crud.update(db, db_obj=employee, obj_in=update_data)
    return success_response(
        data=await _employee_response(db, employee),
        message="Employee updated"
    )


@router.delete("/{employee_id}", summary="Delete employee", response_model=MessageResponse)
async def delete_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
):
    await _get_employee(db, employee_id)
    await employee_crud.delete(db, id=employee_id)
    return success_response(message="Employee deleted")


@router.post("/{employee_id}/assign-role", summary="AI role assignment", response_model=DictResponse)
async def assign_role(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    Match one employee against the active standard roles

    The LLM picks a role id when it is configured, otherwise the rule-based
    matcher does. No suitable role leaves the employee as ai_no_match.
    """
    employee = await _get_employee(db, employee_id)
    roles = await standard_role_crud.get_active(db)
    if not roles:
        raise BadRequestException("No standard roles found. Please create standard roles first.")

    service = get_role_assignment_service()
    try:
        suggestion = await service.assign(db, employee, roles)
    except LLMResponseError as exc:
        raise UpstreamAIException(str(exc))
    except Exception as exc:
        raise UpstreamAIException(f"AI service error: {exc}")

    titles = {role.id: role.role_title for role in roles}
    return success_response(
        data={
            "employee_id": employee.id,
            "assigned": suggestion.matched,
            "role_id": suggestion.role_id,
            "role_title": titles.get(suggestion.role_id),
            "method": suggestion.method,
            "score": suggestion.score,
            "role_assignment_status": employee.role_assignment_status,
        },
        message="Role assigned" if suggestion.matched else "No suitable role found"
    )


# ==================== Employee skills ====================

@router.get(
    "/{employee_id}/skills",
    summary="List employee skills",
    response_model=ResponseModel[list[EmployeeSkillResponse]],
)
async def get_employee_skills(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
):
    await _get_employee(db, employee_id)
    items = []
    for employee_skill, skill_name in await employee_skill_crud.get_by_employee(db, employee_id):
        response = EmployeeSkillResponse.model_validate(employee_skill)
        response.skill_name = skill_name
        items.append(response.model_dump())
    return success_response(data=items)


@router.post(
    "/{employee_id}/skills",
    summary="Add employee skill",
    response_model=ResponseModel[EmployeeSkillResponse],
)
async def add_employee_skill(
    employee_id: str,
    data: EmployeeSkillCreate,
    db: AsyncSession = Depends(get_db),
):
    if data.employee_id != employee_id:
        raise BadRequestException("employee_id in body does not match the path")
    await _get_employee(db, employee_id)
    skill = await skill_crud.get(db, data.skill_id)
    if not skill:
        raise NotFoundException(f"Skill not found: {data.skill_id}")
    if await employee_skill_crud.get_pair(db, employee_id, data.skill_id):
        raise ConflictException(f"Employee already has skill '{skill.name}'")

    employee_skill = await employee_skill_crud.create(db, obj_in=data)
    response = EmployeeSkillResponse.model_validate(employee_skill)
    response.skill_name = skill.name
    return success_response(data=response.model_dump(), message="Skill added")


@router.patch(
    "/{employee_id}/skills/{employee_skill_id}",
    summary="Update employee skill",
    response_model=ResponseModel[EmployeeSkillResponse],
)
async def update_employee_skill(
    employee_id: str,
    employee_skill_id: str,
    data: EmployeeSkillUpdate,
    db: AsyncSession = Depends(get_db),
):
    employee_skill = await employee_skill_crud.get(db, employee_skill_id)
    if not employee_skill or employee_skill.employee_id != employee_id:
        raise NotFoundException(f"Employee skill not found: {employee_skill_id}")
    employee_skill = await employee_skill_crud.update(db, db_obj=employee_skill, obj_in=data)
    return success_response(
        data=EmployeeSkillResponse.model_validate(employee_skill).model_dump(),
        message="Skill updated"
    )


@router.delete(
    "/{employee_id}/skills/{employee_skill_id}",
    summary="Remove employee skill",
    response_model=MessageResponse,
)
async def delete_employee_skill(
    employee_id: str,
    employee_skill_id: str,
    db: AsyncSession = Depends(get_db),
):
    employee_skill = await employee_skill_crud.get(db, employee_skill_id)
    if not employee_skill or employee_skill.employee_id != employee_id:
        raise NotFoundException(f"Employee skill not found: {employee_skill_id}")
    await employee_skill_crud.delete(db, id=employee_skill_id)
    return success_response(message="Skill removed")


# ==================== Employee certifications ====================

async def _get_certification(db: AsyncSession, employee_id: str, certification_id: str):
    certification = await employee_certification_crud.get(db, certification_id)
    if not certification or certification.employee_id != employee_id:
        raise NotFoundException(f"Certification not found: {certification_id}")
    return certification


@router.get(
    "/{employee_id}/certifications",
    summary="List employee certifications",
    response_model=ResponseModel[list[EmployeeCertificationResponse]],
)
async def get_employee_certifications(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Soonest expiry first, certifications without expiry last"""
    await _get_employee(db, employee_id)
    certifications = await employee_certification_crud.get_by_employee(db, employee_id)
    return success_response(
        data=[EmployeeCertificationResponse.model_validate(c).model_dump() for c in certifications]
    )


@router.post(
    "/{employee_id}/certifications",
    summary="Add employee certification",
    response_model=ResponseModel[EmployeeCertificationResponse],
)
async def add_employee_certification(
    employee_id: str,
    data: EmployeeCertificationCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Also lists the certification name on the employee's certifications, which
    the AI prompts read
    """
    employee = await _get_employee(db, employee_id)
    if data.issue_date and data.expiry_date and data.expiry_date < data.issue_date:
        raise BadRequestException("expiry_date is before issue_date")

    certification = await employee_certification_crud.create(
        db, obj_in={**data.model_dump(), "employee_id": employee_id}
    )
    if data.certification_name not in (employee.certifications or []):
        await employee_crud.update(
            db, db_obj=employee,
            obj_in={"certifications": [*(employee.certifications or []), data.certification_name]},
        )
    return success_response(
        data=EmployeeCertificationResponse.model_validate(certification).model_dump(),
        message="Certification added"
    )


@router.patch(
    "/{employee_id}/certifications/{certification_id}",
    summary="Update employee certification",
    response_model=ResponseModel[EmployeeCertificationResponse],
)
async def update_employee_certification(
    employee_id: str,
    certification_id: str,
    data: EmployeeCertificationUpdate,
    db: AsyncSession = Depends(get_db),
):
    certification = await _get_certification(db, employee_id, certification_id)
    certification = await employee_certification_crud.update(db, db_obj=certification, obj_in=data)
    return success_response(
        data=EmployeeCertificationResponse.model_validate(certification).model_dump(),
        message="Certification updated"
    )


@router.delete(
    "/{employee_id}/certifications/{certification_id}",
    summary="Remove employee certification",
    response_model=MessageResponse,
)
async def delete_employee_certification(
    employee_id: str,
    certification_id: str,
    db: AsyncSession = Depends(get_db),
):
    await _get_certification(db, employee_id, certification_id)
    await employee_certification_crud.delete(db, id=certification_id)
    return success_response(message="Certification removed")
