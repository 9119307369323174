"""
Analytics API routes

Aggregate figures for the dashboards
"""
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.core.database import get_db
from hrportal.core.response import success_response, DictResponse
from hrportal.crud import (
    employee_crud,
    employee_move_crud,
    analysis_result_crud,
    skill_crud,
    employee_skill_crud,
    skill_assessment_crud,
    job_description_crud,
    standard_role_crud,
    role_mapping_crud,
    development_plan_crud,
    employee_certification_crud,
)
from hrportal.models import AnalysisType, JobDescriptionListResponse

router = APIRouter()


def _percent(part: int, total: int) -> int:
    if not total:
        return 0
    return min(100, round(part / total * 100))


@router.get("/workforce", summary="Workforce overview", response_model=DictResponse)
async def workforce_analytics(db: AsyncSession = Depends(get_db)):
    total = await employee_crud.count(db)
    active = await employee_crud.count(db, filters={"is_active": True})
    assigned = await employee_crud.count_assigned(db)
    return success_response(data={
        "total_employees": total,
        "active_employees": active,
        "by_department": await employee_crud.count_grouped(db, "current_department"),
        "by_company": await employee_crud.count_grouped(db, "source_company"),
        "by_assignment_status": await employee_crud.count_grouped(db, "role_assignment_status"),
        "assigned_employees": assigned,
        "assigned_ratio": _percent(assigned, active),
        "average_performance": await employee_crud.average_performance(db),
    })


@router.get("/mobility", summary="Mobility overview", response_model=DictResponse)
async def mobility_analytics(db: AsyncSession = Depends(get_db)):
    """
    Mobility rate counts employees with an executed move in the last year;
    retention is the share of employees still active.
    """
    total = await employee_crud.count(db)
    active = await employee_crud.count(db, filters={"is_active": True})
    moved = await employee_move_crud.count_moved_employees(db, days=365)
    return success_response(data={
        "total_employees": total,
        "mobility_rate": _percent(moved, total),
        "retention_rate": _percent(active, total),
        "moved_employees": moved,
        "active_mobility_plans": await analysis_result_crud.count_distinct_employees(
            db, AnalysisType.MOBILITY_PLAN.value
        ),
        "at_risk_employees": await employee_crud.count_at_risk(db),
        "moves_by_type": await employee_move_crud.count_by_type(db),
    })


@router.get("/skills", summary="Skills overview", response_model=DictResponse)
async def skills_analytics(db: AsyncSession = Depends(get_db)):
    return success_response(data={
        "total_skills": await skill_crud.count(db),
        "categories": sorted(await skill_crud.categories(db)),
        "employees_with_skills": await employee_skill_crud.count_distinct_employees(db),
        "total_assessments": await skill_assessment_crud.count(db),
        "fallback_assessments": await skill_assessment_crud.count(db, filters={"is_fallback": True}),
        "assessed_employees": await skill_assessment_crud.count_distinct_employees(db),
        "average_match": await skill_assessment_crud.average_match(db),
    })


@router.get("/job-descriptions", summary="Job description overview", response_model=DictResponse)
async def job_description_analytics(db: AsyncSession = Depends(get_db)):
    recent = await job_description_crud.get_multi(db, limit=5)
    return success_response(data={
        "total": await job_description_crud.count(db),
        "by_status": await job_description_crud.count_by_status(db),
        "ai_generated": await job_description_crud.count(db, filters={"ai_generated": True}),
        "recent": [JobDescriptionListResponse.model_validate(jd).model_dump() for jd in recent],
    })


@router.get("/roles", summary="Role overview", response_model=DictResponse)
async def role_analytics(db: AsyncSession = Depends(get_db)):
    return success_response(data={
        "total_roles": await standard_role_crud.count(db),
        "active_roles": await standard_role_crud.count(db, filters={"is_active": True}),
        "mappings_by_status": await role_mapping_crud.count_by_status(db),
        "total_mappings": await role_mapping_crud.count(db),
        "assigned_employees": await employee_crud.count_assigned(db),
    })


@router.get("/development", summary="Development overview", response_model=DictResponse)
async def development_analytics(db: AsyncSession = Depends(get_db)):
    return success_response(data={
        "total_plans": await development_plan_crud.count(db),
        "by_status": await development_plan_crud.count_by_status(db),
        "average_progress": await development_plan_crud.average_progress(db),
        "employees_with_plans": await development_plan_crud.count_distinct_employees(db),
        "fallback_plans": await development_plan_crud.count(db, filters={"is_fallback": True}),
    })


@router.get("/certifications", summary="Certification overview", response_model=DictResponse)
async def certification_analytics(db: AsyncSession = Depends(get_db)):
    """
    Active certifications have no expiry date or expire after today. Renewal
    rate is the active share of all certifications; compliance rate is the
    share of employees holding at least one certification.
    """
    counts = await employee_certification_crud.expiry_counts(db, date.today())
    total_employees = await employee_crud.count(db)
    return success_response(data={
        "total_certifications": counts["total"],
        "active_certifications": counts["active"],
        "expiring_soon": counts["expiring_soon"],
        "renewal_rate": _percent(counts["active"], counts["total"]),
        "compliance_rate": _percent(counts["certified_employees"], total_employees),
        "total_employees": total_employees,
    })
