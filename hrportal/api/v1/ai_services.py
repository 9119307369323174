"""
AI service API routes

Provides:
- LLM status
- Job description portfolio intelligence
- Stored analysis results
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
from hrportal.core.exceptions import NotFoundException
from hrportal.crud import analysis_result_crud
from hrportal.models import (
    AnalysisResultResponse, AnalysisStatus, JDIntelligenceRequest, WorkforceAnalysisRequest,
)
from hrportal.services.ai import get_llm_client, get_jd_intelligence_service, get_workforce_intelligence_service
from hrportal.services.bulk import job_slots

router = APIRouter()


# ============ LLM status ============

@router.get("/status", summary="LLM service status", response_model=DictResponse)
async def get_ai_status():
    """
    LLM configuration and bulk job slots
    """
    status = get_llm_client().get_status()
    status["tasks"] = job_slots.status()
    return success_response(data=status)


# ============ Job description intelligence ============

@router.post("/job-descriptions/intelligence", summary="Job description intelligence", response_model=DictResponse)
async def job_descriptions_intelligence(
    data: JDIntelligenceRequest,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Analyse the stored job descriptions

    analysis_type is one of jd_optimization, market_alignment,
    skills_mapping, compliance_analysis. If the model reply cannot be used
    the documented fallback report is returned with `fallback: true`.
    """
    result = await get_jd_intelligence_service().analyze(
        db,
        analysis_type=data.analysis_type,
        department_filter=data.department_filter,
        role_filter=data.role_filter,
        user_id=user_id,
    )
    return success_response(data=result, message="Analysis completed")


# ============ Workforce intelligence ============

async def _workforce_analysis(area: str, data: WorkforceAnalysisRequest, db: AsyncSession, user_id: str):
    result = await get_workforce_intelligence_service().analyze(db, area, data, user_id=user_id)
    return success_response(data=result, message="Analysis completed")


@router.post("/succession-planning", summary="Succession planning analysis", response_model=DictResponse)
async def succession_planning(
    data: WorkforceAnalysisRequest,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    leadership_pipeline, succession_readiness, high_potential_identification
    or leadership_gap_analysis; position_level narrows the focus
    """
    return await _workforce_analysis("succession_planning", data, db, user_id)


@router.post("/diversity-inclusion", summary="Diversity and inclusion analysis", response_model=DictResponse)
async def diversity_inclusion(
    data: WorkforceAnalysisRequest,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    bias_detection, diversity_metrics, inclusion_sentiment or
    pay_equity_analysis; metric_type narrows the focus
    """
    return await _workforce_analysis("diversity_inclusion", data, db, user_id)


@router.post("/role-intelligence", summary="Advanced role intelligence", response_model=DictResponse)
async def role_intelligence(
    data: WorkforceAnalysisRequest,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    role_evolution, redundancy_analysis, future_prediction or
    competitiveness_scoring; time_horizon sets how far ahead to look
    """
    return await _workforce_analysis("role_intelligence", data, db, user_id)


@router.post("/learning-development", summary="Learning and development analysis", response_model=DictResponse)
async def learning_development(
    data: WorkforceAnalysisRequest,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    personalized_learning, skills_development, training_effectiveness or
    learning_strategy; employee_id puts one employee first
    """
    return await _workforce_analysis("learning_development", data, db, user_id)


# ============ Analysis results ============

@router.get("/analysis-results", summary="List analysis results", response_model=PagedResponseModel[AnalysisResultResponse])
async def get_analysis_results(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    analysis_type: Optional[str] = Query(None, description="Analysis type"),
    status: Optional[AnalysisStatus] = Query(None, description="completed / fallback / failed"),
    employee_id: Optional[str] = Query(None, description="Employee"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {
        "analysis_type": analysis_type,
        "status": status.value if status else None,
        "employee_id": employee_id,
    }
    results = await analysis_result_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await analysis_result_crud.count(db, filters=filters)
    items = [AnalysisResultResponse.model_validate(r).model_dump() for r in results]
    return paged_response(items, total, page, page_size)


@router.get(
    "/analysis-results/{result_id}",
    summary="Get analysis result",
    response_model=ResponseModel[AnalysisResultResponse],
)
async def get_analysis_result(
    result_id: str,
    db: AsyncSession = Depends(get_db),
):
    result = await analysis_result_crud.get(db, result_id)
    if not result:
        raise NotFoundException(f"Analysis result not found: {result_id}")
    return success_response(data=AnalysisResultResponse.model_validate(result).model_dump())


@router.delete("/analysis-results/{result_id}", summary="Delete analysis result", response_model=MessageResponse)
async def delete_analysis_result(
    result_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await analysis_result_crud.get(db, result_id):
        raise NotFoundException(f"Analysis result not found: {result_id}")
    await analysis_result_crud.delete(db, id=result_id)
    return success_response(message="Analysis result deleted")
