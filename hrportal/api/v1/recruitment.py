"""
Recruitment API routes

Job postings, candidates, applications, interviews and offers
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.core.database import get_db
from hrportal.core.auth import get_current_user_id
from hrportal.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    MessageResponse,
)
from hrportal.core.exceptions import NotFoundException, ConflictException, BadRequestException
from hrportal.crud import (
    job_crud,
    candidate_crud,
    job_application_crud,
    interview_crud,
    offer_crud,
    job_description_crud,
)
from hrportal.models import (
    JobCreate,
    JobUpdate,
    JobResponse,
    JobStatus,
    CandidateCreate,
    CandidateUpdate,
    CandidateResponse,
    JobApplicationCreate,
    JobApplicationUpdate,
    JobApplicationResponse,
    ApplicationStatus,
    InterviewCreate,
    InterviewUpdate,
    InterviewResponse,
    OfferCreate,
    OfferUpdate,
    OfferResponse,
    OfferStatus,
)
from hrportal.models.base import utcnow

router = APIRouter()


def _check_salary(salary_min: Optional[float], salary_max: Optional[float]) -> None:
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise BadRequestException("salary_min cannot exceed salary_max")


# ==================== Jobs ====================

@router.get("/jobs", summary="List jobs", response_model=PagedResponseModel[JobResponse])
async def get_jobs(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    status: Optional[JobStatus] = Query(None, description="Posting status"),
    department: Optional[str] = Query(None, description="Department"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {"status": status, "department": department}
    jobs = await job_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await job_crud.count(db, filters=filters)
    items = [JobResponse.model_validate(j).model_dump() for j in jobs]
    return paged_response(items, total, page, page_size)


@router.post("/jobs", summary="Create job", response_model=ResponseModel[JobResponse])
async def create_job(
    data: JobCreate,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    _check_salary(data.salary_min, data.salary_max)
    if data.job_description_id and not await job_description_crud.get(db, data.job_description_id):
        raise BadRequestException(f"Job description not found: {data.job_description_id}")
    obj_in = data.model_dump()
    obj_in["created_by"] = user_id
    job = await job_crud.create(db, obj_in=obj_in)
    return success_response(data=JobResponse.model_validate(job).model_dump(), message="Job created")


@router.get("/jobs/{job_id}", summary="Get job", response_model=ResponseModel[JobResponse])
async def get_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
):
    job = await job_crud.get(db, job_id)
    if not job:
        raise NotFoundException(f"Job not found: {job_id}")
    return success_response(data=JobResponse.model_validate(job).model_dump())


@router.patch("/jobs/{job_id}", summary="Update job", response_model=ResponseModel[JobResponse])
async def update_job(
    job_id: str,
    data: JobUpdate,
    db: AsyncSession = Depends(get_db),
):
    job = await job_crud.get(db, job_id)
    if not job:
        raise NotFoundException(f"Job not found: {job_id}")
    _check_salary(
        data.salary_min if data.salary_min is not None else job.salary_min,
        data.salary_max if data.salary_max is not None else job.salary_max,
    )
    job = await job_crud.update(db, db_obj=job, obj_in=data)
    return success_response(data=JobResponse.model_validate(job).model_dump(), message="Job updated")


@router.delete("/jobs/{job_id}", summary="Delete job", response_model=MessageResponse)
async def delete_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await job_crud.get(db, job_id):
        raise NotFoundException(f"Job not found: {job_id}")
    if await job_application_crud.count(db, filters={"job_id": job_id}):
        raise ConflictException("Job has applications and cannot be deleted")
    await job_crud.delete(db, id=job_id)
    return success_response(message="Job deleted")


# ==================== Candidates ====================

@router.get("/candidates", summary="List candidates", response_model=PagedResponseModel[CandidateResponse])
async def get_candidates(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    candidates = await candidate_crud.get_multi(db, skip=skip, limit=page_size)
    total = await candidate_crud.count(db)
    items = [CandidateResponse.model_validate(c).model_dump() for c in candidates]
    return paged_response(items, total, page, page_size)


@router.post("/candidates", summary="Create candidate", response_model=ResponseModel[CandidateResponse])
async def create_candidate(
    data: CandidateCreate,
    db: AsyncSession = Depends(get_db),
):
    if await candidate_crud.get_by_email(db, data.email):
        raise ConflictException(f"Candidate with email {data.email} already exists")
    candidate = await candidate_crud.create(db, obj_in=data)
    return success_response(
        data=CandidateResponse.model_validate(candidate).model_dump(),
        message="Candidate created"
    )


@router.get("/candidates/{candidate_id}", summary="Get candidate", response_model=ResponseModel[CandidateResponse])
async def get_candidate(
    candidate_id: str,
    db: AsyncSession = Depends(get_db),
):
    candidate = await candidate_crud.get(db, candidate_id)
    if not candidate:
        raise NotFoundException(f"Candidate not found: {candidate_id}")
    return success_response(data=CandidateResponse.model_validate(candidate).model_dump())


@router.patch("/candidates/{candidate_id}", summary="Update candidate", response_model=ResponseModel[CandidateResponse])
async def update_candidate(
    candidate_id: str,
    data: CandidateUpdate,
    db: AsyncSession = Depends(get_db),
):
    candidate = await candidate_crud.get(db, candidate_id)
    if not candidate:
        raise NotFoundException(f"Candidate not found: {candidate_id}")
    candidate = await candidate_crud.update(db, db_obj=candidate, obj_in=data)
    return success_response(
        data=CandidateResponse.model_validate(candidate).model_dump(),
        message="Candidate updated"
    )


@router.delete("/candidates/{candidate_id}", summary="Delete candidate", response_model=MessageResponse)
async def delete_candidate(
    candidate_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await candidate_crud.get(db, candidate_id):
        raise NotFoundException(f"Candidate not found: {candidate_id}")
    if await job_application_crud.count(db, filters={"candidate_id": candidate_id}):
        raise ConflictException("Candidate has applications and cannot be deleted")
    await candidate_crud.delete(db, id=candidate_id)
    return success_response(message="Candidate deleted")


# ==================== Applications ====================

@router.get("/applications", summary="List applications", response_model=PagedResponseModel[JobApplicationResponse])
async def get_applications(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    job_id: Optional[str] = Query(None, description="Job"),
    candidate_id: Optional[str] = Query(None, description="Candidate"),
    status: Optional[ApplicationStatus] = Query(None, description="Application status"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {
        "job_id": job_id,
        "candidate_id": candidate_id,
        "status": status.value if status else None,
    }
    applications = await job_application_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await job_application_crud.count(db, filters=filters)
    items = [JobApplicationResponse.model_validate(a).model_dump() for a in applications]
    return paged_response(items, total, page, page_size)


@router.post("/applications", summary="Create application", response_model=ResponseModel[JobApplicationResponse])
async def create_application(
    data: JobApplicationCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    A candidate can apply to a job only once
    """
    if not await job_crud.get(db, data.job_id):
        raise NotFoundException(f"Job not found: {data.job_id}")
    if not await candidate_crud.get(db, data.candidate_id):
        raise NotFoundException(f"Candidate not found: {data.candidate_id}")
    if await job_application_crud.get_by_job_and_candidate(db, data.job_id, data.candidate_id):
        raise ConflictException(
            "Candidate has already applied to this job",
            data={"job_id": data.job_id, "candidate_id": data.candidate_id},
        )
    application = await job_application_crud.create(db, obj_in=data.model_dump())
    return success_response(
        data=JobApplicationResponse.model_validate(application).model_dump(),
        message="Application created"
    )


@router.get(
    "/applications/{application_id}",
    summary="Get application",
    response_model=ResponseModel[JobApplicationResponse],
)
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
):
    application = await job_application_crud.get(db, application_id)
    if not application:
        raise NotFoundException(f"Application not found: {application_id}")
    return success_response(data=JobApplicationResponse.model_validate(application).model_dump())


@router.patch(
    "/applications/{application_id}",
    summary="Update application",
    response_model=ResponseModel[JobApplicationResponse],
)
async def update_application(
    application_id: str,
    data: JobApplicationUpdate,
    db: AsyncSession = Depends(get_db),
):
    application = await job_application_crud.get(db, application_id)
    if not application:
        raise NotFoundException(f"Application not found: {application_id}")
    obj_in = data.model_dump(exclude_unset=True)
    if data.status:
        obj_in["status"] = data.status.value
    application = await job_application_crud.update(db, db_obj=application, obj_in=obj_in)
    return success_response(
        data=JobApplicationResponse.model_validate(application).model_dump(),
        message="Application updated"
    )


@router.delete("/applications/{application_id}", summary="Delete application", response_model=MessageResponse)
async def delete_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await job_application_crud.get(db, application_id):
        raise NotFoundException(f"Application not found: {application_id}")
    await job_application_crud.delete(db, id=application_id)
    return success_response(message="Application deleted")


# ==================== Interviews ====================

@router.get("/interviews", summary="List interviews", response_model=PagedResponseModel[InterviewResponse])
async def get_interviews(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    application_id: Optional[str] = Query(None, description="Application"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {"application_id": application_id}
    interviews = await interview_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await interview_crud.count(db, filters=filters)
    items = [InterviewResponse.model_validate(i).model_dump() for i in interviews]
    return paged_response(items, total, page, page_size)


@router.post("/interviews", summary="Schedule interview", response_model=ResponseModel[InterviewResponse])
async def create_interview(
    data: InterviewCreate,
    db: AsyncSession = Depends(get_db),
):
    application = await job_application_crud.get(db, data.application_id)
    if not application:
        raise NotFoundException(f"Application not found: {data.application_id}")
    interview = await interview_crud.create(db, obj_in=data)
    if application.status in (ApplicationStatus.APPLIED.value, ApplicationStatus.SCREENING.value):
        await job_application_crud.update(
            db, db_obj=application, obj_in={"status": ApplicationStatus.INTERVIEW.value}
        )
    return success_response(
        data=InterviewResponse.model_validate(interview).model_dump(),
        message="Interview scheduled"
    )


@router.patch("/interviews/{interview_id}", summary="Update interview", response_model=ResponseModel[InterviewResponse])
async def update_interview(
    interview_id: str,
    data: InterviewUpdate,
    db: AsyncSession = Depends(get_db),
):
    interview = await interview_crud.get(db, interview_id)
    if not interview:
        raise NotFoundException(f"Interview not found: {interview_id}")
    obj_in = data.model_dump(exclude_unset=True)
    if data.status:
        obj_in["status"] = data.status.value
    interview = await interview_crud.update(db, db_obj=interview, obj_in=obj_in)
    return success_response(
        data=InterviewResponse.model_validate(interview).model_dump(),
        message="Interview updated"
    )


@router.delete("/interviews/{interview_id}", summary="Delete interview", response_model=MessageResponse)
async def delete_interview(
    interview_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await interview_crud.get(db, interview_id):
        raise NotFoundException(f"Interview not found: {interview_id}")
    await interview_crud.delete(db, id=interview_id)
    return success_response(message="Interview deleted")


# ==================== Offers ====================

@router.get("/offers", summary="List offers", response_model=PagedResponseModel[OfferResponse])
async def get_offers(
    page: int = Query(1, ge=1, description="Page"),
    page_size: int = Query(20, ge=1, le=100, description="Page size"),
    application_id: Optional[str] = Query(None, description="Application"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    filters = {"application_id": application_id}
    offers = await offer_crud.get_multi(db, skip=skip, limit=page_size, filters=filters)
    total = await offer_crud.count(db, filters=filters)
    items = [OfferResponse.model_validate(o).model_dump() for o in offers]
    return paged_response(items, total, page, page_size)


@router.post("/offers", summary="Create offer", response_model=ResponseModel[OfferResponse])
async def create_offer(
    data: OfferCreate,
    db: AsyncSession = Depends(get_db),
):
    if not await job_application_crud.get(db, data.application_id):
        raise NotFoundException(f"Application not found: {data.application_id}")
    offer = await offer_crud.create(db, obj_in=data)
    return success_response(data=OfferResponse.model_validate(offer).model_dump(), message="Offer created")


@router.patch("/offers/{offer_id}", summary="Update offer", response_model=ResponseModel[OfferResponse])
async def update_offer(
    offer_id: str,
    data: OfferUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Sending stamps sent_at; accepting or declining stamps responded_at.
    An accepted offer marks the application as hired.
    """
    offer = await offer_crud.get(db, offer_id)
    if not offer:
        raise NotFoundException(f"Offer not found: {offer_id}")

    obj_in = data.model_dump(exclude_unset=True)
    if data.status:
        obj_in["status"] = data.status.value
        if data.status == OfferStatus.SENT:
            obj_in["sent_at"] = utcnow()
        elif data.status in (OfferStatus.ACCEPTED, OfferStatus.DECLINED):
            obj_in["responded_at"] = utcnow()
    offer = await offer_crud.update(db, db_obj=offer, obj_in=obj_in)

    if data.status in (OfferStatus.SENT, OfferStatus.ACCEPTED):
        application = await job_application_crud.get(db, offer.application_id)
        new_status = ApplicationStatus.HIRED if data.status == OfferStatus.ACCEPTED else ApplicationStatus.OFFERED
        await job_application_crud.update(db, db_obj=application, obj_in={"status": new_status.value})
    return success_response(data=OfferResponse.model_validate(offer).model_dump(), message="Offer updated")


@router.delete("/offers/{offer_id}", summary="Delete offer", response_model=MessageResponse)
async def delete_offer(
    offer_id: str,
    db: AsyncSession = Depends(get_db),
):
    if not await offer_crud.get(db, offer_id):
        raise NotFoundException(f"Offer not found: {offer_id}")
    await offer_crud.delete(db, id=offer_id)
    return success_response(message="Offer deleted")
