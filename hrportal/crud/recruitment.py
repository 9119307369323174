"""
Recruitment CRUD
"""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.models.recruitment import Job, Candidate, JobApplication, Interview, Offer
from .base import CRUDBase


class CRUDCandidate(CRUDBase[Candidate]):
    """Candidate CRUD"""

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[Candidate]:
        result = await db.execute(
            select(self.model).where(self.model.email == email)
        )
        return result.scalar_one_or_none()


class CRUDJobApplication(CRUDBase[JobApplication]):
    """Job application CRUD"""

    async def get_by_job_and_candidate(
        self, db: AsyncSession, job_id: str, candidate_id: str
    ) -> Optional[JobApplication]:
        result = await db.execute(
            select(self.model)
            .where(self.model.job_id == job_id)
            .where(self.model.candidate_id == candidate_id)
        )
        return result.scalar_one_or_none()


job_crud = CRUDBase(Job)
candidate_crud = CRUDCandidate(Candidate)
job_application_crud = CRUDJobApplication(JobApplication)
interview_crud = CRUDBase(Interview)
offer_crud = CRUDBase(Offer)
