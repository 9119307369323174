"""
API routers
"""
from fastapi import APIRouter

from .v1 import (
    employees,
    uploads,
    roles,
    job_descriptions,
    skills,
    mobility,
    development,
    ai_services,
    analytics,
    recruitment,
)

api_router = APIRouter()

api_router.include_router(
    employees.router,
    prefix="/employees",
    tags=["Employees"]
)
api_router.include_router(
    uploads.router,
    prefix="/uploads",
    tags=["Uploads"]
)
api_router.include_router(
    roles.router,
    prefix="/roles",
    tags=["Roles"]
)
api_router.include_router(
    job_descriptions.router,
    prefix="/job-descriptions",
    tags=["Job descriptions"]
)
api_router.include_router(
    skills.router,
    prefix="/skills",
    tags=["Skills"]
)
api_router.include_router(
    mobility.router,
    prefix="/mobility",
    tags=["Mobility"]
)
api_router.include_router(
    development.router,
    prefix="/development",
    tags=["Development"]
)
api_router.include_router(
    ai_services.router,
    prefix="/ai",
    tags=["AI services"]
)
api_router.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["Analytics"]
)
api_router.include_router(
    recruitment.router,
    prefix="/recruitment",
    tags=["Recruitment"]
)
