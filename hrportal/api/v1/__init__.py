"""
API v1 routers
"""
from . import (
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

__all__ = [
    "employees",
    "uploads",
    "roles",
    "job_descriptions",
    "skills",
    "mobility",
    "development",
    "ai_services",
    "analytics",
    "recruitment",
]
