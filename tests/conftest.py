"""
Test configuration

Fixtures: in-memory database, HTTP test client, data factory and a stubbed LLM
"""
import json
from typing import AsyncGenerator, Optional
from dataclasses import dataclass, field
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import hrportal.models  # noqa: F401  registers every table
from hrportal.core.config import settings
from hrportal.core.database import get_db, get_session_factory
from hrportal.main import create_app
from hrportal.services.ai.llm_client import LLMClient


# ========== Data factory ==========

@dataclass
class DataFactory:
    """
    Creates test data through the API

    Keeps payload shapes in one place so field changes touch only this class.
    """
    client: AsyncClient
    _counter: int = field(default=0, repr=False)

    def _next_id(self) -> str:
        self._counter += 1
        return str(self._counter)

    async def create_employee(self, **overrides) -> dict:
        suffix = self._next_id()
        data = {
            "employee_number": f"EMP{suffix.zfill(4)}",
            "first_name": "Test",
            "last_name": f"Employee{suffix}",
            "email": f"employee{suffix}@xlsmart.co.id",
            "current_position": "Network Engineer",
            "current_department": "Network Operations",
            "current_level": "Senior",
            "years_of_experience": 6,
            "performance_rating": 4.0,
            "skills": ["5G", "IP Networking"],
            "source_company": "xl",
            **overrides
        }
        resp = await self.client.post("/api/v1/employees", json=data)
        assert resp.status_code == 200, f"Failed to create employee: {resp.text}"
        return resp.json()["data"]

    async def create_role(self, **overrides) -> dict:
        suffix = self._next_id()
        data = {
            "role_title": f"Network Engineer {suffix}",
            "department": "Network Operations",
            "job_family": "Engineering",
            "role_level": "senior",
            "role_category": "Technology",
            "required_skills": ["5G", "IP Networking", "Routing"],
            "experience_range_min": 3,
            "experience_range_max": 8,
            **overrides
        }
        resp = await self.client.post("/api/v1/roles", json=data)
        assert resp.status_code == 200, f"Failed to create role: {resp.text}"
        return resp.json()["data"]

    async def create_job_description(self, **overrides) -> dict:
        suffix = self._next_id()
        data = {
            "title": f"Data Analyst {suffix}",
            "summary": "Turns network data into decisions",
            "responsibilities": ["Build dashboards", "Model churn"],
            "required_qualifications": ["Bachelor degree"],
            **overrides
        }
        resp = await self.client.post("/api/v1/job-descriptions", json=data)
        assert resp.status_code == 200, f"Failed to create job description: {resp.text}"
        return resp.json()["data"]

    async def create_skill(self, **overrides) -> dict:
        suffix = self._next_id()
        data = {
            "name": f"Skill {suffix}",
            "category": "Technical",
            **overrides
        }
        resp = await self.client.post("/api/v1/skills", json=data)
        assert resp.status_code == 200, f"Failed to create skill: {resp.text}"
        return resp.json()["data"]

    async def create_job(self, **overrides) -> dict:
        suffix = self._next_id()
        data = {
            "title": f"Backend Engineer {suffix}",
            "department": "Digital",
            "salary_min": 10000000,
            "salary_max": 20000000,
            **overrides
        }
        resp = await self.client.post("/api/v1/recruitment/jobs", json=data)
        assert resp.status_code == 200, f"Failed to create job: {resp.text}"
        return resp.json()["data"]

    async def create_candidate(self, **overrides) -> dict:
        suffix = self._next_id()
        data = {
            "first_name": "Candidate",
            "last_name": suffix,
            "email": f"candidate{suffix}@example.com",
            "skills": ["Python"],
            **overrides
        }
        resp = await self.client.post("/api/v1/recruitment/candidates", json=data)
        assert resp.status_code == 200, f"Failed to create candidate: {resp.text}"
        return resp.json()["data"]

    async def create_application(
        self,
        job_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
        **overrides
    ) -> dict:
        """Creates the job and candidate when not given"""
        if job_id is None:
            job_id = (await self.create_job())["id"]
        if candidate_id is None:
            candidate_id = (await self.create_candidate())["id"]
        data = {"job_id": job_id, "candidate_id": candidate_id, **overrides}
        resp = await self.client.post("/api/v1/recruitment/applications", json=data)
        assert resp.status_code == 200, f"Failed to create application: {resp.text}"
        return resp.json()["data"]


@pytest_asyncio.fixture
async def factory(client: AsyncClient) -> DataFactory:
    return DataFactory(client=client)


# ========== Database ==========

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """
    Fresh in-memory database per test

    StaticPool keeps one connection so request sessions and background
    job sessions see the same data.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory: async_sessionmaker, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client against the app with the test database

    Bulk jobs run without pauses between batches.
    """
    monkeypatch.setattr(settings, "bulk_batch_delay", 0)
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ========== LLM ==========

@pytest.fixture
def mock_llm():
    """
    Configured LLM whose replies are set per test

    Usage:
        mock_llm.return_value = json.dumps({...})
    """
    with patch.object(LLMClient, "chat", new_callable=AsyncMock) as chat, \
            patch.object(LLMClient, "is_configured", return_value=True):
        chat.return_value = json.dumps({})
        yield chat


@pytest.fixture
def no_llm():
    """LLM without an API key"""
    with patch.object(LLMClient, "chat", new_callable=AsyncMock) as chat, \
            patch.object(LLMClient, "is_configured", return_value=False):
        chat.side_effect = AssertionError("LLM must not be called")
        yield chat
