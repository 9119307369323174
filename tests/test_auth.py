"""
Bearer token handling
"""
import pytest
from httpx import AsyncClient
from jose import jwt

from hrportal.core.config import settings

SECRET = "test-signing-secret"


async def _create_job(client: AsyncClient, headers=None):
    return await client.post(
        "/api/v1/recruitment/jobs",
        json={"title": "Site Reliability Engineer"},
        headers=headers or {},
    )


@pytest.mark.asyncio
async def test_without_secret_calls_run_as_system_user(client: AsyncClient):
    response = await _create_job(client, {"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 200
    assert response.json()["data"]["created_by"] == settings.system_user_id


@pytest.mark.asyncio
async def test_valid_token_sets_acting_user(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "auth_jwt_secret", SECRET)
    token = jwt.encode({"sub": "user-42"}, SECRET, algorithm=settings.auth_jwt_algorithm)

    response = await _create_job(client, {"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["data"]["created_by"] == "user-42"

    response = await _create_job(client)
    assert response.json()["data"]["created_by"] == settings.system_user_id


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "auth_jwt_secret", SECRET)
    token = jwt.encode({"sub": "user-42"}, "another-secret", algorithm=settings.auth_jwt_algorithm)

    response = await _create_job(client, {"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["success"] is False
