"""
Job description API tests

CRUD plus the review/approval lifecycle
"""
import pytest
from httpx import AsyncClient
from tests.conftest import DataFactory


@pytest.mark.asyncio
async def test_job_description_crud_flow(client: AsyncClient, factory: DataFactory):
    jd = await factory.create_job_description(title="Data Analyst")
    jd_id = jd["id"]
    assert jd["status"] == "draft"
    assert jd["ai_generated"] is False

    response = await client.get(f"/api/v1/job-descriptions/{jd_id}")
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Data Analyst"

    response = await client.get("/api/v1/job-descriptions", params={"status": "draft"})
    assert response.json()["data"]["total"] == 1

    response = await client.patch(
        f"/api/v1/job-descriptions/{jd_id}",
        json={"summary": "Updated summary", "required_skills": ["SQL"]},
    )
    assert response.status_code == 200
    assert response.json()["data"]["summary"] == "Updated summary"

    response = await client.delete(f"/api/v1/job-descriptions/{jd_id}")
    assert response.status_code == 200
    response = await client.get(f"/api/v1/job-descriptions/{jd_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_patch_cannot_change_status(client: AsyncClient, factory: DataFactory):
    jd = await factory.create_job_description()

    response = await client.patch(f"/api/v1/job-descriptions/{jd['id']}", json={"status": "published"})
    assert response.status_code == 422

    stored = (await client.get(f"/api/v1/job-descriptions/{jd['id']}")).json()["data"]
    assert stored["status"] == "draft"


@pytest.mark.asyncio
async def test_lifecycle_review_approve_publish(client: AsyncClient, factory: DataFactory):
    jd = await factory.create_job_description()
    jd_id = jd["id"]

    response = await client.post(f"/api/v1/job-descriptions/{jd_id}/submit-review")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "review"

    response = await client.post(f"/api/v1/job-descriptions/{jd_id}/approve")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "approved"
    assert data["approved_by"]
    assert data["approved_at"]

    response = await client.post(f"/api/v1/job-descriptions/{jd_id}/publish")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "published"
    assert response.json()["data"]["published_at"]


@pytest.mark.asyncio
async def test_draft_can_be_approved_directly(client: AsyncClient, factory: DataFactory):
    jd = await factory.create_job_description()
    response = await client.post(f"/api/v1/job-descriptions/{jd['id']}/approve")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "approved"


@pytest.mark.asyncio
@pytest.mark.parametrize("steps, forbidden", [
    ([], "publish"),
    (["submit-review"], "publish"),
    (["submit-review"], "submit-review"),
    (["approve"], "submit-review"),
    (["approve"], "approve"),
    (["approve", "publish"], "approve"),
    (["approve", "publish"], "submit-review"),
    (["approve", "publish"], "publish"),
])
async def test_forbidden_transitions_conflict(
    client: AsyncClient, factory: DataFactory, steps, forbidden
):
    jd = await factory.create_job_description()
    for step in steps:
        response = await client.post(f"/api/v1/job-descriptions/{jd['id']}/{step}")
        assert response.status_code == 200

    before = (await client.get(f"/api/v1/job-descriptions/{jd['id']}")).json()["data"]["status"]
    response = await client.post(f"/api/v1/job-descriptions/{jd['id']}/{forbidden}")
    assert response.status_code == 409
    body = response.json()
    assert body["data"]["current_status"] == before

    after = (await client.get(f"/api/v1/job-descriptions/{jd['id']}")).json()["data"]["status"]
    assert after == before


@pytest.mark.asyncio
async def test_unknown_standard_role_rejected(client: AsyncClient):
    response = await client.post("/api/v1/job-descriptions", json={
        "title": "Orphan",
        "standard_role_id": "does-not-exist",
    })
    assert response.status_code == 400
