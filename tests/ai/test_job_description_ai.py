"""
AI job description generation, rewrite and portfolio intelligence
"""
import json

import pytest
from httpx import AsyncClient
from tests.conftest import DataFactory


GENERATED_JD = {
    "title": "Senior Data Analyst",
    "summary": "Owns churn analytics for the prepaid base.",
    "responsibilities": ["Build churn models", "Present insights to leadership"],
    "requiredQualifications": ["Bachelor in Statistics"],
    "preferredQualifications": ["Telecom experience"],
    "requiredSkills": ["SQL", "Python"],
    "preferredSkills": ["Spark"],
    "benefits": ["Health insurance"],
    "estimatedSalary": {"min": 15000000, "max": 25000000, "currency": "IDR"},
    "keywords": ["analytics"],
}


@pytest.mark.asyncio
async def test_generate_with_blank_title_does_not_call_llm(client: AsyncClient, mock_llm):
    response = await client.post("/api/v1/job-descriptions/generate", json={"role_title": "   "})

    assert response.status_code == 400
    assert response.json()["success"] is False
    mock_llm.assert_not_called()


@pytest.mark.asyncio
async def test_generate_persists_draft(client: AsyncClient, mock_llm):
    mock_llm.return_value = "```json\n" + json.dumps(GENERATED_JD) + "\n```"

    response = await client.post("/api/v1/job-descriptions/generate", json={
        "role_title": "Data Analyst",
        "department": "Analytics",
        "level": "Senior",
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "draft"
    assert data["job_description"]["title"] == "Senior Data Analyst"
    assert data["job_description"]["summary"]
    assert data["job_description"]["responsibilities"] == GENERATED_JD["responsibilities"]
    assert "prompt" not in data["job_description"]
    mock_llm.assert_awaited_once()

    stored = (await client.get(f"/api/v1/job-descriptions/{data['id']}")).json()["data"]
    assert stored["status"] == "draft"
    assert stored["ai_generated"] is True
    assert stored["required_skills"] == ["SQL", "Python"]
    assert stored["salary_range_min"] == 15000000


@pytest.mark.asyncio
async def test_generate_with_unparseable_reply_is_upstream_error(client: AsyncClient, mock_llm):
    mock_llm.return_value = "Sorry, I cannot produce JSON today."

    response = await client.post("/api/v1/job-descriptions/generate", json={"role_title": "Data Analyst"})
    assert response.status_code == 502

    listing = (await client.get("/api/v1/job-descriptions")).json()["data"]
    assert listing["total"] == 0


@pytest.mark.asyncio
async def test_ai_update_saves_when_asked(client: AsyncClient, factory: DataFactory, mock_llm):
    jd = await factory.create_job_description()
    mock_llm.return_value = "Rewritten description"

    response = await client.post(
        f"/api/v1/job-descriptions/{jd['id']}/ai-update",
        json={"update_request": "Make it shorter", "save": True},
    )
    assert response.status_code == 200
    assert response.json()["data"]["updated_content"] == "Rewritten description"

    stored = (await client.get(f"/api/v1/job-descriptions/{jd['id']}")).json()["data"]
    assert stored["full_description"] == "Rewritten description"


@pytest.mark.asyncio
async def test_intelligence_fallback_counts_job_descriptions(
    client: AsyncClient, factory: DataFactory, mock_llm
):
    for _ in range(3):
        await factory.create_job_description()
    mock_llm.return_value = "not json at all"

    response = await client.post(
        "/api/v1/ai/job-descriptions/intelligence",
        json={"analysis_type": "jd_optimization"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["fallback"] is True
    assert data["result"]["summary"]["totalAnalyzed"] == 3

    stored = (await client.get(f"/api/v1/ai/analysis-results/{data['analysis_id']}")).json()["data"]
    assert stored["status"] == "fallback"


@pytest.mark.asyncio
async def test_intelligence_success_is_recorded(client: AsyncClient, factory: DataFactory, mock_llm):
    await factory.create_job_description()
    mock_llm.return_value = json.dumps({"marketAlignment": {"overallScore": 72}})

    response = await client.post(
        "/api/v1/ai/job-descriptions/intelligence",
        json={"analysis_type": "market_alignment"},
    )
    data = response.json()["data"]
    assert data["fallback"] is False
    assert data["result"]["marketAlignment"]["overallScore"] == 72

    results = (await client.get(
        "/api/v1/ai/analysis-results", params={"analysis_type": "market_alignment"}
    )).json()["data"]
    assert results["total"] == 1
    assert results["items"][0]["status"] == "completed"


@pytest.mark.asyncio
async def test_intelligence_rejects_unknown_type(client: AsyncClient, mock_llm):
    response = await client.post(
        "/api/v1/ai/job-descriptions/intelligence",
        json={"analysis_type": "astrology"},
    )
    assert response.status_code == 400
    mock_llm.assert_not_called()
