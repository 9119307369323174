"""
Mobility and development planning tests
"""
import json

import pytest
from httpx import AsyncClient
from tests.conftest import DataFactory

from hrportal.models.employee import Employee
from hrportal.services.ai.mobility import mobility_score, mobility_risk


def _employee(**kwargs) -> Employee:
    return Employee(employee_number="E1", first_name="Ana", current_position="Engineer", **kwargs)


@pytest.mark.parametrize("kwargs, expected", [
    (dict(years_of_experience=6, performance_rating=5.0, skills=["a", "b", "c", "d", "e"]), 100),
    (dict(years_of_experience=3, performance_rating=3.0, skills=["a", "b"]), 70),
    (dict(years_of_experience=1, performance_rating=None, skills=[]), 20),
    (dict(years_of_experience=0, performance_rating=1.0, skills=[]), 30),
])
def test_mobility_score(kwargs, expected):
    assert mobility_score(_employee(**kwargs)) == expected


def test_mobility_risk_bands():
    assert mobility_risk(80) == "High"
    assert mobility_risk(79) == "Medium"
    assert mobility_risk(60) == "Medium"
    assert mobility_risk(59) == "Low"


@pytest.mark.asyncio
async def test_mobility_plan_from_model(client: AsyncClient, factory: DataFactory, mock_llm):
    employee = await factory.create_employee()
    mock_llm.return_value = "Move to Network Architect within 12 months."

    response = await client.post(f"/api/v1/mobility/plans/{employee['id']}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["fallback"] is False
    assert data["plan"] == "Move to Network Architect within 12 months."
    # 6 years, rating 4, two skills
    assert data["mobility_score"] == 90
    assert data["mobility_risk"] == "High"

    plans = (await client.get("/api/v1/mobility/plans", params={"employee_id": employee["id"]})).json()
    assert plans["data"]["total"] == 1
    assert plans["data"]["items"][0]["status"] == "completed"


@pytest.mark.asyncio
async def test_mobility_plan_fallback(client: AsyncClient, factory: DataFactory, no_llm):
    employee = await factory.create_employee()

    response = await client.post(f"/api/v1/mobility/plans/{employee['id']}")
    data = response.json()["data"]
    assert data["fallback"] is True
    assert "90" in data["plan"]

    plans = (await client.get("/api/v1/mobility/plans")).json()
    assert plans["data"]["items"][0]["status"] == "fallback"


@pytest.mark.asyncio
async def test_bulk_mobility_planning(client: AsyncClient, factory: DataFactory, no_llm):
    await factory.create_employee(source_company="smart")
    await factory.create_employee(source_company="smart")

    response = await client.post("/api/v1/mobility/plans/bulk", json={
        "selection_type": "company",
        "identifier": "smart",
    })
    assert response.status_code == 200
    session_id = response.json()["data"]["session_id"]

    progress = (await client.get(f"/api/v1/uploads/sessions/{session_id}/progress")).json()["data"]
    assert progress["status"] == "completed"
    assert progress["progress"]["assigned"] == 2


@pytest.mark.asyncio
async def test_development_plan_from_model(client: AsyncClient, factory: DataFactory, mock_llm):
    employee = await factory.create_employee()
    mock_llm.return_value = json.dumps({
        "targetRole": "Network Architect",
        "developmentAreas": ["Solution design"],
        "recommendedCourses": ["TOGAF"],
        "recommendedCertifications": ["CCIE"],
        "recommendedProjects": ["5G core migration"],
        "timelineMonths": 18,
        "summary": "Grow into architecture",
    })

    response = await client.post(f"/api/v1/development/plans/{employee['id']}", json={"target_role": "Network Architect"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["fallback"] is False
    assert data["plan"]["timeline_months"] == 18
    assert data["plan"]["recommended_certifications"] == ["CCIE"]
    assert data["plan"]["plan_text"] == "Grow into architecture"


@pytest.mark.asyncio
async def test_development_plan_fallback(client: AsyncClient, factory: DataFactory, no_llm):
    employee = await factory.create_employee()

    response = await client.post(
        f"/api/v1/development/plans/{employee['id']}",
        json={"target_role": "Team Lead", "timeline_months": 6},
    )
    data = response.json()["data"]
    assert data["fallback"] is True
    assert data["plan"]["is_fallback"] is True
    assert data["plan"]["target_role"] == "Team Lead"
    assert data["plan"]["timeline_months"] == 6
    assert data["plan"]["development_areas"] == []


@pytest.mark.asyncio
async def test_pathway_failure_is_upstream_error(client: AsyncClient, mock_llm):
    mock_llm.side_effect = RuntimeError("timeout")
    response = await client.post("/api/v1/development/pathways", json={
        "employee_profile": {"name": "Ana", "role": "Engineer"},
        "career_goals": "Lead a team",
    })
    assert response.status_code == 502


@pytest.mark.asyncio
async def test_pathway_is_stored(client: AsyncClient, mock_llm):
    mock_llm.return_value = "Year 1: mentoring. Year 2: team lead."
    response = await client.post("/api/v1/development/pathways", json={
        "employee_profile": {"name": "Ana", "role": "Engineer"},
    })
    assert response.status_code == 200
    analysis_id = response.json()["data"]["analysis_id"]

    stored = (await client.get(f"/api/v1/ai/analysis-results/{analysis_id}")).json()["data"]
    assert stored["analysis_type"] == "development_pathway"
    assert stored["analysis_result"]["pathway"].startswith("Year 1")


@pytest.mark.asyncio
async def test_bulk_mobility_company_match_ignores_case(client: AsyncClient, factory: DataFactory, no_llm):
    await factory.create_employee(source_company="smart")
    await factory.create_employee(source_company="xl")

    response = await client.post("/api/v1/mobility/plans/bulk", json={
        "selection_type": "company",
        "identifier": "SMART",
    })
    session_id = response.json()["data"]["session_id"]
    progress = (await client.get(f"/api/v1/uploads/sessions/{session_id}/progress")).json()["data"]
    assert progress["progress"]["total"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("path, payload", [
    ("/api/v1/mobility/plans/bulk", {"selection_type": "everyone"}),
    ("/api/v1/development/plans/bulk", {"pathway_type": "division"}),
    ("/api/v1/skills/assessments/bulk", {"assessment_type": "ALL"}),
])
async def test_bulk_selection_type_is_validated(client: AsyncClient, path, payload):
    response = await client.post(path, json=payload)
    assert response.status_code == 422
