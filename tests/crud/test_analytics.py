"""
Analytics API tests
"""
from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from tests.conftest import DataFactory


@pytest.mark.asyncio
async def test_empty_portal(client: AsyncClient):
    workforce = (await client.get("/api/v1/analytics/workforce")).json()["data"]
    assert workforce["total_employees"] == 0
    assert workforce["assigned_ratio"] == 0
    assert workforce["average_performance"] == 0.0

    mobility = (await client.get("/api/v1/analytics/mobility")).json()["data"]
    assert mobility["mobility_rate"] == 0
    assert mobility["retention_rate"] == 0

    development = (await client.get("/api/v1/analytics/development")).json()["data"]
    assert development == {
        "total_plans": 0,
        "by_status": {},
        "average_progress": 0.0,
        "employees_with_plans": 0,
        "fallback_plans": 0,
    }


@pytest.mark.asyncio
async def test_workforce_and_mobility_figures(client: AsyncClient, factory: DataFactory):
    role = await factory.create_role()
    await factory.create_employee(current_department="Finance", performance_rating=2.0)
    assigned = await factory.create_employee(performance_rating=4.0)
    await factory.create_employee(performance_rating=4.5)
    leaver = await factory.create_employee()

    await client.patch(f"/api/v1/employees/{assigned['id']}", json={"standard_role_id": role["id"]})
    await client.patch(f"/api/v1/employees/{leaver['id']}", json={"is_active": False})
    await client.post("/api/v1/mobility/moves", json={
        "employee_id": assigned["id"],
        "move_type": "promotion",
        "new_position": "Network Lead",
    })

    workforce = (await client.get("/api/v1/analytics/workforce")).json()["data"]
    assert workforce["total_employees"] == 4
    assert workforce["active_employees"] == 3
    assert workforce["by_department"] == {"Finance": 1, "Network Operations": 2}
    assert workforce["assigned_employees"] == 1
    assert workforce["assigned_ratio"] == 33
    assert workforce["by_assignment_status"]["manual"] == 1
    assert workforce["average_performance"] == pytest.approx(3.62, abs=0.01)

    mobility = (await client.get("/api/v1/analytics/mobility")).json()["data"]
    assert mobility["moved_employees"] == 1
    assert mobility["mobility_rate"] == 25
    assert mobility["retention_rate"] == 75
    # rated below 3 or without a standard role
    assert mobility["at_risk_employees"] == 2
    assert mobility["moves_by_type"] == {"promotion": 1}

    roles = (await client.get("/api/v1/analytics/roles")).json()["data"]
    assert roles["total_roles"] == 1
    assert roles["assigned_employees"] == 1


@pytest.mark.asyncio
async def test_job_description_and_skill_figures(client: AsyncClient, factory: DataFactory, no_llm):
    await factory.create_job_description()
    await factory.create_job_description()
    await factory.create_skill(category="Cloud")
    employee = await factory.create_employee()
    await client.post(f"/api/v1/skills/assessments/employee/{employee['id']}")

    jds = (await client.get("/api/v1/analytics/job-descriptions")).json()["data"]
    assert jds["total"] == 2
    assert jds["by_status"] == {"draft": 2}
    assert jds["ai_generated"] == 0
    assert len(jds["recent"]) == 2

    skills = (await client.get("/api/v1/analytics/skills")).json()["data"]
    assert skills["total_skills"] == 1
    assert skills["categories"] == ["Cloud"]
    assert skills["total_assessments"] == 1
    assert skills["fallback_assessments"] == 1
    assert skills["average_match"] == 50


@pytest.mark.asyncio
async def test_certification_figures(client: AsyncClient, factory: DataFactory):
    empty = (await client.get("/api/v1/analytics/certifications")).json()["data"]
    assert empty["total_certifications"] == 0
    assert empty["renewal_rate"] == 0

    certified = await factory.create_employee()
    await factory.create_employee()
    today = date.today()
    url = f"/api/v1/employees/{certified['id']}/certifications"
    await client.post(url, json={
        "certification_name": "ITIL Foundation",
        "expiry_date": (today - timedelta(days=10)).isoformat(),
    })
    await client.post(url, json={
        "certification_name": "CCNA",
        "expiry_date": (today + timedelta(days=30)).isoformat(),
    })
    await client.post(url, json={"certification_name": "PMP"})

    data = (await client.get("/api/v1/analytics/certifications")).json()["data"]
    assert data == {
        "total_certifications": 3,
        "active_certifications": 2,
        "expiring_soon": 1,
        "renewal_rate": 67,
        "compliance_rate": 50,
        "total_employees": 2,
    }
