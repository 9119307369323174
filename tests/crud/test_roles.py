"""
Standard role, role upload and role mapping API tests
"""
import json

import pytest
from httpx import AsyncClient
from tests.conftest import DataFactory


XL_ROLES = [
    {"RoleID": 101, "RoleTitle": "RAN Engineer", "Department": "Network", "RoleFamily": "Engineering",
     "SeniorityBand": "Senior", "RequiredSkills": "LTE, 5G", "ExperienceMinYears": 4},
]
SMART_ROLES = [
    {"RoleID": "S-7", "RoleTitle": "Radio Network Engineer", "Department": "Network",
     "RoleFamily": "Engineering", "SeniorityBand": "Senior"},
    {"RoleTitle": "Billing Analyst", "Department": "Finance"},
]


@pytest.mark.asyncio
async def test_standard_role_crud_flow(client: AsyncClient, factory: DataFactory):
    role = await factory.create_role(role_title="Network Engineer")
    role_id = role["id"]
    assert role["version"] == 1
    assert role["employee_count"] == 0

    response = await client.get("/api/v1/roles", params={"job_family": "Engineering"})
    assert response.json()["data"]["total"] == 1

    response = await client.patch(f"/api/v1/roles/{role_id}", json={"role_level": "lead"})
    assert response.status_code == 200
    assert response.json()["data"]["version"] == 2

    response = await client.delete(f"/api/v1/roles/{role_id}")
    assert response.status_code == 200
    response = await client.get(f"/api/v1/roles/{role_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_role_title_conflicts(client: AsyncClient, factory: DataFactory):
    await factory.create_role(role_title="Network Engineer")
    response = await client.post("/api/v1/roles", json={"role_title": "Network Engineer"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_invalid_experience_range(client: AsyncClient, factory: DataFactory):
    response = await client.post("/api/v1/roles", json={
        "role_title": "Odd Role",
        "experience_range_min": 10,
        "experience_range_max": 2,
    })
    assert response.status_code == 400

    role = await factory.create_role()
    response = await client.patch(f"/api/v1/roles/{role['id']}", json={"experience_range_min": 20})
    assert response.status_code == 400
    stored = (await client.get(f"/api/v1/roles/{role['id']}")).json()["data"]
    assert stored["experience_range_min"] == 3


@pytest.mark.asyncio
async def test_role_with_employees_cannot_be_deleted(client: AsyncClient, factory: DataFactory):
    role = await factory.create_role()
    await factory.create_employee(standard_role_id=role["id"])

    response = await client.delete(f"/api/v1/roles/{role['id']}")
    assert response.status_code == 409
    assert response.json()["data"]["employee_count"] == 1


@pytest.mark.asyncio
async def test_upload_roles_marks_session_uploaded(client: AsyncClient):
    response = await client.post("/api/v1/roles/uploads", json={
        "session_name": "Q3 catalogues",
        "xl_roles": XL_ROLES,
        "smart_roles": SMART_ROLES,
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "uploaded"
    assert data["xl_roles"] == 1
    assert data["smart_roles"] == 2

    response = await client.get(f"/api/v1/roles/uploads/{data['session_id']}")
    roles = response.json()["data"]
    assert len(roles) == 3
    xl_role = next(r for r in roles if r["source_company"] == "xl")
    assert xl_role["role_code"] == "101"
    assert xl_role["experience_min_years"] == 4

    progress = (await client.get(f"/api/v1/uploads/sessions/{data['session_id']}/progress")).json()["data"]
    assert progress["is_terminal"] is True


@pytest.mark.asyncio
async def test_upload_roles_requires_rows(client: AsyncClient):
    response = await client.post("/api/v1/roles/uploads", json={"xl_roles": [], "smart_roles": []})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_standardize_creates_roles_and_mappings(client: AsyncClient, mock_llm):
    upload = (await client.post("/api/v1/roles/uploads", json={
        "xl_roles": XL_ROLES,
        "smart_roles": SMART_ROLES,
    })).json()["data"]
    mock_llm.return_value = json.dumps({
        "standardizedRoles": [
            {
                "standardized_role_title": "Radio Network Engineer",
                "standardized_department": "Network",
                "standardized_role_family": "Engineering",
                "standardized_seniority_band": "Senior",
                "standardized_required_skills": "LTE, 5G",
                "standardized_experience_min_years": 4,
            },
        ],
        "mappings": [
            {"original_role_title": "RAN Engineer", "original_source": "xl",
             "standardized_role_title": "Radio Network Engineer", "mapping_confidence": 92},
            {"original_role_title": "Radio Network Engineer", "original_source": "smart",
             "standardized_role_title": "Radio Network Engineer", "mapping_confidence": 60},
            {"original_role_title": "Billing Analyst", "original_source": "smart",
             "standardized_role_title": "Unknown Target", "mapping_confidence": 90},
        ],
    })

    response = await client.post(f"/api/v1/roles/standardize/{upload['session_id']}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["standard_roles_created"] == 1
    assert data["mappings_created"] == 2
    assert data["auto_mapped"] == 1
    assert data["manual_review"] == 1
    assert data["mappings_skipped"] == 1

    roles = (await client.get("/api/v1/roles")).json()["data"]["items"]
    assert roles[0]["required_skills"] == ["LTE", "5G"]
    assert roles[0]["experience_range_max"] == 9

    review = (await client.get("/api/v1/roles/mappings", params={"mapping_status": "manual_review"})).json()
    mapping = review["data"]["items"][0]
    assert mapping["requires_manual_review"] is True

    response = await client.patch(f"/api/v1/roles/mappings/{mapping['id']}", json={"mapping_status": "approved"})
    assert response.status_code == 200
    assert response.json()["data"]["requires_manual_review"] is False


@pytest.mark.asyncio
async def test_standardize_llm_failure_is_upstream_error(client: AsyncClient, mock_llm):
    upload = (await client.post("/api/v1/roles/uploads", json={"xl_roles": XL_ROLES})).json()["data"]
    mock_llm.return_value = "no json here"

    response = await client.post(f"/api/v1/roles/standardize/{upload['session_id']}")
    assert response.status_code == 502
    assert (await client.get("/api/v1/roles")).json()["data"]["total"] == 0
