"""
Roster upload and bulk role assignment tests

Background jobs finish before the test client returns, so progress can be
checked straight after the start call.
"""
import pytest
from httpx import AsyncClient
from tests.conftest import DataFactory


ROSTER = [
    {
        "Employee ID": 1001.0,
        "Name": "Budi Santoso",
        "Position": "Network Engineer",
        "Department": "Network Operations",
        "Skills": "5G, LTE; IP Networking",
    },
    {
        "Employee ID": "1002",
        "First Name": "Sari",
        "Last Name": "Wijaya",
        "Job Title": "HR Generalist",
        "Department": "Human Resources",
    },
    {"Name": "Nobody Numbered"},
]


async def _upload(client: AsyncClient, rows=None) -> dict:
    response = await client.post("/api/v1/uploads/employees", json={
        "employees": rows if rows is not None else ROSTER,
        "session_name": "October roster",
        "source_company": "smart",
    })
    assert response.status_code == 200, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_json_upload_creates_employees_and_counts_errors(client: AsyncClient):
    started = await _upload(client)
    assert started["total"] == 3

    progress = (await client.get(f"/api/v1/uploads/sessions/{started['session_id']}/progress")).json()["data"]
    assert progress["is_terminal"] is True
    assert progress["status"] == "completed"
    assert progress["progress"] == {"total": 3, "processed": 3, "assigned": 2, "errors": 1}

    response = await client.get("/api/v1/employees", params={"search": "Budi"})
    budi = response.json()["data"]["items"][0]
    assert budi["employee_number"] == "1001"
    assert budi["source_company"] == "smart"

    session = (await client.get(f"/api/v1/uploads/sessions/{started['session_id']}")).json()["data"]
    assert session["session_name"] == "October roster"


@pytest.mark.asyncio
async def test_upload_updates_existing_employee_number(client: AsyncClient, factory: DataFactory):
    employee = await factory.create_employee(employee_number="2001", current_position="Analyst")
    await _upload(client, rows=[{
        "Employee ID": "2001",
        "Name": "Renamed Person",
        "Position": "Senior Analyst",
    }])

    stored = (await client.get(f"/api/v1/employees/{employee['id']}")).json()["data"]
    assert stored["current_position"] == "Senior Analyst"
    assert stored["first_name"] == "Renamed"
    total = (await client.get("/api/v1/employees")).json()["data"]["total"]
    assert total == 1


@pytest.mark.asyncio
async def test_empty_upload_rejected(client: AsyncClient):
    response = await client.post("/api/v1/uploads/employees", json={"employees": []})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_file_upload_reads_csv(client: AsyncClient):
    content = (
        "Employee ID,Name,Position,Department\n"
        "3001,Dewi Lestari,Data Analyst,Digital\n"
        "3002,Agus Salim,Product Owner,Digital\n"
    ).encode()
    response = await client.post(
        "/api/v1/uploads/employees/file",
        files=[("files", ("roster.csv", content, "text/csv"))],
        data={"source_company": "xl"},
    )
    assert response.status_code == 200, response.text
    started = response.json()["data"]
    assert started["total"] == 2

    progress = (await client.get(f"/api/v1/uploads/sessions/{started['session_id']}/progress")).json()["data"]
    assert progress["progress"]["errors"] == 0
    response = await client.get("/api/v1/employees", params={"department": "Digital"})
    assert response.json()["data"]["total"] == 2


@pytest.mark.asyncio
async def test_file_upload_rejects_unknown_extension(client: AsyncClient):
    response = await client.post(
        "/api/v1/uploads/employees/file",
        files=[("files", ("roster.pdf", b"%PDF", "application/pdf"))],
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_assign_roles_requires_standard_roles(client: AsyncClient):
    started = await _upload(client)
    response = await client.post(f"/api/v1/uploads/sessions/{started['session_id']}/assign-roles")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_bulk_role_assignment_with_rule_based_matcher(client: AsyncClient, factory: DataFactory, no_llm):
    role = await factory.create_role(role_title="Network Engineer", department="Network Operations")
    started = await _upload(client)

    response = await client.post(f"/api/v1/uploads/sessions/{started['session_id']}/assign-roles")
    assert response.status_code == 200
    job = response.json()["data"]
    assert job["session_id"] != started["session_id"]
    assert job["total"] == 2

    progress = (await client.get(f"/api/v1/uploads/sessions/{job['session_id']}/progress")).json()["data"]
    assert progress["is_terminal"] is True
    assert progress["status"] == "completed"
    assert progress["progress"]["processed"] == 2
    assert progress["progress"]["assigned"] == 1

    employees = (await client.get("/api/v1/employees", params={"search": "Budi"})).json()["data"]["items"]
    assert employees[0]["standard_role_id"] == role["id"]
    assert employees[0]["role_assignment_status"] == "ai_suggested"
    no_llm.assert_not_called()

    sessions = (await client.get("/api/v1/uploads/sessions", params={"session_type": "role_assignment"})).json()
    assert sessions["data"]["total"] == 1


@pytest.mark.asyncio
async def test_progress_of_unknown_session(client: AsyncClient):
    response = await client.get("/api/v1/uploads/sessions/missing/progress")
    assert response.status_code == 404
