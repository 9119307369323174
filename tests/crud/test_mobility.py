"""
Employee move API tests
"""
import pytest
from unittest.mock import patch
from httpx import AsyncClient
from tests.conftest import DataFactory

from hrportal.core.exceptions import ConflictException
from hrportal.crud import employee_move_crud


@pytest.mark.asyncio
async def test_move_updates_employee_and_records_history(client: AsyncClient, factory: DataFactory):
    employee = await factory.create_employee(
        current_position="Network Engineer",
        current_department="Network Operations",
        current_level="Senior",
    )

    response = await client.post("/api/v1/mobility/moves", json={
        "employee_id": employee["id"],
        "move_type": "promotion",
        "new_position": "Network Lead",
        "new_level": "Lead",
        "reason": "Annual review",
    })
    assert response.status_code == 200
    move = response.json()["data"]
    assert move["previous_position"] == "Network Engineer"
    assert move["new_position"] == "Network Lead"
    assert move["new_department"] == "Network Operations"
    assert move["previous_level"] == "Senior"
    assert move["move_status"] == "executed"
    assert move["employee_number"] == employee["employee_number"]

    stored = (await client.get(f"/api/v1/employees/{employee['id']}")).json()["data"]
    assert stored["current_position"] == "Network Lead"
    assert stored["current_level"] == "Lead"

    moves = (await client.get("/api/v1/mobility/moves", params={"employee_id": employee["id"]})).json()
    assert moves["data"]["total"] == 1
    assert moves["data"]["items"][0]["employee_name"] == f"{employee['first_name']} {employee['last_name']}"


@pytest.mark.asyncio
async def test_failed_move_leaves_nothing_behind(client: AsyncClient, factory: DataFactory):
    employee = await factory.create_employee(current_position="Network Engineer")
    original_execute = employee_move_crud.execute

    async def execute_then_fail(*args, **kwargs):
        await original_execute(*args, **kwargs)
        raise ConflictException("Employee changed concurrently")

    with patch.object(employee_move_crud, "execute", new=execute_then_fail):
        response = await client.post("/api/v1/mobility/moves", json={
            "employee_id": employee["id"],
            "move_type": "lateral_move",
            "new_position": "Solutions Architect",
        })
    assert response.status_code == 409

    stored = (await client.get(f"/api/v1/employees/{employee['id']}")).json()["data"]
    assert stored["current_position"] == "Network Engineer"
    moves = (await client.get("/api/v1/mobility/moves")).json()["data"]
    assert moves["total"] == 0


@pytest.mark.asyncio
async def test_move_validation(client: AsyncClient, factory: DataFactory):
    response = await client.post("/api/v1/mobility/moves", json={
        "employee_id": "missing",
        "move_type": "promotion",
        "new_position": "Lead",
    })
    assert response.status_code == 404

    employee = await factory.create_employee()
    response = await client.post("/api/v1/mobility/moves", json={
        "employee_id": employee["id"],
        "move_type": "promotion",
        "new_position": "Lead",
        "mobility_plan_id": "missing-plan",
    })
    assert response.status_code == 400

    response = await client.post("/api/v1/mobility/moves", json={
        "employee_id": employee["id"],
        "move_type": "teleport",
        "new_position": "Lead",
    })
    assert response.status_code == 422
