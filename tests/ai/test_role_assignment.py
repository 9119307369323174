"""
Role assignment tests: rule-based matcher and the single-employee endpoint
"""
import pytest
from httpx import AsyncClient
from tests.conftest import DataFactory

from hrportal.core.config import settings
from hrportal.models.employee import Employee
from hrportal.models.standard_role import StandardRole
from hrportal.services.ai import llm_client
from hrportal.services.ai.llm_client import LLMResponseError, get_llm_client
from hrportal.services.ai.prompts import get_config
from hrportal.services.ai.role_assignment import RoleAssignmentService, heuristic_score

WEIGHTS = {"title": 0.3, "skills": 0.4, "department": 0.2, "experience": 0.1}


def _employee(**kwargs) -> Employee:
    defaults = dict(
        employee_number="E1",
        first_name="Ana",
        last_name="Putri",
        current_position="Senior Network Engineer",
        current_department="Network Operations",
        years_of_experience=5,
        skills=["5G", "Routing"],
    )
    return Employee(**{**defaults, **kwargs})


def _role(**kwargs) -> StandardRole:
    defaults = dict(
        id="role-1",
        role_title="Network Engineer",
        department="Network Operations",
        required_skills=["5G", "Routing", "MPLS", "IP Networking"],
        experience_range_min=3,
        experience_range_max=8,
    )
    return StandardRole(**{**defaults, **kwargs})


def test_weights_come_from_prompt_config():
    assert get_config("roles", "heuristic_weights") == WEIGHTS
    assert get_config("roles", "heuristic_min_score") == 0.3


def test_heuristic_score_adds_weighted_signals():
    # title 0.3 + skills 2/4 * 0.4 + department 0.2 + experience 0.1
    assert heuristic_score(_employee(), _role(), WEIGHTS) == pytest.approx(0.8)


def test_heuristic_score_without_overlap():
    employee = _employee(
        current_position="Accountant",
        current_department="Finance",
        years_of_experience=20,
        skills=["IFRS"],
    )
    assert heuristic_score(employee, _role(), WEIGHTS) == 0.0


def test_matcher_picks_best_role():
    service = RoleAssignmentService()
    roles = [
        _role(id="role-a", role_title="Product Owner", department="Digital", required_skills=["Scrum"]),
        _role(id="role-b"),
    ]
    suggestion = service.match_heuristically(_employee(), roles)
    assert suggestion.matched
    assert suggestion.role_id == "role-b"
    assert suggestion.method == "heuristic"


def test_matcher_below_threshold_is_no_match():
    service = RoleAssignmentService()
    # experience only: 0.1
    employee = _employee(current_position="Accountant", current_department="Finance", skills=[])
    suggestion = service.match_heuristically(employee, [_role()])
    assert not suggestion.matched
    assert suggestion.score == pytest.approx(0.1)


@pytest.mark.asyncio
async def test_assign_role_uses_llm_choice(client: AsyncClient, factory: DataFactory, mock_llm):
    employee = await factory.create_employee()
    await factory.create_role(role_title="Product Owner")
    role = await factory.create_role(role_title="Network Engineer")
    mock_llm.return_value = f'"{role["id"]}"'

    response = await client.post(f"/api/v1/employees/{employee['id']}/assign-role")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["assigned"] is True
    assert data["role_id"] == role["id"]
    assert data["role_title"] == "Network Engineer"
    assert data["role_assignment_status"] == "assigned"

    stored = (await client.get(f"/api/v1/employees/{employee['id']}")).json()["data"]
    assert stored["standard_role_id"] == role["id"]


@pytest.mark.asyncio
async def test_assign_role_with_unknown_reply_is_no_match(client: AsyncClient, factory: DataFactory, mock_llm):
    employee = await factory.create_employee()
    await factory.create_role()
    mock_llm.return_value = "I think a senior engineer role fits best"

    response = await client.post(f"/api/v1/employees/{employee['id']}/assign-role")
    data = response.json()["data"]
    assert data["assigned"] is False
    assert data["role_assignment_status"] == "ai_no_match"

    stored = (await client.get(f"/api/v1/employees/{employee['id']}")).json()["data"]
    assert stored["standard_role_id"] is None


@pytest.mark.asyncio
async def test_assign_role_llm_failure_is_upstream_error(client: AsyncClient, factory: DataFactory, mock_llm):
    employee = await factory.create_employee()
    await factory.create_role()
    mock_llm.side_effect = RuntimeError("connection reset")

    response = await client.post(f"/api/v1/employees/{employee['id']}/assign-role")
    assert response.status_code == 502

    stored = (await client.get(f"/api/v1/employees/{employee['id']}")).json()["data"]
    assert stored["role_assignment_status"] == "unassigned"


@pytest.mark.asyncio
async def test_assign_role_without_roles(client: AsyncClient, factory: DataFactory):
    employee = await factory.create_employee()
    response = await client.post(f"/api/v1/employees/{employee['id']}/assign-role")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_suggest_without_api_key_uses_matcher(monkeypatch):
    monkeypatch.setattr(llm_client, "_llm_client", None)
    monkeypatch.setattr(settings, "llm_api_key", "")

    service = RoleAssignmentService()
    assert not get_llm_client().is_configured()

    suggestion = await service.suggest(_employee(), [_role()])
    assert suggestion.method == "heuristic"
    assert suggestion.role_id == "role-1"

    with pytest.raises(LLMResponseError):
        await get_llm_client().complete("system", "user")
