"""
Skills catalogue API tests
"""
import pytest
from httpx import AsyncClient
from tests.conftest import DataFactory


@pytest.mark.asyncio
async def test_skill_crud_flow(client: AsyncClient, factory: DataFactory):
    skill = await factory.create_skill(name="Python", category="Programming")
    skill_id = skill["id"]

    response = await client.get(f"/api/v1/skills/{skill_id}")
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Python"

    await factory.create_skill(name="Negotiation", category="Soft")
    response = await client.get("/api/v1/skills")
    assert [s["name"] for s in response.json()["data"]["items"]] == ["Negotiation", "Python"]

    response = await client.get("/api/v1/skills", params={"category": "Programming"})
    assert response.json()["data"]["total"] == 1

    response = await client.get("/api/v1/skills/categories")
    assert response.json()["data"] == ["Programming", "Soft"]

    response = await client.patch(f"/api/v1/skills/{skill_id}", json={"description": "General purpose language"})
    assert response.status_code == 200
    assert response.json()["data"]["description"] == "General purpose language"

    response = await client.delete(f"/api/v1/skills/{skill_id}")
    assert response.status_code == 200
    response = await client.get(f"/api/v1/skills/{skill_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_skill_conflicts(client: AsyncClient, factory: DataFactory):
    await factory.create_skill(name="SQL")
    other = await factory.create_skill(name="Excel")

    response = await client.post("/api/v1/skills", json={"name": "SQL"})
    assert response.status_code == 409

    response = await client.patch(f"/api/v1/skills/{other['id']}", json={"name": "SQL"})
    assert response.status_code == 409
