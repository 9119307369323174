"""
LLM client helpers and prompt loading
"""
import pytest

from hrportal.services.ai.llm_client import extract_json, LLMResponseError, RequestThrottle
from hrportal.services.ai.prompts import PromptLoader, get_prompt, get_config


def test_extract_json_plain():
    assert extract_json('{"a": 1}') == {"a": 1}


def test_extract_json_strips_code_fence():
    content = '```json\n{"title": "Data Analyst", "skills": ["SQL"]}\n```'
    assert extract_json(content) == {"title": "Data Analyst", "skills": ["SQL"]}


def test_extract_json_outermost_object_inside_prose():
    content = 'Here you go: {"outer": {"inner": 2}} hope it helps'
    assert extract_json(content) == {"outer": {"inner": 2}}


def test_extract_json_rejects_text_without_object():
    with pytest.raises(LLMResponseError):
        extract_json("I am unable to help with that")


def test_extract_json_rejects_broken_json():
    with pytest.raises(LLMResponseError):
        extract_json('{"title": "unterminated}')


@pytest.mark.asyncio
async def test_request_throttle_spends_budget():
    throttle = RequestThrottle(per_minute=2, max_in_flight=1)
    for _ in range(2):
        async with throttle.slot():
            pass
    assert throttle._budget < 1


def test_prompt_loader_formats_and_keeps_literal_braces(tmp_path):
    (tmp_path / "demo.yaml").write_text(
        'user: "Role {role}, answer as {{\\"ok\\": true}}"\n'
        "nested:\n"
        "  system: \"You are {persona}\"\n"
        "limits:\n"
        "  items: 5\n",
        encoding="utf-8",
    )
    loader = PromptLoader(base_path=tmp_path)

    assert loader.get("demo", "user", role="Engineer") == 'Role Engineer, answer as {"ok": true}'
    assert loader.get("demo", "nested.system", persona="an HR analyst") == "You are an HR analyst"
    assert loader.get_config("demo", "limits.items") == 5


def test_prompt_loader_missing_variable_returns_template(tmp_path):
    (tmp_path / "demo.yaml").write_text('user: "Hello {name}"\n', encoding="utf-8")
    loader = PromptLoader(base_path=tmp_path)
    assert loader.get("demo", "user") == "Hello {name}"


def test_prompt_loader_unknown_file_and_key(tmp_path):
    (tmp_path / "demo.yaml").write_text('user: "x"\n', encoding="utf-8")
    loader = PromptLoader(base_path=tmp_path)
    with pytest.raises(FileNotFoundError):
        loader.load("missing")
    with pytest.raises(KeyError):
        loader.get("demo", "nope")


def test_prompt_loader_cache_and_hot_reload(tmp_path):
    path = tmp_path / "demo.yaml"
    path.write_text('user: "first"\n', encoding="utf-8")

    cached = PromptLoader(base_path=tmp_path)
    reloading = PromptLoader(base_path=tmp_path, hot_reload=True)
    assert cached.get("demo", "user") == "first"
    assert reloading.get("demo", "user") == "first"

    path.write_text('user: "second"\n', encoding="utf-8")
    assert cached.get("demo", "user") == "first"
    assert reloading.get("demo", "user") == "second"

    cached.clear_cache()
    assert cached.get("demo", "user") == "second"


def test_prompt_loader_accepts_name_placeholder(tmp_path):
    (tmp_path / "demo.yaml").write_text('user: "Employee {name} in {key}"\n', encoding="utf-8")
    loader = PromptLoader(base_path=tmp_path)
    assert loader.get("demo", "user", name="Dewi", key="Network") == "Employee Dewi in Network"


def test_bundled_prompts_render():
    prompt = get_prompt(
        "skills",
        "assessment_user",
        name="Dewi",
        current_position="Engineer",
        department="Network",
        level="Senior",
        experience=5,
        rating=4,
        skills="5G",
        certifications="CCNA",
        target_role="",
    )
    assert "Dewi" in prompt
    assert get_config("skills", "fallback")["overallMatch"] == 50


@pytest.mark.asyncio
async def test_status_endpoint(client, no_llm):
    response = await client.get("/api/v1/ai/status")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["api_key_configured"] is False
    assert data["tasks"]["available_slots"] == data["tasks"]["max_tasks"]
