"""
HR Portal client tests
"""
import httpx
import pytest

from hrportal.client import HRPortalClient, PollTimeoutError


def _progress(status: str, processed: int, terminal: bool) -> dict:
    return {
        "success": True,
        "code": 200,
        "message": "Success",
        "data": {
            "session_id": "s1",
            "status": status,
            "progress": {"total": 3, "processed": processed, "assigned": processed, "errors": 0},
            "error_message": None,
            "is_terminal": terminal,
        },
    }


@pytest.mark.asyncio
async def test_poll_until_terminal():
    replies = iter([
        _progress("processing", 1, False),
        _progress("processing", 2, False),
        _progress("completed", 3, True),
    ])
    seen_paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_paths.append(request.url.path)
        return httpx.Response(200, json=next(replies))

    snapshots = []
    async with HRPortalClient(
        "http://portal.test", token="abc", poll_interval=0, transport=httpx.MockTransport(handler)
    ) as client:
        result = await client.poll_session("s1", on_progress=snapshots.append)

    assert result["status"] == "completed"
    assert [s["progress"]["processed"] for s in snapshots] == [1, 2, 3]
    assert seen_paths == ["/api/v1/uploads/sessions/s1/progress"] * 3


@pytest.mark.asyncio
async def test_poll_gives_up_after_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_progress("processing", 1, False))

    async with HRPortalClient(
        "http://portal.test",
        poll_interval=0.01,
        poll_timeout=0.05,
        transport=httpx.MockTransport(handler),
    ) as client:
        with pytest.raises(PollTimeoutError) as exc_info:
            await client.poll_session("s1")

    assert exc_info.value.session_id == "s1"
    assert exc_info.value.last_progress["status"] == "processing"


@pytest.mark.asyncio
async def test_request_errors_raise():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer abc"
        return httpx.Response(404, json={"success": False, "code": 404, "message": "missing", "data": None})

    async with HRPortalClient("http://portal.test", token="abc", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.get_progress("missing")


def test_default_poll_settings():
    client = HRPortalClient()
    assert client.poll_interval == 2.0
    assert client.poll_timeout == 300.0


@pytest.mark.asyncio
async def test_start_calls_unwrap_envelope():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append((request.method, request.url.path, request.content))
        return httpx.Response(200, json={
            "success": True, "code": 200, "message": "started",
            "data": {"session_id": "job-1", "status": "processing", "total": 4, "message": "poll"},
        })

    async with HRPortalClient("http://portal.test", transport=httpx.MockTransport(handler)) as client:
        started = await client.start_role_assignment("upload-1")
        assert started["session_id"] == "job-1"
        await client.start_bulk_assessment("department", "Digital")

    assert requests[0][:2] == ("POST", "/api/v1/uploads/sessions/upload-1/assign-roles")
    assert requests[1][:2] == ("POST", "/api/v1/skills/assessments/bulk")
    assert b'"identifier":"Digital"' in requests[1][2].replace(b" ", b"")
