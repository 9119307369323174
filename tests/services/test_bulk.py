"""
Bulk job helper tests
"""
import pytest

from hrportal.core.config import settings
from hrportal.crud import upload_session_crud
from hrportal.models.upload_session import SessionStatus
from hrportal.services.bulk import JobSlots, batched, final_status, run_batched_job


def test_batched_splits_in_order():
    assert batched([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert batched([], 3) == []


@pytest.mark.parametrize("counters, expected", [
    ({"assigned": 3, "errors": 0}, SessionStatus.COMPLETED),
    ({"assigned": 2, "errors": 1}, SessionStatus.COMPLETED_WITH_ERRORS),
    ({"assigned": 0, "errors": 3}, SessionStatus.ERROR),
    ({"assigned": 0, "no_match": 3, "errors": 0}, SessionStatus.COMPLETED),
])
def test_final_status(counters, expected):
    assert final_status(counters, "assigned", SessionStatus.COMPLETED_WITH_ERRORS) == expected


@pytest.mark.asyncio
async def test_failed_items_do_not_stop_the_job(session_factory, db_session, monkeypatch):
    monkeypatch.setattr(settings, "bulk_batch_delay", 0)
    session = await upload_session_crud.start(
        db_session, session_name="unit", session_type="skills_assessment", total=4
    )
    await db_session.commit()

    async def worker(db, item):
        if item % 2:
            raise ValueError(f"bad item {item}")
        return {"completed": 1}

    counters = await run_batched_job(
        session.id, [0, 1, 2, 3], worker,
        job_name="Unit", batch_size=3, session_factory=session_factory,
    )
    assert counters["processed"] == 4
    assert counters["completed"] == 2
    assert counters["errors"] == 2
    assert counters["error_details"] == ["1: bad item 1", "3: bad item 3"]

    await db_session.refresh(session)
    assert session.status == SessionStatus.COMPLETED.value
    assert session.is_terminal


@pytest.mark.asyncio
async def test_all_items_failing_ends_in_error(session_factory, db_session, monkeypatch):
    monkeypatch.setattr(settings, "bulk_batch_delay", 0)
    session = await upload_session_crud.start(
        db_session, session_name="unit", session_type="role_assignment", total=2
    )
    await db_session.commit()

    async def worker(db, item):
        raise RuntimeError("boom")

    await run_batched_job(
        session.id, ["a", "b"], worker,
        job_name="Unit", batch_size=5, success_key="assigned",
        partial_status=SessionStatus.COMPLETED_WITH_ERRORS,
        session_factory=session_factory,
    )
    await db_session.refresh(session)
    assert session.status == SessionStatus.ERROR.value
    assert session.error_message == "All 2 items failed"


@pytest.mark.asyncio
async def test_job_slots_claim_and_free():
    slots = JobSlots(1)
    assert await slots.claim(timeout=0)
    assert slots.status() == {"max_tasks": 1, "current_tasks": 1, "available_slots": 0}

    assert not await slots.claim(timeout=0)

    slots.free()
    slots.free()
    assert slots.status()["available_slots"] == 1
    assert await slots.claim(timeout=0)
