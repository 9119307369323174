"""
Bulk jobs

Each job runs as a FastAPI background task against an upload_sessions row
created by the start endpoint. Items are processed in batches; every item
gets its own DB session so one failure never rolls back its neighbours, and
the session's progress counters are written after every batch for the
polling client.
"""
import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hrportal.core.config import settings
from hrportal.core.database import get_session_factory
from hrportal.core.exceptions import NotFoundException
from hrportal.crud import (
    employee_crud,
    job_description_crud,
    standard_role_crud,
    upload_session_crud,
)
from hrportal.models.upload_session import (
    UploadSession,
    SessionStatus,
    ProgressCounters,
    SessionProgressResponse,
)
from hrportal.services.ai import (
    get_role_assignment_service,
    get_skills_assessment_service,
    get_mobility_service,
    get_development_service,
)
from hrportal.services.spreadsheet import normalize_employee_row

# items per batch
EMPLOYEE_UPLOAD_BATCH = 50
ROLE_ASSIGNMENT_BATCH = 5
SKILLS_ASSESSMENT_BATCH = 20
MOBILITY_BATCH = 5
DEVELOPMENT_BATCH = 5

# error details kept on the session
MAX_ERROR_DETAILS = 10

# seconds a job waits for a free task slot
SLOT_TIMEOUT = 300.0
SLOT_POLL_INTERVAL = 0.5

ItemWorker = Callable[[AsyncSession, Any], Awaitable[Dict[str, int]]]


class JobSlots:
    """Bounded number of bulk jobs running at once"""

    def __init__(self, limit: int):
        self.limit = max(limit, 1)
        self.running = 0

    async def claim(self, timeout: float = SLOT_TIMEOUT) -> bool:
        """Take a slot, False when none frees up within timeout seconds"""
        deadline = time.monotonic() + timeout
        while self.running >= self.limit:
            if time.monotonic() >= deadline:
                logger.warning("No bulk job slot free after {}s", timeout)
                return False
            await asyncio.sleep(SLOT_POLL_INTERVAL)
        self.running += 1
        return True

    def free(self) -> None:
        self.running = max(self.running - 1, 0)

    def status(self) -> Dict[str, int]:
        return {
            "max_tasks": self.limit,
            "current_tasks": self.running,
            "available_slots": self.limit - self.running,
        }


job_slots = JobSlots(settings.llm_max_concurrency)


def batched(items: Sequence[Any], size: int) -> List[Sequence[Any]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def final_status(counters: Dict[str, Any], success_key: str, partial_status: SessionStatus) -> SessionStatus:
    """
    Terminal status from the counters

    No errors: completed. Some errors with at least one success:
    partial_status. Nothing succeeded: error.
    """
    errors = counters.get("errors", 0)
    if errors == 0:
        return SessionStatus.COMPLETED
    if counters.get(success_key, 0) > 0:
        return partial_status
    return SessionStatus.ERROR


async def _set_progress(
    session_factory: async_sessionmaker,
    session_id: str,
    progress: Dict[str, Any],
    status: Optional[SessionStatus] = None,
    error_message: Optional[str] = None,
) -> None:
    async with session_factory() as db:
        session = await upload_session_crud.get(db, session_id)
        if session is None:
            logger.warning("Upload session {} vanished", session_id)
            return
        await upload_session_crud.update_progress(
            db, db_obj=session, progress=progress, status=status, error_message=error_message
        )
        await db.commit()


async def run_batched_job(
    session_id: str,
    items: Sequence[Any],
    worker: ItemWorker,
    *,
    job_name: str,
    batch_size: int,
    success_key: str = "completed",
    partial_status: SessionStatus = SessionStatus.COMPLETED,
    describe: Callable[[Any], str] = str,
    session_factory: Optional[async_sessionmaker] = None,
) -> Dict[str, Any]:
    """
    Drive one bulk job to a terminal status

    worker(db, item) returns counter increments, e.g. {"assigned": 1}; an
    exception counts the item as an error. The item's session is committed
    when the worker returns and rolled back when it raises.
    """
    factory = session_factory or get_session_factory()
    counters: Dict[str, Any] = {
        "total": len(items), "processed": 0, success_key: 0, "errors": 0, "error_details": [],
    }

    if not await job_slots.claim(SLOT_TIMEOUT):
        await _set_progress(factory, session_id, counters, SessionStatus.ERROR, "Timed out waiting for a task slot")
        return counters

    logger.info("{} job {} started: {} items", job_name, session_id, len(items))
    try:
        batches = batched(list(items), batch_size)
        for index, batch in enumerate(batches):
            for item in batch:
                try:
                    async with factory() as db:
                        increments = await worker(db, item)
                        await db.commit()
                    for key, value in increments.items():
                        counters[key] = counters.get(key, 0) + value
                except Exception as exc:
                    counters["errors"] += 1
                    counters["error_details"] = (
                        counters["error_details"] + [f"{describe(item)}: {exc}"]
                    )[-MAX_ERROR_DETAILS:]
                    logger.warning("{} job {}: item {} failed: {}", job_name, session_id, describe(item), exc)
                counters["processed"] += 1

            await _set_progress(factory, session_id, counters)
            if index < len(batches) - 1 and settings.bulk_batch_delay > 0:
                await asyncio.sleep(settings.bulk_batch_delay)

        status = final_status(counters, success_key, partial_status)
        message = None
        if status == SessionStatus.ERROR:
            message = f"All {counters['errors']} items failed"
        await _set_progress(factory, session_id, counters, status, message)
        logger.info("{} job {} finished: {} {}", job_name, session_id, status.value, counters)
    except Exception as exc:
        logger.exception("{} job {} crashed", job_name, session_id)
        await _set_progress(factory, session_id, counters, SessionStatus.ERROR, str(exc))
    finally:
        job_slots.free()
    return counters


async def _abort(factory: async_sessionmaker, session_id: str, message: str) -> None:
    logger.warning("Bulk job {} aborted: {}", session_id, message)
    await _set_progress(factory, session_id, {}, SessionStatus.ERROR, message)


# ==================== Employee upload ====================

async def run_employee_upload(
    session_id: str,
    rows: List[Dict[str, Any]],
    *,
    default_company: str = "xlsmart",
    uploaded_by: Optional[str] = None,
    session_factory: Optional[async_sessionmaker] = None,
) -> Dict[str, Any]:
    """Normalize and upsert roster rows"""

    async def worker(db: AsyncSession, indexed_row) -> Dict[str, int]:
        _, row = indexed_row
        employee_in = normalize_employee_row(row, default_company)
        _, created = await employee_crud.upsert(
            db, obj_in=employee_in, session_id=session_id, uploaded_by=uploaded_by
        )
        return {"completed": 1, "created" if created else "updated": 1}

    def describe(indexed_row) -> str:
        index, _ = indexed_row
        return f"row {index + 1}"

    return await run_batched_job(
        session_id,
        list(enumerate(rows)),
        worker,
        job_name="Employee upload",
        batch_size=EMPLOYEE_UPLOAD_BATCH,
        describe=describe,
        session_factory=session_factory,
    )


# ==================== Role assignment ====================

async def run_role_assignment(
    session_id: str,
    employee_ids: List[str],
    *,
    session_factory: Optional[async_sessionmaker] = None,
) -> Dict[str, Any]:
    """Assign standard roles to the given employees"""
    factory = session_factory or get_session_factory()
    async with factory() as db:
        roles = await standard_role_crud.get_active(db)
    if not roles:
        await _abort(factory, session_id, "No standard roles found. Please create standard roles first.")
        return {}

    service = get_role_assignment_service()

    async def worker(db: AsyncSession, employee_id: str) -> Dict[str, int]:
        employee = await employee_crud.get(db, employee_id)
        if employee is None:
            raise NotFoundException(f"Employee not found: {employee_id}")
        suggestion = await service.assign(db, employee, roles)
        return {"assigned": 1} if suggestion.matched else {"no_match": 1}

    return await run_batched_job(
        session_id,
        employee_ids,
        worker,
        job_name="Role assignment",
        batch_size=ROLE_ASSIGNMENT_BATCH,
        success_key="assigned",
        partial_status=SessionStatus.COMPLETED_WITH_ERRORS,
        session_factory=factory,
    )


# ==================== Skills assessment ====================

async def run_skills_assessment(
    session_id: str,
    employee_ids: List[str],
    *,
    target_job_description_id: Optional[str] = None,
    assessed_by: Optional[str] = None,
    session_factory: Optional[async_sessionmaker] = None,
) -> Dict[str, Any]:
    """Assess every selected employee, optionally against one JD"""
    factory = session_factory or get_session_factory()
    target = None
    if target_job_description_id:
        async with factory() as db:
            target = await job_description_crud.get(db, target_job_description_id)

    service = get_skills_assessment_service()

    async def worker(db: AsyncSession, employee_id: str) -> Dict[str, int]:
        employee = await employee_crud.get(db, employee_id)
        if employee is None:
            raise NotFoundException(f"Employee not found: {employee_id}")
        result, is_fallback = await service.assess(employee, target)
        await service.store(
            db,
            employee=employee,
            result=result,
            is_fallback=is_fallback,
            target_id=target.id if target else None,
            session_id=session_id,
            assessed_by=assessed_by,
            note=f"Bulk assessment session {session_id}",
        )
        return {"completed": 1, "fallbacks": int(is_fallback)}

    return await run_batched_job(
        session_id,
        employee_ids,
        worker,
        job_name="Skills assessment",
        batch_size=SKILLS_ASSESSMENT_BATCH,
        session_factory=factory,
    )


# ==================== Mobility planning ====================

async def run_mobility_planning(
    session_id: str,
    employee_ids: List[str],
    *,
    user_id: Optional[str] = None,
    session_factory: Optional[async_sessionmaker] = None,
) -> Dict[str, Any]:
    """Create a mobility plan per selected employee"""
    factory = session_factory or get_session_factory()
    async with factory() as db:
        roles = await standard_role_crud.get_active(db)

    service = get_mobility_service()

    async def worker(db: AsyncSession, employee_id: str) -> Dict[str, int]:
        employee = await employee_crud.get(db, employee_id)
        if employee is None:
            raise NotFoundException(f"Employee not found: {employee_id}")
        record = await service.create_plan(db, employee, roles, user_id=user_id)
        return {"completed": 1, "fallbacks": int(record.status == "fallback")}

    return await run_batched_job(
        session_id,
        employee_ids,
        worker,
        job_name="Mobility planning",
        batch_size=MOBILITY_BATCH,
        session_factory=factory,
    )


# ==================== Development planning ====================

async def run_development_planning(
    session_id: str,
    employee_ids: List[str],
    *,
    user_id: Optional[str] = None,
    session_factory: Optional[async_sessionmaker] = None,
) -> Dict[str, Any]:
    """Create a development plan per selected employee"""
    service = get_development_service()

    async def worker(db: AsyncSession, employee_id: str) -> Dict[str, int]:
        employee = await employee_crud.get(db, employee_id)
        if employee is None:
            raise NotFoundException(f"Employee not found: {employee_id}")
        plan = await service.create_plan(db, employee, session_id=session_id, user_id=user_id)
        return {"completed": 1, "fallbacks": int(plan.is_fallback)}

    return await run_batched_job(
        session_id,
        employee_ids,
        worker,
        job_name="Development planning",
        batch_size=DEVELOPMENT_BATCH,
        session_factory=session_factory,
    )


# ==================== Progress ====================

def session_progress(session: UploadSession) -> SessionProgressResponse:
    """What the polling endpoint reports for a session"""
    data = session.ai_analysis or {}
    succeeded = data.get("assigned") or data.get("completed") or 0
    return SessionProgressResponse(
        session_id=session.id,
        status=session.status,
        progress=ProgressCounters(
            total=data.get("total", session.total_rows),
            processed=data.get("processed", 0),
            assigned=succeeded,
            errors=data.get("errors", 0),
        ),
        error_message=session.error_message,
        is_terminal=session.is_terminal,
    )
