"""
Upload session and analysis result CRUD
"""
from typing import Optional, Dict, Any, List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from hrportal.models.base import utcnow
from hrportal.models.upload_session import UploadSession, SessionStatus
from hrportal.models.analysis_result import AnalysisResult, AnalysisStatus
from .base import CRUDBase


class CRUDUploadSession(CRUDBase[UploadSession]):
    """Upload session CRUD"""

    async def start(
        self,
        db: AsyncSession,
        *,
        session_name: str,
        session_type: str,
        total: int,
        created_by: Optional[str] = None,
        file_names: Optional[List[str]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> UploadSession:
        """Create a session in processing state with zeroed counters"""
        progress = {"total": total, "processed": 0, "completed": 0, "assigned": 0, "errors": 0}
        progress.update(extra or {})
        return await self.create(db, obj_in={
            "session_name": session_name,
            "session_type": session_type,
            "file_names": file_names or [],
            "total_rows": total,
            "status": SessionStatus.PROCESSING.value,
            "ai_analysis": progress,
            "created_by": created_by,
        })

    async def update_progress(
        self,
        db: AsyncSession,
        *,
        db_obj: UploadSession,
        progress: Dict[str, Any],
        status: Optional[SessionStatus] = None,
        error_message: Optional[str] = None,
    ) -> UploadSession:
        """Merge counters into ai_analysis and optionally move the status"""
        # reassign so the JSON column is flagged dirty
        db_obj.ai_analysis = {**(db_obj.ai_analysis or {}), **progress}
        if status is not None:
            db_obj.status = status.value
        if error_message is not None:
            db_obj.error_message = error_message
        db_obj.updated_at = utcnow()
        await db.flush()
        return db_obj


class CRUDAnalysisResult(CRUDBase[AnalysisResult]):
    """Analysis result CRUD"""

    async def record(
        self,
        db: AsyncSession,
        *,
        analysis_type: str,
        function_name: str,
        input_parameters: Dict[str, Any],
        analysis_result: Dict[str, Any],
        is_fallback: bool = False,
        employee_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> AnalysisResult:
        """Store one analysis"""
        status = AnalysisStatus.FALLBACK if is_fallback else AnalysisStatus.COMPLETED
        return await self.create(db, obj_in={
            "analysis_type": analysis_type,
            "function_name": function_name,
            "input_parameters": input_parameters,
            "analysis_result": analysis_result,
            "status": status.value,
            "employee_id": employee_id,
            "created_by": created_by,
        })

    async def count_distinct_employees(self, db: AsyncSession, analysis_type: str) -> int:
        result = await db.execute(
            select(func.count(func.distinct(self.model.employee_id)))
            .where(self.model.analysis_type == analysis_type)
            .where(self.model.employee_id.is_not(None))
        )
        return result.scalar() or 0


upload_session_crud = CRUDUploadSession(UploadSession)
analysis_result_crud = CRUDAnalysisResult(AnalysisResult)
