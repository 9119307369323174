"""
Async HTTP client for the HR Portal API

Used by scripts and tests to start bulk jobs and follow their progress.
"""
import asyncio
import time
from typing import Any, Callable, Dict, Optional

import httpx
from loguru import logger

from hrportal.core.config import settings


class PollTimeoutError(TimeoutError):
    """The session did not reach a terminal status in time"""

    def __init__(self, session_id: str, timeout: float, last_progress: Optional[Dict[str, Any]] = None):
        self.session_id = session_id
        self.timeout = timeout
        self.last_progress = last_progress
        super().__init__(f"Session {session_id} not finished after {timeout}s")


class HRPortalClient:
    """
    Thin wrapper over the `/api/v1` endpoints

    Every call unwraps the response envelope and returns `data`.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        token: Optional[str] = None,
        *,
        poll_interval: Optional[float] = None,
        poll_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 60.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.poll_interval = settings.poll_interval if poll_interval is None else poll_interval
        self.poll_timeout = settings.poll_timeout if poll_timeout is None else poll_timeout

        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/api/v1",
            headers=headers,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "HRPortalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "HR Portal API call failed: status={}, response={}",
                exc.response.status_code,
                exc.response.text[:500],
            )
            raise
        return response.json().get("data")

    async def get_progress(self, session_id: str) -> Dict[str, Any]:
        """Progress snapshot of one bulk session"""
        return await self._request("GET", f"/uploads/sessions/{session_id}/progress")

    async def start_role_assignment(self, upload_session_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/uploads/sessions/{upload_session_id}/assign-roles")

    async def start_bulk_assessment(self, assessment_type: str, identifier: Optional[str] = None) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/skills/assessments/bulk",
            json={"assessment_type": assessment_type, "identifier": identifier},
        )

    async def poll_session(
        self,
        session_id: str,
        on_progress: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> Dict[str, Any]:
        """
        Poll a bulk session until it is terminal

        Returns the last progress snapshot. Raises PollTimeoutError once
        `poll_timeout` seconds have passed without a terminal status.
        """
        deadline = time.monotonic() + self.poll_timeout
        progress = None
        while True:
            progress = await self.get_progress(session_id)
            if on_progress:
                on_progress(progress)
            if progress.get("is_terminal"):
                logger.info("Session {} finished: {}", session_id, progress.get("status"))
                return progress
            if time.monotonic() >= deadline:
                raise PollTimeoutError(session_id, self.poll_timeout, progress)
            await asyncio.sleep(self.poll_interval)
