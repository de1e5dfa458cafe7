"""
HTTP client for the external analysis engine.

Every call is bound to its own timer; on expiry the in-flight request is
cancelled and reported as a stage failure. Nothing here retries: the first
failure of any stage is final.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

# Stage tags reported to callers
STAGE_COMBINED = "oneclick"
STAGE_RESUME = "resume"
STAGE_JD = "jd"
STAGE_FIT = "fit"


class StageFailure(Exception):
    """An engine call failed: non-success status, timeout or network error."""

    def __init__(self, stage: str, status_code: Optional[int] = None, detail: str = "", timed_out: bool = False):
        super().__init__(f"{stage} stage failed ({status_code}): {detail}")
        self.stage = stage
        self.status_code = status_code
        self.detail = detail
        self.timed_out = timed_out

    def to_dict(self) -> dict:
        return {
            "error": "upstream_failed",
            "stage": self.stage,
            "upstream_status": self.status_code,
            "detail": self.detail,
            "timed_out": self.timed_out,
        }


@dataclass
class ResumePayload:
    content: bytes
    filename: str = "resume.pdf"
    mime_type: str = "application/pdf"
    resume_file_id: Optional[int] = None  # pinned ResumeFile, None when uploaded inline


@dataclass
class EngineResponse:
    stage: str
    status_code: int
    text: str


class AnalysisEngineClient:
    """
    One client per analysis run; use as an async context manager so the
    staged calls share a connection pool.
    """

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self.transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "AnalysisEngineClient":
        headers = {}
        if self.settings.analysis_engine_api_key:
            headers["Authorization"] = f"Bearer {self.settings.analysis_engine_api_key}"
        # Deadlines are enforced per call in _post
        self._http = httpx.AsyncClient(
            base_url=self.settings.analysis_engine_url,
            headers=headers,
            timeout=None,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _post(self, stage: str, path: str, **kwargs) -> EngineResponse:
        if self._http is None:
            raise RuntimeError("AnalysisEngineClient used outside of 'async with'")

        timeout = self.settings.stage_timeout(stage)
        logger.info(f"[FIT] stage={stage} POST {path} timeout={timeout:g}s")
        try:
            response = await asyncio.wait_for(self._http.post(path, **kwargs), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise StageFailure(stage, None, f"timed out after {timeout:g}s", timed_out=True) from e
        except httpx.TimeoutException as e:
            raise StageFailure(stage, None, f"timed out: {e}", timed_out=True) from e
        except httpx.HTTPError as e:
            raise StageFailure(stage, None, f"request failed: {e}") from e

        if not response.is_success:
            detail = response.text[:2000] if response.text else "Unknown error"
            raise StageFailure(stage, response.status_code, detail)
        return EngineResponse(stage=stage, status_code=response.status_code, text=response.text)

    async def run_combined(self, resume: ResumePayload, job_url: str, correlation_id: str) -> EngineResponse:
        """Single call: the engine performs every step and returns the report."""
        return await self._post(
            STAGE_COMBINED,
            self.settings.combined_path,
            files={"resume": (resume.filename, resume.content, resume.mime_type)},
            data={"request_id": correlation_id, "job_url": job_url},
        )

    async def submit_resume(self, resume: ResumePayload, correlation_id: str) -> EngineResponse:
        return await self._post(
            STAGE_RESUME,
            self.settings.resume_stage_path,
            files={"resume": (resume.filename, resume.content, resume.mime_type)},
            data={"request_id": correlation_id},
        )

    async def submit_job(self, job_url: str, correlation_id: str) -> EngineResponse:
        return await self._post(
            STAGE_JD,
            self.settings.jd_stage_path,
            json={"request_id": correlation_id, "job_url": job_url},
        )

    async def request_fit(self, correlation_id: str) -> EngineResponse:
        return await self._post(
            STAGE_FIT,
            self.settings.fit_stage_path,
            json={"request_id": correlation_id},
        )
