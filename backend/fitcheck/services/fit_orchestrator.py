"""
Fit Analysis Orchestrator

Drives the external analysis engine for one request and persists a durable
FitResult on success.

    received -> (stage calls...) -> persisted
    received -> failed(stage, detail)

Nothing is written before the engine call completes, and nothing is written
on any failure path. Readers poll for the existence of the completed row.
"""
import uuid
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..models import FitResult, FitResultStatus, ResumeFile
from .analysis_engine import AnalysisEngineClient, EngineResponse, ResumePayload
from .demo_reports import DEMO_REPORTS
from .fit_normalizer import normalize
from .resume_storage import ResumeStorageError, load_resume_bytes

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"


class AnalysisInputError(Exception):
    """The request itself is invalid; no engine call is attempted."""


class PersistenceError(Exception):
    """The engine succeeded but the result could not be saved."""


@dataclass
class AnalysisOutcome:
    result_id: str
    status: FitResultStatus
    demo: bool = False


# ============================================================================
# Input validation and résumé sourcing
# ============================================================================

def validate_job_url(job_url: Optional[str]) -> str:
    if not job_url or not job_url.strip():
        raise AnalysisInputError("jobUrl required")
    job_url = job_url.strip()
    parsed = urlparse(job_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise AnalysisInputError("jobUrl must be an http(s) URL")
    return job_url


def is_pdf(filename: Optional[str], mime_type: Optional[str]) -> bool:
    if mime_type == PDF_MIME:
        return True
    return bool(filename) and filename.lower().endswith(".pdf")


def validate_resume(resume: Optional[ResumePayload], max_bytes: int) -> None:
    if resume is None or not resume.content:
        raise AnalysisInputError("resume required")
    if not is_pdf(resume.filename, resume.mime_type):
        raise AnalysisInputError("pdf only")
    if len(resume.content) > max_bytes:
        raise AnalysisInputError(f"File size must be less than {max_bytes // (1024 * 1024)}MB")


async def get_latest_resume_file(db: AsyncSession, user_id: str) -> Optional[ResumeFile]:
    result = await db.execute(
        select(ResumeFile)
        .where(ResumeFile.user_id == user_id)
        .order_by(ResumeFile.created_at.desc(), ResumeFile.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def resolve_resume(
    db: AsyncSession,
    user_id: str,
    upload: Optional[ResumePayload] = None,
    resume_file_id: Optional[int] = None,
) -> ResumePayload:
    """
    Uploaded bytes win. Otherwise load the requested file, or the user's most
    recent one; its id is pinned on the payload for the rest of the run.
    """
    if upload is not None:
        return upload

    if resume_file_id is not None:
        result = await db.execute(
            select(ResumeFile).where(
                ResumeFile.id == resume_file_id,
                ResumeFile.user_id == user_id
            )
        )
        resume_file = result.scalar_one_or_none()
        if not resume_file:
            raise AnalysisInputError("resume not found")
    else:
        resume_file = await get_latest_resume_file(db, user_id)
        if not resume_file:
            raise AnalysisInputError("resume required")

    try:
        content = await load_resume_bytes(resume_file.stored_path)
    except ResumeStorageError as e:
        raise AnalysisInputError(str(e)) from e

    return ResumePayload(
        content=content,
        filename=resume_file.original_name or "resume.pdf",
        mime_type=resume_file.mime_type or PDF_MIME,
        resume_file_id=resume_file.id,
    )


# ============================================================================
# Orchestrator
# ============================================================================

class FitOrchestrator:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self.transport = transport

    def engine(self) -> AnalysisEngineClient:
        return AnalysisEngineClient(self.settings, transport=self.transport)

    async def analyze(
        self,
        db: AsyncSession,
        user_id: str,
        job_url: Optional[str],
        resume: Optional[ResumePayload],
    ) -> AnalysisOutcome:
        """
        Run one analysis and persist the completed result.

        Raises AnalysisInputError before any engine call, StageFailure when
        an engine call fails (remaining stages are skipped), and
        PersistenceError when the final insert fails.
        """
        job_url = validate_job_url(job_url)
        validate_resume(resume, self.settings.max_resume_bytes)

        correlation_id = uuid.uuid4().hex
        logger.info(
            f"[FIT] Starting: user={user_id}, mode={self.settings.analysis_mode}, "
            f"correlation_id={correlation_id}, resume_file_id={resume.resume_file_id}"
        )

        try:
            if self.settings.analysis_mode == "staged":
                response = await self._run_staged(resume, job_url, correlation_id)
            else:
                async with self.engine() as engine:
                    response = await engine.run_combined(resume, job_url, correlation_id)
        except Exception as e:
            logger.warning(f"[FIT] Aborted: correlation_id={correlation_id}, error={e}")
            raise

        return await self._persist(
            db,
            user_id=user_id,
            job_url=job_url,
            raw=response.text,
            correlation_id=correlation_id,
            resume_file_id=resume.resume_file_id,
        )

    async def _run_staged(self, resume: ResumePayload, job_url: str, correlation_id: str) -> EngineResponse:
        # Strictly sequential - the first failure aborts the remaining stages
        async with self.engine() as engine:
            await engine.submit_resume(resume, correlation_id)
            await engine.submit_job(job_url, correlation_id)
            return await engine.request_fit(correlation_id)

    async def store_demo(self, db: AsyncSession, user_id: str, job_url: Optional[str], demo_type: str) -> AnalysisOutcome:
        """Persist a bundled sample report without calling the engine."""
        job_url = validate_job_url(job_url)
        report = DEMO_REPORTS.get(demo_type)
        if report is None:
            raise AnalysisInputError(f"unknown demoType: {demo_type}")

        outcome = await self._persist(
            db,
            user_id=user_id,
            job_url=job_url,
            raw=report,
            correlation_id=None,
            resume_file_id=None,
        )
        outcome.demo = True
        return outcome

    async def _persist(
        self,
        db: AsyncSession,
        user_id: str,
        job_url: str,
        raw: str,
        correlation_id: Optional[str],
        resume_file_id: Optional[int],
    ) -> AnalysisOutcome:
        view = normalize({"raw": raw})

        record = FitResult(
            id=str(uuid.uuid4()),
            user_id=user_id,
            resume_file_id=resume_file_id,
            job_url=job_url,
            correlation_id=correlation_id,
            raw=raw,
            status=FitResultStatus.COMPLETED,
            score=view.score,
            summary=view.summary,
            strengths=view.strengths or [],
            gaps=view.gaps or [],
            recommendations=view.recommendations or [],
        )
        db.add(record)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[FIT] Failed to save result for user={user_id}: {e}")
            raise PersistenceError("failed to save analysis result") from e

        logger.info(f"[FIT] SUCCESS: result_id={record.id}, source={view.source}, score={view.score}")
        return AnalysisOutcome(result_id=record.id, status=FitResultStatus.COMPLETED)


def get_fit_orchestrator() -> FitOrchestrator:
    """FastAPI dependency; overridden in tests to inject a fake engine transport."""
    return FitOrchestrator()
