"""
Fit Router - run résumé/posting fit analyses and read their results.
"""
from typing import Any, List, Optional
from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..database import get_db
from ..models import FitResult
from ..schemas.fit import AnalyzeResponse, FitResultDetail, FitResultResponse, FitResultSummary, FitView
from ..services.auth import get_current_user_id
from ..services.analysis_engine import ResumePayload, StageFailure
from ..services.fit_normalizer import normalize
from ..services.fit_orchestrator import (
    PDF_MIME,
    AnalysisInputError,
    FitOrchestrator,
    PersistenceError,
    get_fit_orchestrator,
    resolve_resume,
    validate_job_url,
)

router = APIRouter(prefix="/api/fit", tags=["Fit Analysis"])


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_fit(
    job_url: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    resume_file_id: Optional[int] = Form(None),
    demo_type: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    orchestrator: FitOrchestrator = Depends(get_fit_orchestrator),
):
    """
    Analyze a résumé against a job posting.

    The résumé comes from the multipart `resume` field when present,
    otherwise from `resume_file_id` or the user's most recent upload.
    The response arrives only after the result is persisted.
    """
    try:
        if demo_type:
            outcome = await orchestrator.store_demo(db, user_id, job_url, demo_type)
        else:
            validate_job_url(job_url)

            upload = None
            if resume is not None and resume.filename:
                content = await resume.read()
                # A named but empty upload never falls back to the stored résumé
                if not content:
                    raise AnalysisInputError("resume required")
                upload = ResumePayload(
                    content=content,
                    filename=resume.filename,
                    mime_type=resume.content_type or PDF_MIME,
                )

            payload = await resolve_resume(db, user_id, upload=upload, resume_file_id=resume_file_id)
            outcome = await orchestrator.analyze(db, user_id, job_url, payload)

    except AnalysisInputError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "message": str(e)}
        )
    except StageFailure as e:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT if e.timed_out else status.HTTP_502_BAD_GATEWAY,
            detail=e.to_dict()
        )
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "save_failed", "message": str(e)}
        )

    return AnalyzeResponse(result_id=outcome.result_id, status=outcome.status, demo=outcome.demo)


@router.post("/normalize", response_model=FitView)
async def normalize_payload(payload: Any = Body(None)):
    """Preview how a raw engine payload (or a result item) will be rendered."""
    return normalize(payload)


@router.get("", response_model=List[FitResultSummary])
async def list_fit_results(
    limit: int = 50,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """The caller's results, newest first (denormalized fields only)."""
    result = await db.execute(
        select(FitResult)
        .where(FitResult.user_id == user_id)
        .order_by(FitResult.created_at.desc())
        .limit(max(1, min(limit, 200)))
    )
    return result.scalars().all()


@router.get("/{result_id}", response_model=FitResultDetail)
async def get_fit_result(
    result_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    result = await db.execute(
        select(FitResult).where(
            FitResult.id == result_id,
            FitResult.user_id == user_id
        )
    )
    record = result.scalar_one_or_none()

    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="not found"
        )

    return FitResultDetail(
        item=FitResultResponse.model_validate(record),
        view=normalize(record)
    )
