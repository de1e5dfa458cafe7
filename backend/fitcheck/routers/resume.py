"""
Resume Router - upload and inspect the résumé used for fit analyses.
"""
import logging
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..database import get_db
from ..models import ResumeFile
from ..schemas.resume import LatestResumeResponse, ResumeFileResponse, ResumeUploadResponse
from ..services.auth import get_current_user_id
from ..services.fit_orchestrator import PDF_MIME, get_latest_resume_file, is_pdf
from ..services.resume_storage import ResumeStorageError, delete_resume_bytes, save_resume_bytes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resume", tags=["Resume"])
settings = get_settings()


@router.get("", response_model=LatestResumeResponse)
async def get_latest_resume(
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Metadata of the user's most recent résumé, or null."""
    latest = await get_latest_resume_file(db, user_id)
    return LatestResumeResponse(
        latest=ResumeFileResponse.model_validate(latest) if latest else None
    )


@router.post("", response_model=ResumeUploadResponse)
async def upload_resume(
    resume: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Store a PDF résumé; it becomes the default for later analyses."""
    if not is_pdf(resume.filename, resume.content_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="pdf only"
        )

    content = await resume.read()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="resume required"
        )
    if len(content) > settings.max_resume_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size must be less than {settings.max_resume_bytes // (1024 * 1024)}MB"
        )

    try:
        locator = await save_resume_bytes(user_id, resume.filename or "resume.pdf", content)
    except ResumeStorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    resume_file = ResumeFile(
        user_id=user_id,
        original_name=(resume.filename or "resume.pdf")[:255],
        stored_path=locator,
        mime_type=resume.content_type or PDF_MIME,
        size=len(content),
    )
    db.add(resume_file)
    await db.commit()
    await db.refresh(resume_file)

    return ResumeUploadResponse(latest=ResumeFileResponse.model_validate(resume_file))


@router.delete("")
async def delete_latest_resume(
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Delete the most recent résumé (stored bytes and row)."""
    latest = await get_latest_resume_file(db, user_id)
    if not latest:
        return {"ok": True}

    # The stored file may already be gone
    await delete_resume_bytes(latest.stored_path)
    await db.delete(latest)
    await db.commit()
    logger.info(f"Deleted resume {latest.id} for user {user_id}")

    return {"ok": True}
