from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ResumeFileResponse(BaseModel):
    id: int
    original_name: str
    mime_type: Optional[str] = None
    size: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LatestResumeResponse(BaseModel):
    latest: Optional[ResumeFileResponse] = None


class ResumeUploadResponse(BaseModel):
    ok: bool = True
    latest: ResumeFileResponse
