from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from ..models.fit_result import FitResultStatus


class Dimension(BaseModel):
    name: str
    score: float  # 0-100


class DeepDiveView(BaseModel):
    id: str
    title: str
    score: float
    overview: str = ""
    detail_md: str = ""
    next_steps: List[str] = Field(default_factory=list)


class FitView(BaseModel):
    """
    Canonical, renderer-agnostic result of normalization.
    Every field is optional - an empty FitView is the "no data yet" state.
    """
    score: Optional[float] = None
    summary: Optional[str] = None
    dimensions: Optional[List[Dimension]] = None
    strengths: Optional[List[str]] = None
    gaps: Optional[List[str]] = None
    recommendations: Optional[List[str]] = None
    raw_text: Optional[str] = Field(default=None, alias="rawText")

    deep_dives: Optional[List[DeepDiveView]] = None
    source: Optional[str] = None  # v1.1, v1, markdown, structured, text, empty

    class Config:
        populate_by_name = True


class AnalyzeResponse(BaseModel):
    result_id: str
    status: FitResultStatus
    demo: bool = False


class FitResultSummary(BaseModel):
    """Denormalized listing row - no re-parsing of raw."""
    id: str
    job_url: str
    status: FitResultStatus
    score: Optional[float] = None
    summary: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FitResultResponse(FitResultSummary):
    user_id: str
    resume_file_id: Optional[int] = None
    correlation_id: Optional[str] = None
    raw: Optional[str] = None
    strengths: Optional[List[str]] = None
    gaps: Optional[List[str]] = None
    recommendations: Optional[List[str]] = None


class FitResultDetail(BaseModel):
    item: FitResultResponse
    view: FitView
