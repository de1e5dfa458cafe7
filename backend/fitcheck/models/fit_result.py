"""
Fit Result Model - One completed résumé-to-posting analysis run.

Rows are inserted once, at the end of a successful orchestrator run, and are
never updated afterwards. A new analysis always produces a new row.
"""
import uuid
from enum import Enum
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Float, DateTime, JSON, Enum as SQLEnum
from ..database import Base


class FitResultStatus(str, Enum):
    """Status of a fit analysis run."""
    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"


class FitResult(Base):
    __tablename__ = "fit_results"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    # Plain reference, not a foreign key: deleting a résumé leaves its results untouched
    resume_file_id = Column(Integer, nullable=True, index=True)

    job_url = Column(String(2048), nullable=False)
    correlation_id = Column(String(64), nullable=True)

    # Verbatim engine response body, kept for replay/debugging
    raw = Column(Text, nullable=True)

    status = Column(
        SQLEnum(FitResultStatus),
        default=FitResultStatus.COMPLETED,
        nullable=False
    )

    # Denormalized from the FitView at write time
    score = Column(Float, nullable=True)
    summary = Column(Text, nullable=True)
    strengths = Column(JSON, default=list)
    gaps = Column(JSON, default=list)
    recommendations = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
