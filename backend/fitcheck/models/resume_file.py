from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime
from ..database import Base


class ResumeFile(Base):
    __tablename__ = "resume_files"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    original_name = Column(String(255), nullable=False)
    stored_path = Column(String(1024), nullable=False)  # "/uploads/..." or remote URL
    mime_type = Column(String(100), default="application/pdf")
    size = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
