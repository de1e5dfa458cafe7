from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Literal
import os


class Settings(BaseSettings):
    app_name: str = "FitCheck API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = "INFO"

    # Database - supports both SQLite (local) and PostgreSQL (production)
    database_url: str = "sqlite+aiosqlite:///./fitcheck.db"

    # Security - MUST be set via environment variables in production
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 30  # 30 days

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Resume storage
    uploads_dir: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "uploads")
    max_resume_bytes: int = 10 * 1024 * 1024  # 10MB
    storage_fetch_timeout: float = 60.0

    # External analysis engine
    analysis_engine_url: str = "http://localhost:8001"
    analysis_engine_api_key: str = ""
    analysis_mode: Literal["combined", "staged"] = "combined"

    # Per-call timeouts (seconds)
    combined_timeout: float = 180.0
    resume_stage_timeout: float = 60.0
    jd_stage_timeout: float = 60.0
    fit_stage_timeout: float = 180.0

    # Engine endpoints
    combined_path: str = "/oneclick"
    resume_stage_path: str = "/resume"
    jd_stage_path: str = "/jd"
    fit_stage_path: str = "/fit"

    class Config:
        env_file = ".env"
        extra = "ignore"
        # Make field names case-insensitive for environment variables
        case_sensitive = False

    def get_cors_origins(self) -> list:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def stage_timeout(self, stage: str) -> float:
        """Timeout for one engine call, keyed by stage tag."""
        return {
            "oneclick": self.combined_timeout,
            "resume": self.resume_stage_timeout,
            "jd": self.jd_stage_timeout,
            "fit": self.fit_stage_timeout,
        }[stage]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
