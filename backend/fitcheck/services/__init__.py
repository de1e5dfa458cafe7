from .auth import (
    create_access_token,
    decode_access_token,
    get_current_user_id,
    oauth2_scheme
)
from .fit_detect import (
    PayloadKind,
    DetectedPayload,
    detect_payload
)
from .fit_migrate import migrate_v1_to_v1_1
from .fit_text_miner import (
    mine_report,
    extract_total_score,
    extract_bullets,
    extract_table_scores,
    pick_summary
)
from .fit_normalizer import normalize
from .analysis_engine import (
    AnalysisEngineClient,
    ResumePayload,
    StageFailure
)
from .fit_orchestrator import (
    FitOrchestrator,
    AnalysisOutcome,
    AnalysisInputError,
    PersistenceError,
    get_fit_orchestrator
)
from .resume_storage import (
    ResumeStorageError,
    save_resume_bytes,
    load_resume_bytes,
    delete_resume_bytes
)

__all__ = [
    # Auth
    "create_access_token",
    "decode_access_token",
    "get_current_user_id",
    "oauth2_scheme",
    # Detection / migration
    "PayloadKind",
    "DetectedPayload",
    "detect_payload",
    "migrate_v1_to_v1_1",
    # Text mining
    "mine_report",
    "extract_total_score",
    "extract_bullets",
    "extract_table_scores",
    "pick_summary",
    # Normalization
    "normalize",
    # Orchestration
    "AnalysisEngineClient",
    "ResumePayload",
    "StageFailure",
    "FitOrchestrator",
    "AnalysisOutcome",
    "AnalysisInputError",
    "PersistenceError",
    "get_fit_orchestrator",
    # Storage
    "ResumeStorageError",
    "save_resume_bytes",
    "load_resume_bytes",
    "delete_resume_bytes"
]
