from .fit import router as fit_router
from .resume import router as resume_router

__all__ = [
    "fit_router", "resume_router"
]
