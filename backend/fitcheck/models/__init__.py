from .resume_file import ResumeFile
from .fit_result import FitResult, FitResultStatus

__all__ = [
    "ResumeFile",
    # Fit analysis results
    "FitResult", "FitResultStatus"
]
