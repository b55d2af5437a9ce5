"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    GdmAssistError,
    UnknownGuidelineError,
    ReportGenerationError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "GdmAssistError",
    "UnknownGuidelineError",
    "ReportGenerationError",
]
