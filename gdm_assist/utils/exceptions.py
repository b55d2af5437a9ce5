"""
Custom Exception Hierarchy

The risk engine itself never raises for well-typed input; these cover the
edges around it (guideline lookup and PDF export). Each subclass fixes its
own error code and HTTP status, so the API handler only reads them back.
"""
import logging
from typing import Optional, Dict, Any


class GdmAssistError(Exception):
    """Base exception for all GDM Assist errors."""

    code = "GDM_ASSIST_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def log_level(self) -> int:
        """Server-side failures are logged as errors, bad requests as warnings."""
        return logging.ERROR if self.status_code >= 500 else logging.WARNING

    def to_dict(self) -> Dict[str, Any]:
        """Body of the JSON error response."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class UnknownGuidelineError(GdmAssistError):
    """A guideline tag that has no threshold set."""

    code = "UNKNOWN_GUIDELINE"

    def __init__(self, guideline: str):
        from gdm_assist.core.gdm.base import Guideline

        valid = [g.value for g in Guideline]
        super().__init__(
            f"Unknown guideline: {guideline!r}. Valid: {valid}",
            details={"guideline": guideline, "valid": valid},
        )
        self.guideline = guideline


class ReportGenerationError(GdmAssistError):
    """The assessment PDF could not be written."""

    code = "REPORT_ERROR"
    status_code = 500

    def __init__(self, message: str, report_id: str = "unknown"):
        super().__init__(message, details={"report_id": report_id})
        self.report_id = report_id
