from .assessment import (
    AssessmentRequest,
    AssessmentResponse,
    CriteriaResponse,
    GuidelineResponse,
    HealthResponse,
    ReadingRequest,
    ReadingResponse,
    ReportResponse,
    RuleActionResponse,
    coerce_number,
)

__all__ = [
    "AssessmentRequest",
    "AssessmentResponse",
    "CriteriaResponse",
    "GuidelineResponse",
    "HealthResponse",
    "ReadingRequest",
    "ReadingResponse",
    "ReportResponse",
    "RuleActionResponse",
    "coerce_number",
]
