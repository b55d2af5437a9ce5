"""
GDM Risk Engine

Turns one patient's measurements and glucose results into a diagnostic
verdict, a 0-100 risk score, a risk band and plain-language advice.

Usage:
    from gdm_assist.core.gdm import GdmRiskEngine, AssessmentInput, Guideline

    engine = GdmRiskEngine()
    result = engine.assess(AssessmentInput(age=32, ogtt_2h=8.9), Guideline.NICE)
"""
from .base import (
    AssessmentInput,
    AssessmentResult,
    CriteriaBreakdown,
    Diagnostic,
    EthnicityRisk,
    Guideline,
    RiskLevel,
    calc_bmi,
)
from .thresholds import GUIDELINE_THRESHOLDS, GuidelineThresholds, get_thresholds
from .engine import GdmRiskEngine, assess

__all__ = [
    "AssessmentInput",
    "AssessmentResult",
    "CriteriaBreakdown",
    "Diagnostic",
    "EthnicityRisk",
    "Guideline",
    "RiskLevel",
    "calc_bmi",
    "GUIDELINE_THRESHOLDS",
    "GuidelineThresholds",
    "get_thresholds",
    "GdmRiskEngine",
    "assess",
]
