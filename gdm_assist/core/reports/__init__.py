"""
Report Generation Module

Generates downloadable PDF summaries of GDM risk assessments.
"""
from .assessment_report import AssessmentReportGenerator, AssessmentReport

__all__ = [
    "AssessmentReportGenerator",
    "AssessmentReport",
]
