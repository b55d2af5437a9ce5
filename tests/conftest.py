"""
Pytest Configuration and Fixtures

Shared fixtures for the GDM risk engine, reading classifier and API tests.
"""
import os
import tempfile

import pytest

# Reports written by the API during tests go to a throwaway directory
os.environ.setdefault("REPORTS_DIR", tempfile.mkdtemp(prefix="gdm-reports-"))

from gdm_assist.core.gdm import AssessmentInput, EthnicityRisk


@pytest.fixture
def example_input() -> AssessmentInput:
    """Worked example: BMI ~28.7, all three OGTT values raised under WHO."""
    return AssessmentInput(
        age=32,
        height_cm=165,
        weight_kg=78,
        gestational_age_weeks=28,
        fasting_glucose=5.3,
        ogtt_1h=11.2,
        ogtt_2h=8.9,
        history_gdm=False,
        family_history_dm=True,
        ethnicity_risk=EthnicityRisk.HIGH,
        systolic_bp=120,
    )


@pytest.fixture
def no_labs_input() -> AssessmentInput:
    """Young patient, no glucose results, no risk factors."""
    return AssessmentInput(age=25, height_cm=165, weight_kg=60)


@pytest.fixture
def example_payload() -> dict:
    """The worked example as an API request body."""
    return {
        "age": 32,
        "height_cm": 165,
        "weight_kg": 78,
        "gestational_age_weeks": 28,
        "fasting_glucose": 5.3,
        "ogtt_1h": 11.2,
        "ogtt_2h": 8.9,
        "history_gdm": False,
        "family_history_dm": True,
        "ethnicity_risk": "HIGH",
        "systolic_bp": 120,
    }
