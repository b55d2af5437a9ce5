"""
GDM Risk Engine

Maps an AssessmentInput to an AssessmentResult under one guideline.
Pure and deterministic: same input + guideline gives an equal result.

Usage:
    from gdm_assist.core.gdm import assess, AssessmentInput, Guideline

    result = assess(AssessmentInput(age=32, fasting_glucose=5.3), Guideline.NICE)
    print(result.diagnostic, result.score, result.risk_level)

Pipeline:
    1. thresholds      get_thresholds(guideline)
    2. criteria        evaluate_criteria()
    3. verdict         classify()
    4. score           compute_score()
    5. band            risk_level_for()
    6. advice          recommend()
    7. explanation     explain()
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .base import (
    AssessmentInput,
    AssessmentResult,
    CriteriaBreakdown,
    Diagnostic,
    EthnicityRisk,
    Guideline,
    RiskLevel,
)
from .thresholds import GUIDELINE_THRESHOLDS, GuidelineThresholds, get_thresholds

logger = logging.getLogger(__name__)

# ── Score weights ─────────────────────────────────────────────────────────────

AGE_HIGH            = 35
AGE_MODERATE        = 30
POINTS_AGE_HIGH     = 18
POINTS_AGE_MODERATE = 8

BMI_OBESE           = 30.0
BMI_OVERWEIGHT      = 25.0
POINTS_BMI_OBESE    = 20
POINTS_BMI_OVER     = 8

POINTS_ETHNICITY    = 10
POINTS_PRIOR_GDM    = 25
POINTS_FAMILY_DM    = 8

SBP_HIGH            = 140
POINTS_SBP          = 6

# Lab proximity to its guideline threshold
PROXIMITY_NEAR      = 0.90
POINTS_LAB_MET      = 50
POINTS_LAB_NEAR     = 20
POINTS_LAB_BELOW    = 5

SCORE_MIN, SCORE_MAX = 0, 100

# Risk bands (score >= cutoff)
BAND_HIGH           = 65
BAND_MODERATE       = 30

# OGTT screening window
SCREENING_WINDOW_WEEKS = 24


class GestationWindow(str, Enum):
    EARLY     = "early"        # < 24 weeks
    SCREENING = "screening"    # >= 24 weeks
    UNKNOWN   = "unknown"


def gestation_window(weeks: Optional[int]) -> GestationWindow:
    if weeks is None:
        return GestationWindow.UNKNOWN
    if weeks < SCREENING_WINDOW_WEEKS:
        return GestationWindow.EARLY
    return GestationWindow.SCREENING


# ── Steps 2-3: criteria and verdict ──────────────────────────────────────────

def _meets(value: Optional[float], threshold: Optional[float]) -> Optional[bool]:
    if value is None or threshold is None:
        return None
    return value >= threshold


def evaluate_criteria(inp: AssessmentInput, thresholds: GuidelineThresholds) -> CriteriaBreakdown:
    return CriteriaBreakdown(
        fasting=_meets(inp.fasting_glucose, thresholds.fasting),
        ogtt_1h=_meets(inp.ogtt_1h, thresholds.one_hour),
        ogtt_2h=_meets(inp.ogtt_2h, thresholds.two_hour),
    )


def classify(criteria: CriteriaBreakdown) -> Diagnostic:
    """
    INDETERMINATE when nothing applicable was evaluated. This also covers a
    lone 1-hour value under NICE, so that value never moves the verdict.
    """
    if not criteria.evaluated():
        return Diagnostic.INDETERMINATE
    if criteria.any_met():
        return Diagnostic.GDM
    return Diagnostic.NO_GDM


# ── Steps 4-5: score and band ─────────────────────────────────────────────────

def _lab_points(value: Optional[float], threshold: Optional[float]) -> int:
    if value is None or threshold is None:
        return 0
    if value >= threshold:
        return POINTS_LAB_MET
    if value >= PROXIMITY_NEAR * threshold:
        return POINTS_LAB_NEAR
    return POINTS_LAB_BELOW


def _score_components(inp: AssessmentInput, thresholds: GuidelineThresholds) -> Dict[str, int]:
    parts: Dict[str, int] = {}

    if inp.age >= AGE_HIGH:
        parts["age"] = POINTS_AGE_HIGH
    elif inp.age >= AGE_MODERATE:
        parts["age"] = POINTS_AGE_MODERATE

    bmi = inp.bmi
    if bmi is not None:
        if bmi >= BMI_OBESE:
            parts["bmi"] = POINTS_BMI_OBESE
        elif bmi >= BMI_OVERWEIGHT:
            parts["bmi"] = POINTS_BMI_OVER

    if inp.ethnicity_risk == EthnicityRisk.HIGH:
        parts["ethnicity"] = POINTS_ETHNICITY
    if inp.history_gdm:
        parts["history_gdm"] = POINTS_PRIOR_GDM
    if inp.family_history_dm:
        parts["family_history_dm"] = POINTS_FAMILY_DM
    if inp.systolic_bp is not None and inp.systolic_bp >= SBP_HIGH:
        parts["systolic_bp"] = POINTS_SBP

    # 1-hour only counts where the guideline has a 1-hour threshold
    for name, value, threshold in (
        ("fasting_glucose", inp.fasting_glucose, thresholds.fasting),
        ("ogtt_1h", inp.ogtt_1h, thresholds.one_hour),
        ("ogtt_2h", inp.ogtt_2h, thresholds.two_hour),
    ):
        points = _lab_points(value, threshold)
        if points:
            parts[name] = points

    return parts


def compute_score(inp: AssessmentInput, thresholds: GuidelineThresholds) -> int:
    """Additive 0-100 score, clamped at both ends."""
    total = sum(_score_components(inp, thresholds).values())
    return max(SCORE_MIN, min(SCORE_MAX, total))


def risk_level_for(score: int) -> RiskLevel:
    if score >= BAND_HIGH:
        return RiskLevel.HIGH
    if score >= BAND_MODERATE:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


# ── Step 6: recommendations ───────────────────────────────────────────────────

_EARLY_RETEST = (
    "Early gestation ({weeks} weeks): retest with a 75 g OGTT at 24–28 weeks."
)

# (diagnostic, risk level) → ordered advice; {guideline} is filled per call
_RECOMMENDATIONS: Dict[Tuple[Diagnostic, RiskLevel], Tuple[str, ...]] = {
    (Diagnostic.GDM, RiskLevel.HIGH): (
        "Results meet {guideline} diagnostic criteria for GDM: refer to the joint "
        "diabetes and antenatal clinic.",
        "Start capillary glucose self-monitoring (fasting and 1-hour post-meal) "
        "and review within 1–2 weeks.",
        "Give diet and physical activity advice; consider metformin or insulin if "
        "targets are not met within 1–2 weeks.",
        "Additional risk factors present: arrange closer fetal growth surveillance.",
    ),
    (Diagnostic.GDM, RiskLevel.MODERATE): (
        "Results meet {guideline} diagnostic criteria for GDM: refer to the joint "
        "diabetes and antenatal clinic.",
        "Start capillary glucose self-monitoring (fasting and 1-hour post-meal) "
        "and review within 1–2 weeks.",
        "Give diet and physical activity advice; consider metformin or insulin if "
        "targets are not met within 1–2 weeks.",
    ),
    (Diagnostic.GDM, RiskLevel.LOW): (
        "Results meet {guideline} diagnostic criteria for GDM: refer to the joint "
        "diabetes and antenatal clinic.",
        "Start capillary glucose self-monitoring (fasting and 1-hour post-meal) "
        "and review within 1–2 weeks.",
    ),
    (Diagnostic.NO_GDM, RiskLevel.HIGH): (
        "Glucose values are below {guideline} diagnostic thresholds but the risk "
        "profile is high: consider repeating the OGTT if clinical suspicion persists "
        "(e.g. polyhydramnios or suspected macrosomia).",
        "Reinforce diet and physical activity advice.",
    ),
    (Diagnostic.NO_GDM, RiskLevel.MODERATE): (
        "Glucose values are below {guideline} diagnostic thresholds: reinforce diet "
        "and physical activity advice.",
        "Reassess if new risk factors or symptoms appear.",
    ),
    (Diagnostic.NO_GDM, RiskLevel.LOW): (
        "Glucose values are below {guideline} diagnostic thresholds: continue "
        "routine antenatal care.",
    ),
    (Diagnostic.INDETERMINATE, RiskLevel.HIGH): (
        "No applicable glucose results: offer a 75 g OGTT as soon as possible and "
        "repeat at 24–28 weeks if the first test is normal.",
    ),
    (Diagnostic.INDETERMINATE, RiskLevel.MODERATE): (
        "No applicable glucose results: offer a 75 g OGTT at 24–28 weeks.",
    ),
    (Diagnostic.INDETERMINATE, RiskLevel.LOW): (
        "No diagnostic testing indicated on risk factors alone; continue routine "
        "antenatal care.",
    ),
}


def recommend(
    diagnostic: Diagnostic,
    risk_level: RiskLevel,
    gestational_age_weeks: Optional[int],
    guideline: Guideline = Guideline.WHO,
) -> List[str]:
    out: List[str] = []
    window = gestation_window(gestational_age_weeks)
    if window == GestationWindow.EARLY and diagnostic != Diagnostic.GDM:
        out.append(_EARLY_RETEST.format(weeks=gestational_age_weeks))
    out.extend(
        line.format(guideline=guideline.value)
        for line in _RECOMMENDATIONS[(diagnostic, risk_level)]
    )
    return out


# ── Step 7: explanations ──────────────────────────────────────────────────────

_LAB_NAMES = {
    "fasting": "Fasting glucose",
    "ogtt_1h": "1-hour OGTT",
    "ogtt_2h": "2-hour OGTT",
}

_VERDICT_LINES = {
    Diagnostic.GDM: "Meets {guideline} diagnostic criteria for GDM.",
    Diagnostic.NO_GDM: "Does not meet {guideline} diagnostic criteria for GDM.",
    Diagnostic.INDETERMINATE: "No applicable glucose values: diagnostic status indeterminate.",
}


def explain(
    inp: AssessmentInput,
    thresholds: GuidelineThresholds,
    criteria: CriteriaBreakdown,
    diagnostic: Diagnostic,
    score: int,
    risk_level: RiskLevel,
) -> List[str]:
    guideline = thresholds.guideline.value
    lines = [
        f"Risk score {score}/100 ({risk_level.value}).",
        _VERDICT_LINES[diagnostic].format(guideline=guideline),
    ]

    for key, value, threshold, met in (
        ("fasting", inp.fasting_glucose, thresholds.fasting, criteria.fasting),
        ("ogtt_1h", inp.ogtt_1h, thresholds.one_hour, criteria.ogtt_1h),
        ("ogtt_2h", inp.ogtt_2h, thresholds.two_hour, criteria.ogtt_2h),
    ):
        if value is None:
            continue
        name = _LAB_NAMES[key]
        if threshold is None:
            lines.append(f"{name} {value:g} mmol/L: not used by {guideline} criteria.")
            continue
        op = "≥" if met else "<"
        lines.append(f"{name} {value:g} mmol/L {op} {threshold:.1f} ({guideline} threshold).")

    if inp.age >= AGE_HIGH:
        lines.append(f"Age {inp.age} (≥ {AGE_HIGH}).")
    elif inp.age >= AGE_MODERATE:
        lines.append(f"Age {inp.age} (≥ {AGE_MODERATE}).")

    bmi = inp.bmi
    if bmi is not None:
        if bmi >= BMI_OBESE:
            lines.append(f"BMI {bmi:.1f} (obesity).")
        elif bmi >= BMI_OVERWEIGHT:
            lines.append(f"BMI {bmi:.1f} (overweight).")
        else:
            lines.append(f"BMI {bmi:.1f}.")

    if inp.ethnicity_risk == EthnicityRisk.HIGH:
        lines.append("Higher-risk ethnicity.")
    if inp.history_gdm:
        lines.append("Previous GDM.")
    if inp.family_history_dm:
        lines.append("Family history of diabetes.")
    if inp.systolic_bp is not None and inp.systolic_bp >= SBP_HIGH:
        lines.append(f"Systolic BP {inp.systolic_bp:g} mmHg (≥ {SBP_HIGH}).")

    if gestation_window(inp.gestational_age_weeks) == GestationWindow.EARLY:
        lines.append(
            f"Gestational age {inp.gestational_age_weeks} weeks: before the "
            f"24–28 week OGTT window."
        )

    return lines


# ── Entry point ───────────────────────────────────────────────────────────────

def assess(inp: AssessmentInput, guideline: "Guideline | str" = Guideline.WHO) -> AssessmentResult:
    """
    Run the full assessment for one patient under one guideline.

    Args:
        inp: Pre-validated measurements; optional labs may be None.
        guideline: Guideline tag (enum or case-insensitive string).

    Returns:
        A new AssessmentResult. Never raises for well-typed input.
    """
    thresholds = get_thresholds(guideline)
    criteria = evaluate_criteria(inp, thresholds)
    diagnostic = classify(criteria)
    score = compute_score(inp, thresholds)
    risk_level = risk_level_for(score)

    bmi = inp.bmi
    result = AssessmentResult(
        guideline=thresholds.guideline,
        diagnostic=diagnostic,
        criteria=criteria,
        score=score,
        risk_level=risk_level,
        recommendations=tuple(
            recommend(diagnostic, risk_level, inp.gestational_age_weeks, thresholds.guideline)
        ),
        explanations=tuple(explain(inp, thresholds, criteria, diagnostic, score, risk_level)),
        references=thresholds.references,
        bmi=round(bmi, 1) if bmi is not None else None,
    )
    logger.debug(
        f"assess [{thresholds.guideline.value}]: diagnostic={diagnostic.value} "
        f"score={score} level={risk_level.value}"
    )
    return result


class GdmRiskEngine:
    """
    Service-facing wrapper around `assess`.

    Stateless apart from its default guideline; safe to share across requests.
    """

    def __init__(self, default_guideline: "Guideline | str" = Guideline.WHO):
        self.default_guideline = Guideline.parse(default_guideline)

    def assess(
        self,
        inp: AssessmentInput,
        guideline: "Optional[Guideline | str]" = None,
    ) -> AssessmentResult:
        result = assess(inp, guideline if guideline is not None else self.default_guideline)
        logger.info(
            f"Assessment complete: {result.risk_level.value} risk",
            extra={
                "guideline": result.guideline.value,
                "diagnostic": result.diagnostic.value,
                "score": result.score,
            },
        )
        return result

    @staticmethod
    def score_breakdown(inp: AssessmentInput, guideline: "Guideline | str" = Guideline.WHO) -> Dict[str, int]:
        """Unclamped per-factor points, for auditing how a score was reached."""
        return _score_components(inp, get_thresholds(guideline))

    @staticmethod
    def available_guidelines() -> List[Guideline]:
        return list(GUIDELINE_THRESHOLDS.keys())

    @staticmethod
    def summarise(result: AssessmentResult) -> Dict:
        """
        Compact dict for JSON API responses.

        Example output:
        {
            "diagnostic": "GDM",
            "risk_level": "HIGH",
            "score": 100,
            "criteria_met": ["fasting", "ogtt_2h"],
            "recommendation_count": 4
        }
        """
        met = [name for name, value in result.criteria.to_dict().items() if value]
        return {
            "guideline": result.guideline.value,
            "diagnostic": result.diagnostic.value,
            "risk_level": result.risk_level.value,
            "score": result.score,
            "criteria_met": met,
            "recommendation_count": len(result.recommendations),
        }
