"""
GDM Risk Engine — Base Types

Data contracts shared by the threshold table, the engine, the report
exporter and the API layer. Everything here is immutable: an assessment
result is built once per call and never mutated afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from gdm_assist.utils.exceptions import UnknownGuidelineError


class Guideline(str, Enum):
    """
    Clinical guideline whose diagnostic glucose cutoffs are applied.

    WHO  – WHO 2013 / IADPSG one-step 75 g OGTT criteria
    NICE – NICE NG3 (diabetes in pregnancy)
    """
    WHO  = "WHO"
    NICE = "NICE"

    @classmethod
    def parse(cls, value: "str | Guideline") -> "Guideline":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise UnknownGuidelineError(str(value)) from None


class Diagnostic(str, Enum):
    """
    Diagnostic verdict.

    GDM           – at least one applicable criterion met
    NO_GDM        – applicable values supplied, none met
    INDETERMINATE – no applicable glucose value to judge
    """
    GDM           = "GDM"
    NO_GDM        = "NO_GDM"
    INDETERMINATE = "INDETERMINATE"


class RiskLevel(str, Enum):
    LOW      = "LOW"
    MODERATE = "MODERATE"
    HIGH     = "HIGH"


class EthnicityRisk(str, Enum):
    LOW  = "LOW"
    HIGH = "HIGH"


@dataclass(frozen=True)
class AssessmentInput:
    """
    One patient's measurements, already range-checked by the caller.

    Glucose values are plasma mmol/L. Every optional field may be None;
    missing labs are a valid clinical state, not an error.
    """
    age: int                                     # years
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    gestational_age_weeks: Optional[int] = None

    # ── Labs ──────────────────────────────────────────────────────────────
    fasting_glucose: Optional[float] = None
    ogtt_1h: Optional[float] = None
    ogtt_2h: Optional[float] = None

    # ── History & demographics ────────────────────────────────────────────
    history_gdm: bool = False
    family_history_dm: bool = False
    ethnicity_risk: EthnicityRisk = EthnicityRisk.LOW

    systolic_bp: Optional[float] = None          # mmHg

    @property
    def bmi(self) -> Optional[float]:
        """Unrounded BMI, or None unless both height and weight are known."""
        return calc_bmi(self.height_cm, self.weight_kg)

    @property
    def has_labs(self) -> bool:
        return any(
            v is not None
            for v in (self.fasting_glucose, self.ogtt_1h, self.ogtt_2h)
        )


def calc_bmi(height_cm: Optional[float], weight_kg: Optional[float]) -> Optional[float]:
    """weight(kg) / height(m)^2; None when either side is missing or height is zero."""
    if height_cm is None or weight_kg is None or height_cm <= 0:
        return None
    h = height_cm / 100
    return weight_kg / (h * h)


@dataclass(frozen=True)
class CriteriaBreakdown:
    """
    Per-criterion outcome. None means unset: value not supplied, or the
    guideline has no threshold for that time point.
    """
    fasting: Optional[bool] = None
    ogtt_1h: Optional[bool] = None
    ogtt_2h: Optional[bool] = None

    def evaluated(self) -> Tuple[bool, ...]:
        return tuple(c for c in (self.fasting, self.ogtt_1h, self.ogtt_2h) if c is not None)

    def any_met(self) -> bool:
        return any(self.evaluated())

    def to_dict(self) -> dict:
        return {
            "fasting": self.fasting,
            "ogtt_1h": self.ogtt_1h,
            "ogtt_2h": self.ogtt_2h,
        }


@dataclass(frozen=True)
class AssessmentResult:
    """Outcome of one `assess` call."""
    guideline: Guideline
    diagnostic: Diagnostic
    criteria: CriteriaBreakdown
    score: int                                   # 0-100
    risk_level: RiskLevel
    recommendations: Tuple[str, ...] = field(default_factory=tuple)
    explanations: Tuple[str, ...] = field(default_factory=tuple)
    references: Tuple[str, ...] = field(default_factory=tuple)
    bmi: Optional[float] = None                  # one decimal, display only

    # ── Serialisation ─────────────────────────────────────────────────────
    def to_dict(self) -> dict:
        return {
            "guideline": self.guideline.value,
            "diagnostic": self.diagnostic.value,
            "criteria": self.criteria.to_dict(),
            "score": self.score,
            "risk_level": self.risk_level.value,
            "recommendations": list(self.recommendations),
            "explanations": list(self.explanations),
            "references": list(self.references),
            "bmi": self.bmi,
        }
