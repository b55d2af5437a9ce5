"""
Guideline Threshold Table

Diagnostic glucose cutoffs (mmol/L, inclusive `>=`) per guideline.

    Guideline   Fasting   1-hour   2-hour
    WHO 2013     5.1      10.0      8.5     (any one is diagnostic)
    NICE NG3     5.6       —        7.8     (fasting or 2-hour)

Adding a guideline:
    1. Add a member to `Guideline` in base.py
    2. Add its row to GUIDELINE_THRESHOLDS below.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .base import Guideline


@dataclass(frozen=True)
class GuidelineThresholds:
    guideline: Guideline
    label: str
    fasting: float
    one_hour: Optional[float]       # None = time point not used by this guideline
    two_hour: float
    references: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "guideline": self.guideline.value,
            "label": self.label,
            "fasting": self.fasting,
            "one_hour": self.one_hour,
            "two_hour": self.two_hour,
            "references": list(self.references),
        }


# ── Registry: guideline → thresholds ─────────────────────────────────────────
GUIDELINE_THRESHOLDS: Mapping[Guideline, GuidelineThresholds] = MappingProxyType({
    Guideline.WHO: GuidelineThresholds(
        guideline=Guideline.WHO,
        label="WHO / IADPSG (fasting ≥5.1, 1h ≥10.0, 2h ≥8.5)",
        fasting=5.1,
        one_hour=10.0,
        two_hour=8.5,
        references=(
            "WHO 2013: Diagnostic criteria and classification of hyperglycaemia "
            "first detected in pregnancy",
            "IADPSG 2010: International Association of Diabetes and Pregnancy "
            "Study Groups recommendations",
        ),
    ),
    Guideline.NICE: GuidelineThresholds(
        guideline=Guideline.NICE,
        label="NICE NG3 (fasting ≥5.6 OR 2h ≥7.8)",
        fasting=5.6,
        one_hour=None,
        two_hour=7.8,
        references=(
            "NICE NG3: Diabetes in pregnancy — management from preconception "
            "to the postnatal period (https://www.nice.org.uk/guidance/ng3)",
        ),
    ),
})


def get_thresholds(guideline: "Guideline | str") -> GuidelineThresholds:
    """Threshold set for a guideline tag; raises UnknownGuidelineError for unknown tags."""
    return GUIDELINE_THRESHOLDS[Guideline.parse(guideline)]
