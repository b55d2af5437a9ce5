"""
Self-Monitoring Glucose Targets

Traffic-light classification of a single capillary glucose reading taken
after diagnosis, against the NICE NG3 self-monitoring targets (mmol/L).

    Context              ok        caution          high
    fasting              < 5.3     < 6.3            ≥ 6.3
    1 h post-meal        < 7.8     < 8.8            ≥ 8.8
    2 h post-meal        < 6.4     < 7.4            ≥ 7.4
    random / unknown     < 7.8     < 9.0            ≥ 9.0
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from gdm_assist.core.gdm.thresholds import GUIDELINE_THRESHOLDS
from gdm_assist.core.gdm.base import Guideline


class ReadingContext(str, Enum):
    FASTING          = "fasting"
    POST_PRANDIAL_1H = "post_prandial_1h"
    POST_PRANDIAL_2H = "post_prandial_2h"
    RANDOM           = "random"
    UNKNOWN          = "unknown"


class Traffic(str, Enum):
    OK      = "ok"
    CAUTION = "caution"
    HIGH    = "high"


# NICE "aim below" targets for women with GDM
NICE_TARGETS: Mapping[ReadingContext, float] = MappingProxyType({
    ReadingContext.FASTING:          5.3,
    ReadingContext.POST_PRANDIAL_1H: 7.8,
    ReadingContext.POST_PRANDIAL_2H: 6.4,
})

# Width of the caution band above a target
CAUTION_MARGIN = 1.0

# Random / unknown timing: conservative fixed cutoffs
RANDOM_OK_BELOW      = 7.8
RANDOM_CAUTION_BELOW = 9.0


def classify_reading(mmol: float, context: "ReadingContext | str") -> Traffic:
    ctx = ReadingContext(context)
    target = NICE_TARGETS.get(ctx)
    if target is None:
        if mmol < RANDOM_OK_BELOW:
            return Traffic.OK
        return Traffic.CAUTION if mmol < RANDOM_CAUTION_BELOW else Traffic.HIGH

    if mmol < target:
        return Traffic.OK
    if mmol < target + CAUTION_MARGIN:
        return Traffic.CAUTION
    return Traffic.HIGH


def meets_who_ogtt(
    fasting: Optional[float],
    one_hour: Optional[float],
    two_hour: Optional[float],
) -> bool:
    """True when any supplied OGTT value reaches its WHO 2013 cutoff."""
    who = GUIDELINE_THRESHOLDS[Guideline.WHO]
    return (
        (fasting is not None and fasting >= who.fasting)
        or (one_hour is not None and one_hour >= who.one_hour)
        or (two_hour is not None and two_hour >= who.two_hour)
    )
