"""
Self-monitoring reading classification (NICE targets, traffic-light output).
"""
from .targets import (
    NICE_TARGETS,
    ReadingContext,
    Traffic,
    classify_reading,
    meets_who_ogtt,
)
from .rules import ActionKind, RuleAction, RuleOutcome, evaluate_glucose

__all__ = [
    "NICE_TARGETS",
    "ReadingContext",
    "Traffic",
    "classify_reading",
    "meets_who_ogtt",
    "ActionKind",
    "RuleAction",
    "RuleOutcome",
    "evaluate_glucose",
]
