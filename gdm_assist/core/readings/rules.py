"""
Reading Escalation Rules

Maps a classified reading to a message and the follow-up actions a client
should offer (log it, educate, call, or alert a clinician).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .targets import ReadingContext, Traffic, classify_reading


class ActionKind(str, Enum):
    PRIMARY     = "primary"
    SECONDARY   = "secondary"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class RuleAction:
    label: str
    kind: ActionKind
    route: Optional[str] = None

    def to_dict(self) -> dict:
        return {"label": self.label, "kind": self.kind.value, "route": self.route}


@dataclass(frozen=True)
class RuleOutcome:
    traffic: Traffic
    message: str
    actions: List[RuleAction] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "traffic": self.traffic.value,
            "message": self.message,
            "actions": [a.to_dict() for a in self.actions],
        }


def evaluate_glucose(mmol: float, context: "ReadingContext | str") -> RuleOutcome:
    traffic = classify_reading(mmol, context)

    if traffic == Traffic.OK:
        return RuleOutcome(
            traffic=traffic,
            message="Within NICE target range",
            actions=[RuleAction("Log reading", ActionKind.PRIMARY, "/readings")],
        )

    if traffic == Traffic.CAUTION:
        return RuleOutcome(
            traffic=traffic,
            message="Slightly above target: reinforce diet/exercise and recheck",
            actions=[
                RuleAction("See education", ActionKind.SECONDARY, "/education/gdm-basics"),
                RuleAction("Schedule call", ActionKind.PRIMARY, "/appointments/new"),
            ],
        )

    return RuleOutcome(
        traffic=traffic,
        message="High reading: follow escalation protocol",
        actions=[
            RuleAction(
                "Trigger clinician alert",
                ActionKind.DESTRUCTIVE,
                "/alerts/new?type=glycaemia",
            ),
            RuleAction("Create recommendation", ActionKind.PRIMARY, "/recommendations/new"),
        ],
    )
