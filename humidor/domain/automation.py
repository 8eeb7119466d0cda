"""
Automation Value Objects
========================
Humidors monitored through the hub and the rules materialized for them.
"""

from dataclasses import dataclass, field
from typing import Any

from humidor.domain.alerts import AlertEvent
from humidor.enums import AlertKind, Comparison, Metric

# Metadata keys stamped on every hub object the automation builder creates
RULE_OWNER_KEY = "humidor.monitor.unit_id"
RULE_KIND_KEY = "humidor.monitor.rule"


@dataclass(frozen=True)
class MonitoredUnit:
    """A humidor whose thresholds are pushed onto the hub."""

    humidor_id: str
    display_name: str
    accessory_id: str

    @property
    def rule_owner_id(self) -> str:
        """Opaque identifier embedded in every hub object created for this unit."""
        return f"humidor:{self.humidor_id}"


@dataclass(frozen=True)
class AutomationRule:
    """One trigger + action-set pair living on the hub, referenced by name and id."""

    trigger_name: str
    action_set_name: str
    threshold_value: float
    comparison: Comparison
    metric: Metric
    kind: AlertKind
    rule_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "trigger_name": self.trigger_name,
            "action_set_name": self.action_set_name,
            "threshold_value": self.threshold_value,
            "comparison": self.comparison.value,
            "metric": self.metric.value,
            "kind": self.kind.value,
            "rule_id": self.rule_id,
        }


@dataclass
class AutomationResult:
    """Outcome of one ``configure_automation`` run."""

    unit: MonitoredUnit
    rules: list[AutomationRule] = field(default_factory=list)
    removed_triggers: int = 0
    removed_action_sets: int = 0
    alerts: list[AlertEvent] = field(default_factory=list)
