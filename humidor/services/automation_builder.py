"""
Automation Builder
==================
Materializes a humidor's thresholds as event triggers on the home-automation hub.

For each metric the accessory exposes, two rules are created: one firing when
the value rises above the maximum and one firing when it drops below the
minimum. Each rule is an event trigger wired to an action set whose single
action writes a sentinel value to the metric's characteristic.

Every hub object carries metadata naming the humidor it belongs to, so
re-running setup first removes exactly that humidor's previous rules and
leaves everything else on the hub alone.

Setup is all-or-nothing: if any step fails, or the call is cancelled, the
objects created by that run are removed again before the error is raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from humidor.domain import (
    AutomationResult,
    AutomationRule,
    MonitoredUnit,
    ThresholdConfig,
    to_celsius,
)
from humidor.domain.automation import RULE_KIND_KEY, RULE_OWNER_KEY
from humidor.enums import AlertKind, Comparison, Metric
from humidor.errors import OperationCancelled, SetupFailed
from humidor.hardware.adapters.sensors.hub_adapter import HubSensorBackend
from humidor.hardware.hub.bridge import call_hub
from humidor.hardware.hub.protocol import (
    Completion,
    HubAccessory,
    HubActionSet,
    HubCharacteristic,
    HubHome,
    HubTrigger,
)
from humidor.services.alert_engine import AlertEngine
from humidor.utils.cancellation import CancellationToken, checkpoint
from infrastructure.logging.audit import NullAuditLogger

logger = logging.getLogger(__name__)


@dataclass
class _RulePlan:
    kind: AlertKind
    metric: Metric
    characteristic: HubCharacteristic
    bound: float
    hub_threshold: float
    comparison: Comparison
    trigger_name: str
    action_set_name: str
    rule_id: str
    metadata: dict[str, str]
    action_set: HubActionSet | None = None
    trigger: HubTrigger | None = None


class AutomationBuilder:
    """Creates, replaces and removes a humidor's threshold rules on the hub."""

    def __init__(
        self,
        hub: HubSensorBackend,
        alert_engine: AlertEngine,
        sentinel_value: float = 1.0,
        immediate_check: bool = True,
        audit_logger=None,
    ):
        self.hub = hub
        self.alert_engine = alert_engine
        self.sentinel_value = sentinel_value
        self.immediate_check = immediate_check
        self.audit = audit_logger or NullAuditLogger()

    def _call(self, start: Callable[[Completion], None], operation: str, cancel_token: CancellationToken | None) -> Any:
        return call_hub(start, operation=operation, timeout=self.hub.call_timeout, cancel_token=cancel_token)

    # ==================== Cleanup ====================

    @staticmethod
    def _owned_by(obj: Any, unit: MonitoredUnit) -> bool:
        metadata = getattr(obj, "metadata", None) or {}
        return metadata.get(RULE_OWNER_KEY) == unit.rule_owner_id

    def _remove_owned(
        self,
        home: HubHome,
        unit: MonitoredUnit,
        cancel_token: CancellationToken | None,
    ) -> tuple[int, int]:
        """Remove this unit's triggers and action sets; per-object failures are skipped."""
        removed_triggers = 0
        for trigger in [t for t in home.triggers if self._owned_by(t, unit)]:
            try:
                self._call(
                    lambda done, t=trigger: home.remove_trigger(t, done),
                    f"remove trigger '{trigger.name}'",
                    cancel_token,
                )
                removed_triggers += 1
            except OperationCancelled:
                raise
            except Exception as e:
                logger.warning("Could not remove trigger '%s' of %s: %s", trigger.name, unit.humidor_id, e)

        removed_action_sets = 0
        for action_set in [a for a in home.action_sets if self._owned_by(a, unit)]:
            try:
                self._call(
                    lambda done, a=action_set: home.remove_action_set(a, done),
                    f"remove action set '{action_set.name}'",
                    cancel_token,
                )
                removed_action_sets += 1
            except OperationCancelled:
                raise
            except Exception as e:
                logger.warning("Could not remove action set '%s' of %s: %s", action_set.name, unit.humidor_id, e)

        if removed_triggers or removed_action_sets:
            logger.info(
                "Removed %d trigger(s) and %d action set(s) previously created for %s",
                removed_triggers,
                removed_action_sets,
                unit.humidor_id,
            )
        return removed_triggers, removed_action_sets

    def _rollback(self, home: HubHome, unit: MonitoredUnit) -> list[str]:
        """Remove everything this unit owns on the hub after a failed run.

        Cleanup already removed earlier rules, so every owned object is from
        this run, including ones whose create call was abandoned in flight.
        Returns names that could not be removed.
        """
        leftovers = []
        for trigger in [t for t in home.triggers if self._owned_by(t, unit)]:
            try:
                self._call(lambda done, t=trigger: home.remove_trigger(t, done), "rollback trigger", None)
            except Exception as e:
                logger.error("Rollback could not remove trigger '%s': %s", trigger.name, e)
                leftovers.append(trigger.name)
        for action_set in [a for a in home.action_sets if self._owned_by(a, unit)]:
            try:
                self._call(lambda done, a=action_set: home.remove_action_set(a, done), "rollback action set", None)
            except Exception as e:
                logger.error("Rollback could not remove action set '%s': %s", action_set.name, e)
                leftovers.append(action_set.name)
        return leftovers

    # ==================== Planning ====================

    def _plan(self, unit: MonitoredUnit, accessory: HubAccessory, thresholds: ThresholdConfig) -> list[_RulePlan]:
        plans = []
        for metric in Metric:
            characteristic = self.hub.find_characteristic(accessory, metric)
            if characteristic is None:
                logger.info("Accessory '%s' has no %s characteristic, skipping", accessory.name, metric)
                continue
            low, high = thresholds.bounds(metric)
            for is_high in (True, False):
                kind = AlertKind.for_boundary(metric, high=is_high)
                bound = high if is_high else low
                # The hub compares temperatures in Celsius
                hub_threshold = to_celsius(bound) if metric is Metric.TEMPERATURE else bound
                title = kind.title
                plans.append(
                    _RulePlan(
                        kind=kind,
                        metric=metric,
                        characteristic=characteristic,
                        bound=bound,
                        hub_threshold=round(hub_threshold, 2),
                        comparison=Comparison.GREATER_THAN if is_high else Comparison.LESS_THAN,
                        trigger_name=f"{unit.display_name} - {title} Alert",
                        action_set_name=f"{unit.display_name} - {title} Action",
                        rule_id=f"{unit.rule_owner_id}:{kind.value}",
                        metadata={RULE_OWNER_KEY: unit.rule_owner_id, RULE_KIND_KEY: kind.value},
                    )
                )
        return plans

    # ==================== Public API ====================

    def configure_automation(
        self,
        unit: MonitoredUnit,
        thresholds: ThresholdConfig,
        cancel_token: CancellationToken | None = None,
    ) -> AutomationResult:
        """
        Replace the unit's hub rules with rules for ``thresholds``.

        Raises:
            SetupFailed: any step failed; objects created by this run were rolled back
            OperationCancelled: ``cancel_token`` fired; created objects were rolled back,
                except during the immediate check, when the finished rules stay on the hub
        """
        step = "resolve home"
        try:
            home = self.hub.primary_home()
            step = "resolve accessory"
            accessory = self.hub.accessory(unit.accessory_id)
        except OperationCancelled:
            raise
        except Exception as e:
            raise SetupFailed(str(e), step) from e

        result = AutomationResult(unit=unit)

        result.removed_triggers, result.removed_action_sets = self._remove_owned(home, unit, cancel_token)

        plans = self._plan(unit, accessory, thresholds)
        if not plans:
            raise SetupFailed(f"accessory '{accessory.name}' exposes neither temperature nor humidity", "plan")

        try:
            step = "create action sets"
            for plan in plans:
                checkpoint(cancel_token, step)
                plan.action_set = self._call(
                    lambda done, p=plan: home.add_action_set(p.action_set_name, p.metadata, done),
                    f"add action set '{plan.action_set_name}'",
                    cancel_token,
                )

            step = "add write actions"
            for plan in plans:
                checkpoint(cancel_token, step)
                self._call(
                    lambda done, p=plan: p.action_set.add_write_action(p.characteristic, self.sentinel_value, done),
                    f"add write action to '{plan.action_set_name}'",
                    cancel_token,
                )

            step = "create triggers"
            for plan in plans:
                checkpoint(cancel_token, step)
                plan.trigger = self._call(
                    lambda done, p=plan: home.add_event_trigger(
                        p.trigger_name,
                        p.characteristic,
                        p.comparison.value,
                        p.hub_threshold,
                        p.metadata,
                        done,
                    ),
                    f"add trigger '{plan.trigger_name}'",
                    cancel_token,
                )

            step = "wire and enable"
            for plan in plans:
                checkpoint(cancel_token, step)
                self._call(
                    lambda done, p=plan: p.trigger.add_action_set(p.action_set, done),
                    f"wire '{plan.trigger_name}'",
                    cancel_token,
                )
                self._call(
                    lambda done, p=plan: p.trigger.enable(True, done),
                    f"enable '{plan.trigger_name}'",
                    cancel_token,
                )
        except OperationCancelled:
            leftovers = self._rollback(home, unit)
            logger.warning("Automation setup for %s cancelled during '%s'", unit.humidor_id, step)
            if leftovers:
                logger.error("Hub objects left behind for %s: %s", unit.humidor_id, ", ".join(leftovers))
            raise
        except Exception as e:
            leftovers = self._rollback(home, unit)
            logger.error("Automation setup for %s failed during '%s': %s", unit.humidor_id, step, e)
            self.audit.log_event(
                "system", "configure_automation", unit.humidor_id, "failure", step=step, leftovers=leftovers
            )
            raise SetupFailed(str(e), step, leftovers) from e

        result.rules = [
            AutomationRule(
                trigger_name=p.trigger_name,
                action_set_name=p.action_set_name,
                threshold_value=p.bound,
                comparison=p.comparison,
                metric=p.metric,
                kind=p.kind,
                rule_id=p.rule_id,
            )
            for p in plans
        ]
        logger.info("Configured %d hub rule(s) for %s", len(result.rules), unit.humidor_id)
        self.audit.log_event(
            "system",
            "configure_automation",
            unit.humidor_id,
            "success",
            rules=[r.trigger_name for r in result.rules],
        )

        if self.immediate_check:
            result.alerts = self._immediate_check(accessory, thresholds, cancel_token)
        return result

    def _immediate_check(
        self,
        accessory: HubAccessory,
        thresholds: ThresholdConfig,
        cancel_token: CancellationToken | None,
    ) -> list:
        """Read current values once so already-crossed bounds alert without waiting for a trigger."""
        try:
            reading = self.hub.read_current(accessory, cancel_token)
        except OperationCancelled:
            raise
        except Exception as e:
            logger.warning("Immediate check for '%s' skipped: %s", accessory.name, e)
            return []
        return self.alert_engine.process(reading, thresholds)

    def remove_automation(self, unit: MonitoredUnit, cancel_token: CancellationToken | None = None) -> tuple[int, int]:
        """Tear down the unit's hub rules. Returns (triggers removed, action sets removed)."""
        home = self.hub.primary_home()
        removed = self._remove_owned(home, unit, cancel_token)
        self.audit.log_event("system", "remove_automation", unit.humidor_id, "success", removed=list(removed))
        return removed
