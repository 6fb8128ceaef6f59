"""Replica decision engine: HPA formula, stabilization and scaling policies."""

import math
from dataclasses import dataclass
from enum import Enum

from src.hpa.config import (
    PolicyType,
    ScaleBehavior,
    ScalePolicy,
    SelectPolicy,
    SimulationConfig,
)
from src.hpa.history import HistoryLedger


class ScaleDirection(Enum):
    """Direction of a stabilized recommendation relative to current pods."""

    UP = "up"
    DOWN = "down"
    NONE = "none"


@dataclass(frozen=True)
class ScalingDecision:
    """Result of one tick's replica decision."""

    current_pods: int
    raw: int
    stabilized: int
    effective: int
    direction: ScaleDirection

    @property
    def delta(self) -> int:
        return self.effective - self.current_pods

    def __str__(self) -> str:
        return (
            f"{self.direction.value.upper()}: {self.current_pods} -> {self.effective} pods "
            f"(raw={self.raw}, stabilized={self.stabilized})"
        )


def policy_limit(policy: ScalePolicy, reference_pods: int) -> int:
    """Get the change a single policy allows over its period.

    Args:
        policy: Scaling policy
        reference_pods: Pod count ``period_seconds`` ago

    Returns:
        Allowed change in whole pods, rounded up
    """
    if policy.type == PolicyType.PODS:
        return math.ceil(policy.value)
    if policy.type == PolicyType.PERCENT:
        return math.ceil(reference_pods * policy.value / 100)
    raise ValueError(f"Unknown policy type: {policy.type}")


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


class ReplicaDecisionEngine:
    """Horizontal Pod Autoscaler decision logic.

    Each tick runs four stages on the total pod count: the raw
    ``ceil(pods * metric / target)`` recommendation with a tolerance dead
    zone, stabilization over recent raw recommendations, rate limiting by
    the scale-up or scale-down policies, and a final min/max clamp.
    """

    def __init__(self, config: SimulationConfig, history: HistoryLedger):
        """Initialize engine.

        Args:
            config: Sanitized simulation configuration
            history: Ledger shared with the simulation loop
        """
        self.config = config
        self.history = history

    def raw_recommendation(self, current_pods: int, metric_value: float) -> int:
        """Desired replicas from the metric ratio, clamped to min/max.

        Args:
            current_pods: Total pods before this tick's decision
            metric_value: Observed metric

        Returns:
            Raw desired replica count
        """
        cfg = self.config
        target = cfg.target_metric_value if cfg.target_metric_value > 0 else 1
        ratio = metric_value / target

        if abs(ratio - 1.0) <= cfg.tolerance_fraction:
            raw = current_pods
        else:
            scaled = current_pods * ratio
            raw = math.ceil(scaled) if math.isfinite(scaled) else cfg.max_pods

        return clamp(raw, cfg.min_pods, cfg.max_pods)

    def stabilize(self, t: int, current_pods: int, raw: int) -> int:
        """Apply the stabilization windows to a raw recommendation.

        Scale-up takes the lowest recommendation in its window, scale-down
        the highest in its own. Both windows include tick t.

        Args:
            t: Current tick, whose raw value is already recorded
            current_pods: Total pods before this tick's decision
            raw: Raw recommendation for this tick

        Returns:
            Stabilized recommendation
        """
        up_window = self.config.scale_up.stabilization_window_seconds
        down_window = self.config.scale_down.stabilization_window_seconds

        stabilized = raw
        if raw > current_pods and up_window > 0:
            stabilized = min(self.history.desired_window(t, up_window))
        elif raw < current_pods and down_window > 0:
            stabilized = max(self.history.desired_window(t, down_window))
        return stabilized

    def apply_policies(self, t: int, current_pods: int, stabilized: int) -> tuple[int, ScaleDirection]:
        """Rate-limit a stabilized recommendation.

        Args:
            t: Current tick
            current_pods: Total pods before this tick's decision
            stabilized: Stabilized recommendation

        Returns:
            Tuple of (limited replicas, direction)
        """
        if stabilized > current_pods:
            direction = ScaleDirection.UP
            behavior = self.config.scale_up
        elif stabilized < current_pods:
            direction = ScaleDirection.DOWN
            behavior = self.config.scale_down
        else:
            return stabilized, ScaleDirection.NONE

        if behavior.select_policy == SelectPolicy.DISABLED:
            return current_pods, direction
        if not behavior.policies:
            return stabilized, direction

        limit = self._combined_limit(t, behavior, direction)
        if direction == ScaleDirection.UP:
            return min(stabilized, limit), direction
        return max(stabilized, limit), direction

    def _combined_limit(self, t: int, behavior: ScaleBehavior, direction: ScaleDirection) -> int:
        """Combine per-policy bounds according to ``select_policy``.

        Scale-up bounds are ceilings: Max picks the highest. Scale-down bounds
        are floors: Max (largest change) picks the lowest, Min the highest.
        """
        candidates = []
        for policy in behavior.policies:
            reference = self.history.pods_at(t - policy.period_seconds)
            amount = policy_limit(policy, reference)
            if direction == ScaleDirection.UP:
                candidates.append(reference + amount)
            else:
                candidates.append(max(0, reference - amount))

        if behavior.select_policy == SelectPolicy.MAX:
            return max(candidates) if direction == ScaleDirection.UP else min(candidates)
        if behavior.select_policy == SelectPolicy.MIN:
            return min(candidates) if direction == ScaleDirection.UP else max(candidates)
        raise ValueError(f"Cannot combine limits for select policy {behavior.select_policy}")

    def decide(self, t: int, current_pods: int, metric_value: float) -> ScalingDecision:
        """Run all decision stages for tick t.

        Records the raw recommendation in the history ledger.

        Args:
            t: Current tick
            current_pods: Total pods before this tick's decision
            metric_value: Observed metric

        Returns:
            ScalingDecision with every intermediate value
        """
        raw = self.raw_recommendation(current_pods, metric_value)
        self.history.record_desired(raw)

        stabilized = self.stabilize(t, current_pods, raw)
        limited, direction = self.apply_policies(t, current_pods, stabilized)
        effective = clamp(limited, self.config.min_pods, self.config.max_pods)

        return ScalingDecision(
            current_pods=current_pods,
            raw=raw,
            stabilized=stabilized,
            effective=effective,
            direction=direction,
        )
