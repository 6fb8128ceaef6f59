"""Horizontal Pod Autoscaler simulation for queue-processing workloads."""

from src.hpa.config import (
    SimulationConfig,
    ScaleBehavior,
    ScalePolicy,
    MetricType,
    PolicyType,
    SelectPolicy,
    DEFAULT_CONFIG,
    DEFAULT_SCALE_UP,
    DEFAULT_SCALE_DOWN,
)
from src.hpa.history import HistoryLedger
from src.hpa.pods import PodTracker
from src.hpa.policy import (
    ReplicaDecisionEngine,
    ScaleDirection,
    ScalingDecision,
)
from src.hpa.simulator import (
    HPASimulator,
    SimulationPoint,
    SimulationResult,
    Summary,
    run_simulation,
)
from src.hpa.workload import QueueModel, evaluate_metric

__all__ = [
    "SimulationConfig",
    "ScaleBehavior",
    "ScalePolicy",
    "MetricType",
    "PolicyType",
    "SelectPolicy",
    "DEFAULT_CONFIG",
    "DEFAULT_SCALE_UP",
    "DEFAULT_SCALE_DOWN",
    "HistoryLedger",
    "PodTracker",
    "ReplicaDecisionEngine",
    "ScaleDirection",
    "ScalingDecision",
    "HPASimulator",
    "SimulationPoint",
    "SimulationResult",
    "Summary",
    "run_simulation",
    "QueueModel",
    "evaluate_metric",
]
