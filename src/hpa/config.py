"""Configuration for the HPA queue simulation."""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from numbers import Real

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Synthetic steady-state ticks held before t=0 in the history ledger
HISTORY_PREFILL_SECONDS = 3600

# Latency reported when jobs are queued but nothing can process them
STUCK_QUEUE_LATENCY = 9999.0


class MetricType(str, Enum):
    """Metric the autoscaler observes."""

    QUEUE_LATENCY = "QueueLatency"
    QUEUE_LENGTH = "QueueLength"


class PolicyType(str, Enum):
    """Unit of a scaling policy's value."""

    PODS = "Pods"
    PERCENT = "Percent"


class SelectPolicy(str, Enum):
    """How candidate limits from several policies are combined."""

    MAX = "Max"
    MIN = "Min"
    DISABLED = "Disabled"


@dataclass(frozen=True)
class ScalePolicy:
    """Rate limit on replica changes over a period.

    Attributes:
        type: Pods (absolute count) or Percent (of the reference pod count, rounded up)
        value: Allowed change per period
        period_seconds: Lookback used to fetch the reference pod count
    """

    type: PolicyType
    value: float
    period_seconds: int = 15

    def __post_init__(self):
        object.__setattr__(self, "type", PolicyType(self.type))

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "value": self.value,
            "periodSeconds": self.period_seconds,
        }

    @classmethod
    def from_dict(cls, policy_dict: dict) -> "ScalePolicy":
        return _validate(ScalePolicyPayload, policy_dict).to_policy()


@dataclass(frozen=True)
class ScaleBehavior:
    """Scale-up or scale-down behavior block.

    Attributes:
        stabilization_window_seconds: Lookback over raw recommendations (0 disables)
        select_policy: Max, Min or Disabled
        policies: Rate limits; empty means unbounded within min/max
    """

    stabilization_window_seconds: int = 0
    select_policy: SelectPolicy = SelectPolicy.MAX
    policies: tuple[ScalePolicy, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "select_policy", SelectPolicy(self.select_policy))
        object.__setattr__(self, "policies", tuple(self.policies))

    def to_dict(self) -> dict:
        return {
            "stabilizationWindowSeconds": self.stabilization_window_seconds,
            "selectPolicy": self.select_policy.value,
            "policies": [p.to_dict() for p in self.policies],
        }

    @classmethod
    def from_dict(cls, behavior_dict: dict) -> "ScaleBehavior":
        return _validate(ScaleBehaviorPayload, behavior_dict).to_behavior()


DEFAULT_SCALE_UP = ScaleBehavior(
    stabilization_window_seconds=0,
    select_policy=SelectPolicy.MAX,
    policies=(
        ScalePolicy(PolicyType.PODS, 4, 15),
        ScalePolicy(PolicyType.PERCENT, 100, 15),
    ),
)

DEFAULT_SCALE_DOWN = ScaleBehavior(
    stabilization_window_seconds=300,
    select_policy=SelectPolicy.MAX,
    policies=(ScalePolicy(PolicyType.PERCENT, 100, 15),),
)


@dataclass(frozen=True)
class SimulationConfig:
    """Inputs for one simulation run.

    Attributes:
        min_pods: Lower replica bound
        max_pods: Upper replica bound
        starting_pods: Replicas at t=0, all ready

        initial_queue_jobs: Queue depth at t=0
        initial_metric_value: Metric at t=0, used to derive the queue when it is empty

        processing_rate_per_pod: Jobs per second per ready pod
        producing_rate_total: Constant arrival rate in jobs per second

        metric_type: QueueLatency or QueueLength
        target_metric_value: Metric value the autoscaler aims for
        tolerance_fraction: Dead zone half-width around a ratio of 1.0

        simulation_seconds: Last simulated tick
        pod_startup_delay: Seconds a new pod stays pending

        scale_up: Behavior applied when scaling up
        scale_down: Behavior applied when scaling down
    """

    # Workload bounds
    min_pods: int = 1
    max_pods: int = 20
    starting_pods: int = 2

    # Initial state
    initial_queue_jobs: float = 0
    initial_metric_value: float = 0

    # Rates
    processing_rate_per_pod: float = 5.0
    producing_rate_total: float = 25.0

    # Control target
    metric_type: MetricType = MetricType.QUEUE_LATENCY
    target_metric_value: float = 2.0
    tolerance_fraction: float = 0.1

    # Timing
    simulation_seconds: int = 600
    pod_startup_delay: int = 0

    # Behavior
    scale_up: ScaleBehavior = DEFAULT_SCALE_UP
    scale_down: ScaleBehavior = DEFAULT_SCALE_DOWN

    def __post_init__(self):
        object.__setattr__(self, "metric_type", MetricType(self.metric_type))

    def sanitized(self) -> "SimulationConfig":
        """Return a copy with out-of-range values replaced by safe defaults.

        Substitutions:
            simulation_seconds <= 0          -> 600
            min_pods < 0                     -> 1
            max_pods < min_pods              -> max(min_pods, 20)
            starting_pods < 0                -> 1
            initial_queue_jobs < 0           -> 0
            initial_metric_value < 0         -> 0
            processing_rate_per_pod < 0      -> 1
            producing_rate_total < 0         -> 0
            target_metric_value <= 0         -> 1
            tolerance_fraction < 0           -> 0.1
            pod_startup_delay < 0            -> 0
            stabilization_window_seconds < 0 -> 0
            policy value < 0                 -> 0
            policy period_seconds < 1        -> 1

        NaN, infinite and non-numeric values fall back to the default as well.
        """
        min_pods = int(_at_least("min_pods", self.min_pods, 0, 1))
        max_pods = self.max_pods
        if not (_is_number(max_pods) and max_pods >= min_pods):
            max_pods = max(min_pods, 20)
            logger.debug("Sanitized max_pods=%r -> %d", self.max_pods, max_pods)

        return replace(
            self,
            min_pods=min_pods,
            max_pods=int(max_pods),
            starting_pods=int(_at_least("starting_pods", self.starting_pods, 0, 1)),
            initial_queue_jobs=_at_least("initial_queue_jobs", self.initial_queue_jobs, 0, 0),
            initial_metric_value=_at_least("initial_metric_value", self.initial_metric_value, 0, 0),
            processing_rate_per_pod=_at_least(
                "processing_rate_per_pod", self.processing_rate_per_pod, 0, 1
            ),
            producing_rate_total=_at_least("producing_rate_total", self.producing_rate_total, 0, 0),
            target_metric_value=_above("target_metric_value", self.target_metric_value, 0, 1),
            tolerance_fraction=_at_least("tolerance_fraction", self.tolerance_fraction, 0, 0.1),
            simulation_seconds=int(_above("simulation_seconds", self.simulation_seconds, 0, 600)),
            pod_startup_delay=_at_least("pod_startup_delay", self.pod_startup_delay, 0, 0),
            scale_up=_sanitize_behavior("scale_up", self.scale_up),
            scale_down=_sanitize_behavior("scale_down", self.scale_down),
        )

    def initial_queue(self) -> float:
        """Queue depth at t=0, derived from the initial metric when the queue is empty."""
        if self.initial_queue_jobs == 0 and self.initial_metric_value > 0:
            if self.metric_type == MetricType.QUEUE_LATENCY:
                if self.starting_pods > 0:
                    return float(
                        math.ceil(self.initial_metric_value * self.starting_pods * self.processing_rate_per_pod)
                    )
            elif self.metric_type == MetricType.QUEUE_LENGTH:
                return float(math.ceil(self.initial_metric_value))
        return float(self.initial_queue_jobs)

    def to_dict(self) -> dict:
        """Convert config to the editor's camelCase dictionary.

        Returns:
            Configuration as dictionary
        """
        return {
            "minPods": self.min_pods,
            "maxPods": self.max_pods,
            "startingPods": self.starting_pods,
            "initialQueueJobs": self.initial_queue_jobs,
            "initialMetricValue": self.initial_metric_value,
            "processingRatePerPod": self.processing_rate_per_pod,
            "producingRateTotal": self.producing_rate_total,
            "metricType": self.metric_type.value,
            "targetMetricValue": self.target_metric_value,
            "toleranceFraction": self.tolerance_fraction,
            "simulationSeconds": self.simulation_seconds,
            "podStartupDelay": self.pod_startup_delay,
            "scaleUp": self.scale_up.to_dict(),
            "scaleDown": self.scale_down.to_dict(),
        }

    @classmethod
    def from_dict(cls, config_dict: dict) -> "SimulationConfig":
        """Create config from the editor's camelCase dictionary.

        Numeric strings are coerced. Range checks are left to ``sanitized``.

        Args:
            config_dict: Configuration dictionary

        Returns:
            SimulationConfig instance

        Raises:
            ValueError: If a required key is missing, a value is not numeric,
                or an enum value is unknown
        """
        return _validate(SimulationConfigPayload, config_dict).to_config()


def _is_number(value) -> bool:
    return isinstance(value, Real) and math.isfinite(value)


def _at_least(name: str, value, bound, default):
    if _is_number(value) and value >= bound:
        return value
    logger.debug("Sanitized %s=%r -> %r", name, value, default)
    return default


def _above(name: str, value, bound, default):
    if _is_number(value) and value > bound:
        return value
    logger.debug("Sanitized %s=%r -> %r", name, value, default)
    return default


def _sanitize_behavior(name: str, behavior: ScaleBehavior) -> ScaleBehavior:
    window = _at_least(
        f"{name}.stabilization_window_seconds", behavior.stabilization_window_seconds, 0, 0
    )
    policies = tuple(
        replace(
            policy,
            value=_at_least(f"{name}.policies[{i}].value", policy.value, 0, 0),
            period_seconds=int(
                _at_least(f"{name}.policies[{i}].period_seconds", policy.period_seconds, 1, 1)
            ),
        )
        for i, policy in enumerate(behavior.policies)
    )
    return replace(behavior, stabilization_window_seconds=int(window), policies=policies)


# =============================================================================
# Editor payload models
# =============================================================================


class ScalePolicyPayload(BaseModel):
    """Scaling policy as sent by the editor."""

    model_config = ConfigDict(populate_by_name=True)

    type: PolicyType
    value: float
    period_seconds: int = Field(15, alias="periodSeconds", description="Lookback in seconds")

    def to_policy(self) -> ScalePolicy:
        return ScalePolicy(self.type, self.value, self.period_seconds)


class ScaleBehaviorPayload(BaseModel):
    """Scale-up or scale-down block as sent by the editor."""

    model_config = ConfigDict(populate_by_name=True)

    stabilization_window_seconds: int = Field(0, alias="stabilizationWindowSeconds")
    select_policy: SelectPolicy = Field(SelectPolicy.MAX, alias="selectPolicy")
    policies: list[ScalePolicyPayload] = Field(default_factory=list)

    @field_validator("policies", mode="before")
    @classmethod
    def missing_policies_are_empty(cls, v):
        return [] if v is None else v

    def to_behavior(self) -> ScaleBehavior:
        return ScaleBehavior(
            stabilization_window_seconds=self.stabilization_window_seconds,
            select_policy=self.select_policy,
            policies=tuple(p.to_policy() for p in self.policies),
        )


class SimulationConfigPayload(BaseModel):
    """Full simulation config as sent by the editor."""

    model_config = ConfigDict(populate_by_name=True)

    min_pods: int = Field(..., alias="minPods")
    max_pods: int = Field(..., alias="maxPods")
    starting_pods: int = Field(..., alias="startingPods")
    initial_queue_jobs: float = Field(0, alias="initialQueueJobs")
    initial_metric_value: float = Field(0, alias="initialMetricValue")
    processing_rate_per_pod: float = Field(..., alias="processingRatePerPod")
    producing_rate_total: float = Field(..., alias="producingRateTotal")
    metric_type: MetricType = Field(..., alias="metricType")
    target_metric_value: float = Field(..., alias="targetMetricValue")
    tolerance_fraction: float = Field(..., alias="toleranceFraction")
    simulation_seconds: int = Field(..., alias="simulationSeconds", description="Last simulated tick")
    pod_startup_delay: int = Field(0, alias="podStartupDelay")
    scale_up: ScaleBehaviorPayload = Field(..., alias="scaleUp")
    scale_down: ScaleBehaviorPayload = Field(..., alias="scaleDown")

    def to_config(self) -> SimulationConfig:
        return SimulationConfig(
            min_pods=self.min_pods,
            max_pods=self.max_pods,
            starting_pods=self.starting_pods,
            initial_queue_jobs=self.initial_queue_jobs,
            initial_metric_value=self.initial_metric_value,
            processing_rate_per_pod=self.processing_rate_per_pod,
            producing_rate_total=self.producing_rate_total,
            metric_type=self.metric_type,
            target_metric_value=self.target_metric_value,
            tolerance_fraction=self.tolerance_fraction,
            simulation_seconds=self.simulation_seconds,
            pod_startup_delay=self.pod_startup_delay,
            scale_up=self.scale_up.to_behavior(),
            scale_down=self.scale_down.to_behavior(),
        )


def _validate(model: type[BaseModel], payload):
    """Validate an editor payload, reporting every problem as one ValueError."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or model.__name__}: {err['msg']}"
            for err in e.errors()
        )
        raise ValueError(problems) from e


# Scenario used by the editor when it opens
DEFAULT_CONFIG = SimulationConfig()
