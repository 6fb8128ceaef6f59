"""Second-by-second simulation of an HPA-controlled queue worker."""

import logging
from dataclasses import asdict, dataclass, field, fields

import numpy as np
import pandas as pd

from src.hpa.config import SimulationConfig
from src.hpa.history import HistoryLedger
from src.hpa.pods import PodTracker
from src.hpa.policy import ReplicaDecisionEngine, ScaleDirection
from src.hpa.workload import QueueModel, evaluate_metric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationPoint:
    """State emitted for one tick."""

    t: int
    pods: int
    ready_pods: int
    queue_jobs: float
    metric_value: float
    latency: float
    processed_jobs: float
    desired_replicas_raw: int
    desired_replicas_effective: int
    scale_direction: ScaleDirection


@dataclass(frozen=True)
class Summary:
    """Aggregates over a finished run."""

    max_metric_value: float
    max_queue_jobs: float
    final_pods: int
    final_queue_jobs: float
    total_scale_ups: int
    total_scale_downs: int

    def __str__(self) -> str:
        return (
            f"Simulation Summary:\n"
            f"  Max Metric Value: {self.max_metric_value:.2f}\n"
            f"  Max Queue Jobs: {self.max_queue_jobs:.0f}\n"
            f"  Final Pods: {self.final_pods}\n"
            f"  Final Queue Jobs: {self.final_queue_jobs:.0f}\n"
            f"  Scaling Events: up {self.total_scale_ups}, down {self.total_scale_downs}"
        )

    def to_dict(self) -> dict:
        return {
            "maxMetricValue": self.max_metric_value,
            "maxQueueJobs": self.max_queue_jobs,
            "finalPods": self.final_pods,
            "finalQueueJobs": self.final_queue_jobs,
            "totalScaleUps": self.total_scale_ups,
            "totalScaleDowns": self.total_scale_downs,
        }


@dataclass
class SimulationResult:
    """Ordered tick points plus their summary."""

    points: list[SimulationPoint]
    summary: Summary
    config: SimulationConfig | None = None

    def to_dataframe(self) -> pd.DataFrame:
        """Convert points to a DataFrame indexed by tick.

        Returns:
            DataFrame with one column per point field
        """
        columns = [f.name for f in fields(SimulationPoint)]
        if not self.points:
            return pd.DataFrame(columns=columns).set_index("t")

        rows = []
        for point in self.points:
            row = asdict(point)
            row["scale_direction"] = point.scale_direction.value
            rows.append(row)
        return pd.DataFrame(rows, columns=columns).set_index("t")


def summarize(points: list[SimulationPoint], starting_pods: int) -> Summary:
    """Fold a point sequence into summary statistics.

    Scale-ups and scale-downs count ticks on which the pod count rose or
    fell, once per tick regardless of magnitude.

    Args:
        points: Points in tick order
        starting_pods: Pod count before the first tick

    Returns:
        Summary of the run
    """
    if not points:
        return Summary(
            max_metric_value=0.0,
            max_queue_jobs=0.0,
            final_pods=starting_pods,
            final_queue_jobs=0.0,
            total_scale_ups=0,
            total_scale_downs=0,
        )

    pods = np.array([p.pods for p in points])
    deltas = np.diff(pods, prepend=starting_pods)
    final = points[-1]

    return Summary(
        max_metric_value=float(np.max([p.metric_value for p in points])),
        max_queue_jobs=float(np.max([p.queue_jobs for p in points])),
        final_pods=int(final.pods),
        final_queue_jobs=float(final.queue_jobs),
        total_scale_ups=int(np.sum(deltas > 0)),
        total_scale_downs=int(np.sum(deltas < 0)),
    )


@dataclass
class SimulationState:
    """Mutable state owned by a single run."""

    history: HistoryLedger
    pods: PodTracker
    queue: QueueModel
    engine: ReplicaDecisionEngine
    points: list[SimulationPoint] = field(default_factory=list)

    @classmethod
    def initial(cls, config: SimulationConfig) -> "SimulationState":
        """Build the t=0 state from a sanitized config."""
        history = HistoryLedger(config.starting_pods)
        return cls(
            history=history,
            pods=PodTracker.start(config.starting_pods, config.pod_startup_delay),
            queue=QueueModel(
                config.initial_queue(),
                config.processing_rate_per_pod,
                config.producing_rate_total,
            ),
            engine=ReplicaDecisionEngine(config, history),
        )


class HPASimulator:
    """Replay HPA decisions against a queue worker one second at a time.

    Every tick runs the readiness pass, observes the queue, evaluates the
    metric, processes the tick's jobs, decides the replica count and applies
    the change. Decisions only read state from earlier ticks.
    """

    def __init__(self, config: SimulationConfig | None = None):
        """Initialize simulator.

        Args:
            config: Simulation configuration, sanitized before use
        """
        self.config = (config or SimulationConfig()).sanitized()

    def run(self) -> SimulationResult:
        """Run the simulation from t=0 through ``simulation_seconds``.

        Returns:
            SimulationResult with one point per tick
        """
        cfg = self.config
        state = SimulationState.initial(cfg)

        for t in range(cfg.simulation_seconds + 1):
            state.points.append(self._step(state, t))

        summary = summarize(state.points, cfg.starting_pods)
        logger.info(
            "Simulated %d ticks: final_pods=%d, scale_ups=%d, scale_downs=%d",
            len(state.points), summary.final_pods,
            summary.total_scale_ups, summary.total_scale_downs,
        )
        return SimulationResult(points=state.points, summary=summary, config=cfg)

    def _step(self, state: SimulationState, t: int) -> SimulationPoint:
        """Advance one tick and return its point."""
        state.pods.advance()

        observed = state.queue.observe(state.pods.ready)
        metric_value = evaluate_metric(self.config.metric_type, observed)
        processed = state.queue.advance(observed.capacity)

        decision = state.engine.decide(t, state.pods.total, metric_value)
        if decision.delta != 0:
            logger.debug("t=%d %s", t, decision)
        state.pods.scale(decision.delta)
        state.history.record_pods(state.pods.total)

        return SimulationPoint(
            t=t,
            pods=state.pods.total,
            ready_pods=state.pods.ready,
            queue_jobs=state.queue.queue_jobs,
            metric_value=metric_value,
            latency=observed.latency,
            processed_jobs=processed,
            desired_replicas_raw=decision.raw,
            desired_replicas_effective=decision.effective,
            scale_direction=decision.direction,
        )


def run_simulation(config: SimulationConfig) -> SimulationResult:
    """Run one simulation.

    Args:
        config: Simulation configuration; out-of-range values are replaced
            by safe defaults rather than rejected

    Returns:
        SimulationResult with ``simulation_seconds + 1`` points and a summary
    """
    return HPASimulator(config).run()
