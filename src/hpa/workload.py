"""Queue dynamics, processing capacity and the metric the autoscaler sees."""

from dataclasses import dataclass

from src.hpa.config import STUCK_QUEUE_LATENCY, MetricType


@dataclass(frozen=True)
class QueueState:
    """Queue observation at the start of a tick."""

    queue_jobs: float
    capacity: float
    latency: float


class QueueModel:
    """Single queue fed at a constant rate and drained by ready pods.

    Arrivals and processing both happen within the one-second tick.
    """

    def __init__(self, initial_jobs: float, processing_rate_per_pod: float, producing_rate: float):
        """Initialize queue.

        Args:
            initial_jobs: Queue depth at t=0
            processing_rate_per_pod: Jobs per second per ready pod
            producing_rate: Arrivals per second
        """
        self.queue_jobs = initial_jobs
        self.processing_rate_per_pod = processing_rate_per_pod
        self.producing_rate = producing_rate

    def capacity(self, ready_pods: int) -> float:
        return ready_pods * self.processing_rate_per_pod

    def latency(self, ready_pods: int) -> float:
        """Seconds needed to drain the current queue.

        Returns ``STUCK_QUEUE_LATENCY`` when jobs are waiting and no capacity
        exists, and 0 for an empty queue without capacity.
        """
        if ready_pods > 0 and self.processing_rate_per_pod > 0:
            return self.queue_jobs / self.capacity(ready_pods)
        if self.queue_jobs > 0:
            return STUCK_QUEUE_LATENCY
        return 0.0

    def observe(self, ready_pods: int) -> QueueState:
        return QueueState(
            queue_jobs=self.queue_jobs,
            capacity=self.capacity(ready_pods),
            latency=self.latency(ready_pods),
        )

    def advance(self, capacity: float) -> float:
        """Apply one tick of arrivals and processing.

        Args:
            capacity: Jobs the ready pods can process this tick

        Returns:
            Jobs processed this tick
        """
        available = self.queue_jobs + self.producing_rate
        processed = min(available, capacity)
        self.queue_jobs = max(0.0, available - processed)
        return processed


def evaluate_metric(metric_type: MetricType, state: QueueState) -> float:
    """Get the metric value the autoscaler observes.

    Args:
        metric_type: Configured metric
        state: Start-of-tick queue observation

    Returns:
        Latency in seconds or queue length in jobs
    """
    if metric_type == MetricType.QUEUE_LATENCY:
        return state.latency
    if metric_type == MetricType.QUEUE_LENGTH:
        return state.queue_jobs
    raise ValueError(f"Unknown metric type: {metric_type}")
