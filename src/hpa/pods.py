"""Pod lifecycle tracking: total, ready and starting replicas."""

from dataclasses import dataclass, field


@dataclass
class PodTracker:
    """Replica counts for one simulation run.

    ``pending`` holds one entry per starting pod with the seconds left until
    it becomes ready, in creation order.
    """

    total: int
    ready: int
    startup_delay: float = 0
    pending: list[float] = field(default_factory=list)

    @classmethod
    def start(cls, starting_pods: int, startup_delay: float = 0) -> "PodTracker":
        """Create a tracker with every starting pod already ready."""
        return cls(total=starting_pods, ready=starting_pods, startup_delay=startup_delay)

    def advance(self) -> int:
        """Run the one-second readiness pass.

        Returns:
            Number of pods that became ready this tick
        """
        remaining = [d - 1 for d in self.pending]
        became_ready = sum(1 for d in remaining if d <= 0)
        self.pending = [d for d in remaining if d > 0]
        self.ready = min(self.ready + became_ready, self.total)
        return became_ready

    def scale(self, delta: int):
        """Add or remove replicas.

        New pods join ``pending`` and become ready on a later ``advance``,
        never in the tick they were created. Removals take the newest pending
        pods first, then ready pods.

        Args:
            delta: Change in total replicas
        """
        if delta > 0:
            self.total += delta
            self.pending.extend([self.startup_delay] * delta)
        elif delta < 0:
            self.total += delta
            remove = -delta
            while remove > 0 and self.pending:
                self.pending.pop()
                remove -= 1
            if remove > 0:
                self.ready = max(0, self.ready - remove)

    @property
    def starting(self) -> int:
        return len(self.pending)
