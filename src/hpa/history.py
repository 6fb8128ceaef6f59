"""Per-tick history of replica recommendations and pod counts."""

from src.hpa.config import HISTORY_PREFILL_SECONDS


class HistoryLedger:
    """Append-only series of desired replicas and pod counts indexed by tick.

    Both series start with ``prefill`` synthetic entries equal to the starting
    pod count, modelling a steady state held before t=0. Lookups outside the
    stored range clamp to the earliest or latest entry, so a policy period or
    stabilization window longer than the elapsed time still resolves.
    """

    def __init__(self, starting_pods: int, prefill: int = HISTORY_PREFILL_SECONDS):
        """Initialize ledger.

        Args:
            starting_pods: Value held for every synthetic past tick
            prefill: Number of synthetic ticks before t=0
        """
        self.prefill = prefill
        self.desired: list[int] = [starting_pods] * prefill
        self.pods: list[int] = [starting_pods] * prefill

    def record_desired(self, replicas: int):
        self.desired.append(replicas)

    def record_pods(self, pods: int):
        self.pods.append(pods)

    def desired_at(self, t: int) -> int:
        return self.value_at(self.desired, t)

    def pods_at(self, t: int) -> int:
        return self.value_at(self.pods, t)

    def value_at(self, series: list[int], t: int) -> int:
        """Get the value a series held at tick t.

        Args:
            series: ``self.desired`` or ``self.pods``
            t: Simulation tick, may be negative

        Returns:
            Stored value, clamped to the first or last entry
        """
        if not series:
            raise IndexError("history series is empty")
        idx = t + self.prefill
        idx = max(0, min(idx, len(series) - 1))
        return series[idx]

    def desired_window(self, t: int, seconds: int) -> list[int]:
        """Desired replicas for ticks ``t - seconds`` through ``t`` inclusive.

        Returned oldest first as a slice of the series. Ticks outside the
        stored range collapse onto the boundary entry instead of repeating it.
        """
        if not self.desired:
            raise IndexError("history series is empty")
        last = len(self.desired) - 1
        lo = max(0, min(t - seconds + self.prefill, last))
        hi = max(0, min(t + self.prefill, last))
        return self.desired[lo:hi + 1]
