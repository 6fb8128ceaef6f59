"""Pytest configuration and shared fixtures."""

import pytest

from src.hpa.config import (
    MetricType,
    PolicyType,
    ScaleBehavior,
    ScalePolicy,
    SelectPolicy,
    SimulationConfig,
)
from src.hpa.history import HistoryLedger


@pytest.fixture
def default_config():
    """Scenario used by the editor: 25 jobs/s against 2 pods at 5 jobs/s."""
    return SimulationConfig()


@pytest.fixture
def undamped_config():
    """Config with no tolerance, no stabilization and no rate limits."""
    return SimulationConfig(
        min_pods=1,
        max_pods=50,
        starting_pods=2,
        processing_rate_per_pod=5,
        producing_rate_total=25,
        metric_type=MetricType.QUEUE_LATENCY,
        target_metric_value=2,
        tolerance_fraction=0,
        simulation_seconds=300,
        scale_up=ScaleBehavior(0, SelectPolicy.MAX, ()),
        scale_down=ScaleBehavior(0, SelectPolicy.MAX, ()),
    )


@pytest.fixture
def draining_config():
    """Backlog with no new arrivals."""
    return SimulationConfig(
        min_pods=1,
        max_pods=10,
        starting_pods=4,
        initial_queue_jobs=200,
        processing_rate_per_pod=5,
        producing_rate_total=0,
        metric_type=MetricType.QUEUE_LENGTH,
        target_metric_value=20,
        tolerance_fraction=0.1,
        simulation_seconds=900,
        scale_up=ScaleBehavior(0, SelectPolicy.MAX, (ScalePolicy(PolicyType.PODS, 4, 15),)),
        scale_down=ScaleBehavior(60, SelectPolicy.MAX, (ScalePolicy(PolicyType.PERCENT, 100, 15),)),
    )


@pytest.fixture
def editor_payload():
    """Configuration dictionary as produced by the form editor."""
    return {
        "metricType": "QueueLatency",
        "minPods": 1,
        "maxPods": 20,
        "startingPods": 2,
        "initialQueueJobs": 0,
        "initialMetricValue": 0,
        "processingRatePerPod": 5,
        "producingRateTotal": 25,
        "simulationSeconds": 600,
        "targetMetricValue": 2,
        "toleranceFraction": 0.1,
        "podStartupDelay": 0,
        "scaleUp": {
            "stabilizationWindowSeconds": 0,
            "selectPolicy": "Max",
            "policies": [
                {"id": "default-up-pods", "type": "Pods", "value": 4, "periodSeconds": 15},
                {"id": "default-up-percent", "type": "Percent", "value": 100, "periodSeconds": 15},
            ],
        },
        "scaleDown": {
            "stabilizationWindowSeconds": 300,
            "selectPolicy": "Max",
            "policies": [
                {"id": "default-down-percent", "type": "Percent", "value": 100, "periodSeconds": 15},
            ],
        },
    }


@pytest.fixture
def ledger():
    """Ledger pre-filled with 3 pods and a short synthetic past."""
    return HistoryLedger(starting_pods=3, prefill=10)
