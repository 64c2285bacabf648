"""
Shared metrics configuration for the document registry client.
"""

import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from prometheus_client import Counter, Histogram, CollectorRegistry, REGISTRY


class SubmissionMetrics:
    """Prometheus collectors for document submissions and the rate gate."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up submission and gate metrics."""
        self._metrics["submissions_total"] = Counter(
            "registry_submissions_total",
            "Total document submissions by outcome",
            ["variant", "outcome"],
            registry=self.registry
        )

        self._metrics["submission_duration_seconds"] = Histogram(
            "registry_submission_duration_seconds",
            "Duration of the HTTP exchange with the registry",
            ["variant"],
            registry=self.registry
        )

        self._metrics["gate_wait_seconds"] = Histogram(
            "registry_gate_wait_seconds",
            "Time callers spent waiting for a rate gate permit",
            buckets=(0.0, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 60.0),
            registry=self.registry
        )

    def record_submission(self, variant: str, outcome: str):
        """Record a finished submission."""
        self._metrics["submissions_total"].labels(variant=variant, outcome=outcome).inc()

    def record_gate_wait(self, seconds: float):
        """Record time spent in the rate gate."""
        self._metrics["gate_wait_seconds"].observe(seconds)

    @contextmanager
    def time_submission(self, variant: str):
        """Time the HTTP exchange of one submission."""
        start_time = time.time()
        try:
            yield
        finally:
            self._metrics["submission_duration_seconds"].labels(variant=variant).observe(
                time.time() - start_time
            )

    def get_metric(self, name: str) -> Any:
        return self._metrics[name]


_metrics: Optional[SubmissionMetrics] = None
_metrics_lock = threading.Lock()


def get_metrics() -> SubmissionMetrics:
    """Get the process-wide metrics instance bound to the default registry."""
    global _metrics
    with _metrics_lock:
        if _metrics is None:
            _metrics = SubmissionMetrics(registry=REGISTRY)
        return _metrics
