"""Request outcome counters with Prometheus export."""

from __future__ import annotations

import structlog
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest

logger = structlog.get_logger(__name__)


class AppMetricsCollector:
    """Counters for training submissions, webhook deliveries and generations."""

    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._trainings_total = Counter(
            "pictoria_trainings_submitted_total",
            "Training submissions by result.",
            labelnames=("result",),
            registry=self._registry,
        )
        self._webhooks_total = Counter(
            "pictoria_webhooks_total",
            "Training webhook deliveries by outcome.",
            labelnames=("outcome",),
            registry=self._registry,
        )
        self._images_total = Counter(
            "pictoria_images_generated_total",
            "Stored generated images by model kind.",
            labelnames=("model_kind",),
            registry=self._registry,
        )
        self._upstream_errors = Counter(
            "pictoria_upstream_errors_total",
            "Failed calls to external dependencies.",
            labelnames=("step", "retryable"),
            registry=self._registry,
        )

    def record_training(self, result: str) -> None:
        self._trainings_total.labels(result=result).inc()

    def record_webhook(self, outcome: str) -> None:
        self._webhooks_total.labels(outcome=outcome).inc()

    def record_images(self, model_kind: str, count: int) -> None:
        if count > 0:
            self._images_total.labels(model_kind=model_kind).inc(count)

    def record_upstream_error(self, step: str, retryable: bool) -> None:
        self._upstream_errors.labels(step=step, retryable=str(retryable).lower()).inc()

    def value(self, name: str, labels: dict[str, str]) -> float:
        """Current sample value, 0.0 when the series was never recorded."""
        return self._registry.get_sample_value(name, labels) or 0.0

    def export(self) -> tuple[bytes, str]:
        """Return the exposition payload and its content type."""
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


_global_metrics_collector: AppMetricsCollector | None = None


def get_metrics_collector() -> AppMetricsCollector:
    """Return shared metrics collector singleton."""
    global _global_metrics_collector
    if _global_metrics_collector is None:
        _global_metrics_collector = AppMetricsCollector()
        logger.info("metrics_collector_initialized")
    return _global_metrics_collector
