"""Prometheus metrics for dataset computation."""
from prometheus_client import REGISTRY, Counter, Histogram


def _get_or_create_metric(metric_class, name: str, doc: str, labelnames=None, **kwargs):
    """Return the registered metric called ``name``, creating it on first use."""
    # Counters register both "x" and "x_total"
    existing = REGISTRY._names_to_collectors.get(name)
    if existing is not None:
        return existing
    if labelnames is not None:
        kwargs["labelnames"] = labelnames
    return metric_class(name, doc, registry=REGISTRY, **kwargs)


# Request metrics
responses_computed_total = _get_or_create_metric(
    Counter,
    "acv_mix_responses_computed_total",
    "Total number of full responses computed",
    ["status"],
)

response_compute_duration_seconds = _get_or_create_metric(
    Histogram,
    "acv_mix_response_compute_duration_seconds",
    "Time taken to read all sources and assemble a response",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# Dataset metrics
records_aggregated_total = _get_or_create_metric(
    Counter,
    "acv_mix_records_aggregated_total",
    "Total number of records folded into aggregated tables",
    ["dataset"],
)

dataset_failures_total = _get_or_create_metric(
    Counter,
    "acv_mix_dataset_failures_total",
    "Total number of dataset computations that failed",
    ["dataset", "error_type"],
)


class MetricsCollector:
    """Helper class for collecting and updating metrics."""

    def record_response(self, duration: float, succeeded: bool):
        """Record a computed (or failed) response and its duration."""
        responses_computed_total.labels(
            status="success" if succeeded else "error"
        ).inc()
        response_compute_duration_seconds.observe(duration)

    def record_dataset_aggregated(self, dataset: str, record_count: int):
        """Record the number of records folded into a dataset."""
        records_aggregated_total.labels(dataset=dataset).inc(record_count)

    def record_dataset_failed(self, dataset: str, error_type: str):
        """Record a failed dataset computation."""
        dataset_failures_total.labels(dataset=dataset, error_type=error_type).inc()


# Global metrics collector instance
metrics_collector = MetricsCollector()
