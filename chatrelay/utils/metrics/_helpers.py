"""
Helper functions for Prometheus metric registration.

Metrics are module-level objects. These helpers return the already
registered collector when a module is imported twice (uvicorn --reload,
test collection) instead of failing with a duplicate registration error.
"""

from typing import Any, TypeVar

from prometheus_client import REGISTRY, Counter, Gauge

MetricT = TypeVar("MetricT", Counter, Gauge)


def _get_or_create(
    metric_cls: type[MetricT],
    name: str,
    doc: str,
    labels: list[str] | None = None,
    **kwargs: Any,
) -> MetricT:
    """
    Get existing metric or create new one.

    Args:
        metric_cls: Prometheus metric class (Counter, Gauge).
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.

    Returns:
        Metric instance.
    """
    try:
        return metric_cls(name, doc, labels or [], **kwargs)
    except ValueError:
        # Metric already exists, retrieve it from registry
        return REGISTRY._names_to_collectors[name]  # type: ignore[return-value]


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    """Get existing counter or create new one."""
    return _get_or_create(Counter, name, doc, labels)


def _get_or_create_gauge(
    name: str, doc: str, labels: list[str] | None = None
) -> Gauge:
    """Get existing gauge or create new one."""
    return _get_or_create(Gauge, name, doc, labels)
