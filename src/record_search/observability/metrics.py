"""Prometheus metrics for search and indexing, mirrored to OpenTelemetry instruments."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from opentelemetry import metrics as otel_metrics
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_meter = otel_metrics.get_meter(__name__)


class _BoundMetric:
    def __init__(self, bridge: MetricBridge, labels: dict[str, str]) -> None:
        self._bridge = bridge
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._bridge.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._bridge.observe(self._labels, value)

    def set(self, value: float) -> None:
        self._bridge.set(self._labels, value)


class MetricBridge:
    """A Prometheus metric that also reports to the active OTel meter provider."""

    def __init__(self, prom_metric: Counter | Histogram | Gauge, *, kind: str) -> None:
        self.prom_metric = prom_metric
        self._kind = kind
        self._otel_instrument = None
        self._last_values: dict[tuple[tuple[str, str], ...], float] = {}

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _instrument(self):
        if self._otel_instrument is not None:
            return self._otel_instrument
        name = self.prom_metric._name
        description = self.prom_metric._documentation
        if self._kind == "counter":
            self._otel_instrument = _meter.create_counter(name, description=description)
        elif self._kind == "histogram":
            self._otel_instrument = _meter.create_histogram(name, description=description)
        elif self._kind == "gauge":
            self._otel_instrument = _meter.create_up_down_counter(name, description=description)
        else:
            raise ValueError(f"Unknown metric kind: {self._kind}")
        return self._otel_instrument

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self.prom_metric.labels(**labels).inc(amount)
        self._instrument().add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self.prom_metric.labels(**labels).observe(value)
        self._instrument().record(value, labels)

    def set(self, labels: dict[str, str], value: float) -> None:
        self.prom_metric.labels(**labels).set(value)
        key = tuple(sorted(labels.items()))
        delta = value - self._last_values.get(key, 0.0)
        if delta:
            self._instrument().add(delta, labels)
        self._last_values[key] = value


SEARCH_COUNT = MetricBridge(
    Counter("record_search_searches_total", "Total search calls", ["index", "outcome"]),
    kind="counter",
)

SEARCH_LATENCY = MetricBridge(
    Histogram(
        "record_search_search_latency_seconds",
        "Search query latency",
        ["index"],
        buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
    ),
    kind="histogram",
)

DOCUMENTS_INDEXED = MetricBridge(
    Counter("record_search_documents_indexed_total", "Documents indexed or replaced", ["index"]),
    kind="counter",
)

INDEXING_FAILURES = MetricBridge(
    Counter("record_search_indexing_failures_total", "Documents rejected during bulk indexing", ["index"]),
    kind="counter",
)

INDEX_DOC_COUNT = MetricBridge(
    Gauge("record_search_index_documents", "Documents in index", ["index"]),
    kind="gauge",
)

INDEX_TERM_COUNT = MetricBridge(
    Gauge("record_search_index_terms", "Distinct terms in index", ["index"]),
    kind="gauge",
)

REQUEST_COUNT = MetricBridge(
    Counter("record_search_http_requests_total", "HTTP requests served", ["route", "status"]),
    kind="counter",
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
