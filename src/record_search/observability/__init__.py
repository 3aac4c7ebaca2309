"""Tracing, metrics and structured logging."""

from record_search.observability.context import bound_index, get_trace_context, set_trace_context, trace_context
from record_search.observability.logging import JsonFormatter, configure_logging
from record_search.observability.metrics import (
    DOCUMENTS_INDEXED,
    INDEX_DOC_COUNT,
    INDEX_TERM_COUNT,
    INDEXING_FAILURES,
    REQUEST_COUNT,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from record_search.observability.tracing import TraceContextMiddleware, create_span, get_tracer, init_tracing


__all__ = [
    "DOCUMENTS_INDEXED",
    "INDEXING_FAILURES",
    "INDEX_DOC_COUNT",
    "INDEX_TERM_COUNT",
    "REQUEST_COUNT",
    "SEARCH_COUNT",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "TraceContextMiddleware",
    "bound_index",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
