"""Per-request log context: trace ids plus the index an operation works on.

The context lives in a ``ContextVar`` so Starlette's threadpool offloading and
asyncio tasks each see the values of the request that started them.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4


trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def generate_trace_id() -> str:
    return uuid4().hex


def generate_span_id() -> str:
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Current context, seeded with fresh ids on first use."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def update_span_id(span_id: str) -> None:
    """Swap the span id, keeping the trace id and the bound index."""
    ctx = trace_context.get() or {}
    trace_context.set({**ctx, "span_id": span_id})


def current_index() -> str | None:
    ctx = trace_context.get()
    return None if ctx is None else ctx.get("index")


@contextmanager
def bound_index(name: str) -> Iterator[None]:
    """Attach ``name`` as the index of every log record emitted inside the block.

    The previous context, span id included, is restored on exit.
    """
    token = trace_context.set({**get_trace_context(), "index": name})
    try:
        yield
    finally:
        trace_context.reset(token)
