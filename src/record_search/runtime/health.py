"""Health endpoint factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import JSONResponse


if TYPE_CHECKING:
    from starlette.requests import Request

    from record_search.search_engine import SearchEngine


def build_health_endpoint(engine: SearchEngine):
    """Return a coroutine function that reports per-index sizes."""

    async def health_check(_: Request) -> JSONResponse:
        stats = engine.get_analytics().index_stats
        return JSONResponse(
            {
                "status": "healthy",
                "index_count": len(stats),
                "indices": {
                    entry.name: {
                        "documents": entry.document_count,
                        "terms": entry.term_count,
                        "last_updated": entry.last_updated.isoformat(),
                    }
                    for entry in stats
                },
            }
        )

    return health_check
