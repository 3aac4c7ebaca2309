"""HTTP surface for the search engine.

Routes:
    GET    /health                                 index sizes
    GET    /metrics                                Prometheus exposition
    GET    /analytics                              search analytics snapshot
    GET    /indices                                index names
    PUT    /indices/{index}                        create an index
    DELETE /indices/{index}                        drop an index
    PUT    /indices/{index}/documents/{doc_id}     index or replace a document
    DELETE /indices/{index}/documents/{doc_id}     remove a document
    POST   /indices/{index}/documents/_bulk        bulk load
    POST   /indices/{index}/_optimize              compact an index
    POST   /search, POST /indices/{index}/search   JSON query body
    GET    /search                                 query-string search

Usage:
    python -m record_search.app
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from record_search.config import Settings
from record_search.observability.logging import configure_logging
from record_search.observability.metrics import REQUEST_COUNT, get_metrics, get_metrics_content_type
from record_search.observability.tracing import TraceContextMiddleware, init_tracing
from record_search.runtime.health import build_health_endpoint
from record_search.search.errors import IndexNotFoundError, QuerySyntaxError
from record_search.search_engine import SearchEngine


logger = logging.getLogger(__name__)

# Query-string keys with a fixed meaning on GET /search; anything else is a filter.
_RESERVED_PARAMS = frozenset({"q", "type", "page", "limit", "sort", "highlight", "fuzzy", "indexName"})
_LIST_FILTER_PARAMS = frozenset({"tags", "createdBy", "status"})
_HTTP_ERROR_NAMES = {400: "Bad request", 404: "Not found", 405: "Method not allowed"}


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse({"error": error, "message": message}, status_code=status_code)


def _dump(model: Any) -> Any:
    return model.model_dump(mode="json", by_alias=True)


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be valid JSON") from None


def parse_sort_param(raw: str) -> list[dict[str, str]]:
    """Parse ``field:dir,field2:dir2``; a missing direction means ascending."""
    sort: list[dict[str, str]] = []
    for part in raw.split(","):
        field_name, _, direction = part.strip().partition(":")
        if field_name:
            sort.append({"field": field_name, "order": direction or "asc"})
    return sort


def build_query_from_params(request: Request) -> dict[str, Any]:
    """Translate ``GET /search`` parameters into a query payload."""
    params = request.query_params
    query = params.get("q")
    if not query:
        raise HTTPException(status_code=400, detail="Query parameter (q) is required")

    payload: dict[str, Any] = {
        "query": query,
        "pagination": {"page": params.get("page", "1"), "limit": params.get("limit", "20")},
        "highlight": params.get("highlight") != "false",
        "fuzzy": params.get("fuzzy") == "true",
    }
    if doc_type := params.get("type"):
        payload["type"] = doc_type
    if sort := params.get("sort"):
        payload["sort"] = parse_sort_param(sort)

    filters: dict[str, Any] = {}
    metadata: dict[str, str] = {}
    for key in params:
        if key in _RESERVED_PARAMS:
            continue
        if key in _LIST_FILTER_PARAMS:
            filters[key] = params.getlist(key)
        elif key.startswith("metadata."):
            metadata[key.removeprefix("metadata.")] = params[key]
    if metadata:
        filters["metadata"] = metadata
    if filters:
        payload["filters"] = filters
    return payload


def _search_envelope(response: Any, payload: dict[str, Any], started: float) -> JSONResponse:
    return JSONResponse(
        {
            "success": True,
            "data": _dump(response),
            "meta": {"query": payload, "executionTime": (time.perf_counter() - started) * 1000},
        }
    )


def build_routes(engine: SearchEngine) -> list[Route]:
    default_index = engine.settings.default_index_name

    async def metrics_endpoint(_: Request) -> Response:
        return Response(content=get_metrics(), media_type=get_metrics_content_type())

    async def analytics_endpoint(_: Request) -> JSONResponse:
        snapshot = await run_in_threadpool(engine.get_analytics)
        return JSONResponse(_dump(snapshot))

    async def list_indices_endpoint(_: Request) -> JSONResponse:
        return JSONResponse({"indices": engine.list_indices()})

    async def create_index_endpoint(request: Request) -> JSONResponse:
        name = request.path_params["index"]
        existed = name in engine.list_indices()
        engine.create_index(name)
        return JSONResponse({"index": name, "created": not existed}, status_code=200 if existed else 201)

    async def delete_index_endpoint(request: Request) -> JSONResponse:
        name = request.path_params["index"]
        if not engine.delete_index(name):
            raise IndexNotFoundError(name)
        return JSONResponse({"index": name, "deleted": True})

    async def put_document_endpoint(request: Request) -> JSONResponse:
        index_name = request.path_params["index"]
        doc_id = request.path_params["doc_id"]
        body = await _read_json(request)
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Document body must be a JSON object")
        if body.setdefault("id", doc_id) != doc_id:
            raise HTTPException(status_code=400, detail="Document id does not match the request path")
        replaced = await run_in_threadpool(engine.index_document, index_name, body)
        return JSONResponse({"id": doc_id, "replaced": replaced}, status_code=200 if replaced else 201)

    async def delete_document_endpoint(request: Request) -> JSONResponse:
        index_name = request.path_params["index"]
        doc_id = request.path_params["doc_id"]
        removed = await run_in_threadpool(engine.remove_document, index_name, doc_id)
        if not removed:
            return _error(404, "Not found", f"Document {doc_id} not found in index {index_name}")
        return JSONResponse({"id": doc_id, "removed": True})

    async def bulk_endpoint(request: Request) -> JSONResponse:
        index_name = request.path_params["index"]
        body = await _read_json(request)
        documents = body.get("documents") if isinstance(body, dict) else body
        if not isinstance(documents, list):
            raise HTTPException(status_code=400, detail="Expected a list of documents")
        result = await run_in_threadpool(engine.bulk_index, index_name, documents)
        return JSONResponse(_dump(result))

    async def optimize_endpoint(request: Request) -> JSONResponse:
        index_name = request.path_params["index"]
        removed = await run_in_threadpool(engine.optimize_index, index_name)
        return JSONResponse({"index": index_name, "removed": removed})

    async def search_post_endpoint(request: Request) -> JSONResponse:
        started = time.perf_counter()
        body = await _read_json(request)
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Search body must be a JSON object")
        query = body.get("query")
        if not query or not isinstance(query, str):
            raise HTTPException(status_code=400, detail="Query parameter is required and must be a string")

        payload = {key: value for key, value in body.items() if key != "indexName"}
        payload.setdefault("highlight", True)
        index_name = request.path_params.get("index") or body.get("indexName") or default_index
        response = await run_in_threadpool(engine.search, index_name, payload)
        return _search_envelope(response, payload, started)

    async def search_get_endpoint(request: Request) -> JSONResponse:
        started = time.perf_counter()
        payload = build_query_from_params(request)
        index_name = request.query_params.get("indexName") or default_index
        response = await run_in_threadpool(engine.search, index_name, payload)
        return _search_envelope(response, payload, started)

    return [
        Route("/health", endpoint=build_health_endpoint(engine), methods=["GET"]),
        Route("/metrics", endpoint=metrics_endpoint, methods=["GET"]),
        Route("/analytics", endpoint=analytics_endpoint, methods=["GET"]),
        Route("/indices", endpoint=list_indices_endpoint, methods=["GET"]),
        Route("/indices/{index}", endpoint=create_index_endpoint, methods=["PUT"]),
        Route("/indices/{index}", endpoint=delete_index_endpoint, methods=["DELETE"]),
        Route("/indices/{index}/documents/_bulk", endpoint=bulk_endpoint, methods=["POST"]),
        Route("/indices/{index}/documents/{doc_id}", endpoint=put_document_endpoint, methods=["PUT"]),
        Route("/indices/{index}/documents/{doc_id}", endpoint=delete_document_endpoint, methods=["DELETE"]),
        Route("/indices/{index}/_optimize", endpoint=optimize_endpoint, methods=["POST"]),
        Route("/indices/{index}/search", endpoint=search_post_endpoint, methods=["POST"]),
        Route("/search", endpoint=search_post_endpoint, methods=["POST"]),
        Route("/search", endpoint=search_get_endpoint, methods=["GET"]),
    ]


async def _index_not_found_handler(_: Request, exc: Exception) -> JSONResponse:
    return _error(404, "Index not found", str(exc))


async def _query_syntax_handler(_: Request, exc: Exception) -> JSONResponse:
    return _error(400, "Invalid query", str(exc))


async def _validation_handler(_: Request, exc: Exception) -> JSONResponse:
    return _error(400, "Invalid request", str(exc))


async def _http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    error = _HTTP_ERROR_NAMES.get(exc.status_code, "Request failed")
    return _error(exc.status_code, error, str(exc.detail))


class RequestCountMiddleware:
    """Counts HTTP responses by matched endpoint and status."""

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        status = {"code": 500}

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            endpoint = scope.get("endpoint")
            REQUEST_COUNT.labels(route=getattr(endpoint, "__name__", "unmatched"), status=str(status["code"])).inc()


def create_app(engine: SearchEngine | None = None, settings: Settings | None = None) -> Starlette:
    """Build the Starlette application around an engine (a new one by default)."""
    if engine is None:
        engine = SearchEngine(settings)

    app = Starlette(
        routes=build_routes(engine),
        exception_handlers={
            IndexNotFoundError: _index_not_found_handler,
            QuerySyntaxError: _query_syntax_handler,
            ValidationError: _validation_handler,
            HTTPException: _http_exception_handler,
        },
    )
    app.state.engine = engine
    app.add_middleware(RequestCountMiddleware)
    app.add_middleware(TraceContextMiddleware)
    return app


def main() -> None:
    """Run the HTTP server with settings from the environment."""
    import uvicorn

    settings = Settings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    init_tracing()

    logger.info("Starting record-search on %s:%d", settings.host, settings.port)
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
