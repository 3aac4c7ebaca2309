"""Search engine facade.

``SearchEngine`` owns a set of named indices and runs the full query
pipeline against one of them:

1. parse the raw query (terms, phrases, ``+``/``-``/``AND``/``OR``/``NOT``)
2. retrieve candidates by set algebra, expanding terms fuzzily on request
3. score candidates with boosted TF-IDF, phrase bonuses and recency
4. apply filters, compute facets, sort, paginate and highlight
5. propose did-you-mean rewrites and record analytics
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
import threading
import time
from typing import Any

from pydantic import ValidationError

from record_search.config import Settings
from record_search.domain.model import SearchDocument
from record_search.domain.search import (
    AnalyticsSnapshot,
    BulkIndexError,
    BulkIndexResult,
    SearchQuery,
    SearchResponse,
)
from record_search.observability.context import bound_index
from record_search.observability.metrics import (
    DOCUMENTS_INDEXED,
    INDEX_DOC_COUNT,
    INDEX_TERM_COUNT,
    INDEXING_FAILURES,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    track_latency,
)
from record_search.observability.tracing import create_span
from record_search.search.analyzers import get_analyzer
from record_search.search.errors import IndexNotFoundError, QuerySyntaxError
from record_search.search.filters import apply_filters, compute_aggregations
from record_search.search.fuzzy import Deadline
from record_search.search.inverted_index import SearchIndex
from record_search.search.metrics import SearchAnalytics
from record_search.search.query_parser import ParsedQuery, QueryParser
from record_search.search.ranking import paginate, sort_results
from record_search.search.retriever import Candidates, CandidateRetriever
from record_search.search.scorer import TfIdfScorer
from record_search.search.snippet import build_highlights
from record_search.search.suggestions import generate_suggestions


logger = logging.getLogger(__name__)

DocumentInput = SearchDocument | Mapping[str, Any]
QueryInput = SearchQuery | Mapping[str, Any] | str


def _coerce_document(document: DocumentInput) -> SearchDocument:
    if isinstance(document, SearchDocument):
        return document.model_copy(deep=True)
    return SearchDocument.model_validate(document)


def _coerce_query(query: QueryInput) -> SearchQuery:
    if isinstance(query, SearchQuery):
        return query
    if isinstance(query, str):
        return SearchQuery(query=query)
    return SearchQuery.model_validate(query)


def _document_id(document: Any) -> str:
    if isinstance(document, Mapping):
        value = document.get("id")
    else:
        value = getattr(document, "id", None)
    return "" if value is None else str(value)


def _highlight_terms(parsed: ParsedQuery, candidates: Candidates) -> list[str]:
    terms = list(parsed.scoring_terms)
    terms.extend(phrase.text for phrase in parsed.phrases)
    for term in parsed.scoring_terms:
        terms.extend(candidate for candidate, _distance in candidates.fuzzy_expansions.get(term, ()))
    return list(dict.fromkeys(terms))


class SearchEngine:
    """In-process full-text search over application records."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.analytics = SearchAnalytics(
            slow_query_ms=self.settings.slow_query_ms,
            window_size=self.settings.analytics_window_size,
            report_size=self.settings.analytics_report_size,
        )
        self._indices: dict[str, SearchIndex] = {}
        self._lock = threading.Lock()
        self.create_index(self.settings.default_index_name)

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    def create_index(self, name: str, *, analyzer: str | None = None) -> SearchIndex:
        """Create an empty index, or return the existing one with that name."""
        with self._lock:
            index = self._indices.get(name)
            if index is not None:
                return index
            index = SearchIndex(
                name,
                get_analyzer(analyzer or self.settings.analyzer, stopwords=self.settings.get_stopwords()),
            )
            self._indices[name] = index
        logger.info("Created index %s", name)
        self._update_index_gauges(index)
        return index

    def get_index(self, name: str) -> SearchIndex:
        try:
            return self._indices[name]
        except KeyError:
            raise IndexNotFoundError(name) from None

    def delete_index(self, name: str) -> bool:
        with self._lock:
            removed = self._indices.pop(name, None) is not None
        if removed:
            logger.info("Deleted index %s", name)
        return removed

    def list_indices(self) -> list[str]:
        with self._lock:
            return sorted(self._indices)

    # ------------------------------------------------------------------
    # Document mutations
    # ------------------------------------------------------------------

    def index_document(self, index_name: str, document: DocumentInput) -> bool:
        """Index or replace one document; returns True when it replaced an older version.

        Raises:
            IndexNotFoundError: if the index does not exist.
            ValidationError: if a mapping is not a valid document.
        """
        index = self.get_index(index_name)
        doc = _coerce_document(document)
        start = time.perf_counter()
        span_attributes = {"index": index_name, "document.id": doc.id}
        with bound_index(index_name), create_span("search.index_document", attributes=span_attributes):
            replaced = index.index_document(doc)
        DOCUMENTS_INDEXED.labels(index=index_name).inc()
        self._update_index_gauges(index)
        logger.debug("Indexed document %s in %.2fms", doc.id, (time.perf_counter() - start) * 1000)
        return replaced

    def remove_document(self, index_name: str, doc_id: str) -> bool:
        """Remove a document; False when the index or the document is absent."""
        index = self._indices.get(index_name)
        if index is None:
            return False
        removed = index.remove_document(doc_id)
        if removed:
            self._update_index_gauges(index)
        return removed

    def bulk_index(self, index_name: str, documents: Iterable[DocumentInput]) -> BulkIndexResult:
        """Index documents one by one, collecting per-document failures."""
        index = self.get_index(index_name)
        start = time.perf_counter()
        indexed = 0
        errors: list[BulkIndexError] = []

        with bound_index(index_name), create_span("search.bulk_index", attributes={"index": index_name}) as span:
            for document in documents:
                try:
                    index.index_document(_coerce_document(document))
                except (ValidationError, ValueError, TypeError) as exc:
                    errors.append(BulkIndexError(id=_document_id(document), error=str(exc)))
                    INDEXING_FAILURES.labels(index=index_name).inc()
                    logger.warning("Rejected document %r in bulk load of %s: %s", _document_id(document), index_name, exc)
                    continue
                indexed += 1
            span.set_attribute("documents.indexed", indexed)
            span.set_attribute("documents.failed", len(errors))

        if indexed:
            DOCUMENTS_INDEXED.labels(index=index_name).inc(indexed)
        self._update_index_gauges(index)
        logger.info(
            "Bulk indexing completed: %d/%d documents in %.1fms",
            indexed,
            indexed + len(errors),
            (time.perf_counter() - start) * 1000,
        )
        return BulkIndexResult(indexed=indexed, errors=errors)

    def optimize_index(self, index_name: str) -> int:
        """Compact an index; returns the number of empty term entries dropped."""
        index = self.get_index(index_name)
        start = time.perf_counter()
        with bound_index(index_name), create_span("search.optimize", attributes={"index": index_name}):
            removed = index.optimize()
        self._update_index_gauges(index)
        logger.info(
            "Index optimization of %s completed in %.1fms (%d empty entries removed)",
            index_name,
            (time.perf_counter() - start) * 1000,
            removed,
        )
        return removed

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, index_name: str, query: QueryInput) -> SearchResponse:
        """Run a query against one index.

        Raises:
            IndexNotFoundError: if the index does not exist.
            QuerySyntaxError: if the query string cannot be parsed.
            ValidationError: if a mapping is not a valid query.
        """
        index = self.get_index(index_name)
        search_query = _coerce_query(query)
        self.analytics.track_query(search_query.query)

        with bound_index(index_name):
            start = time.perf_counter()
            try:
                with (
                    track_latency(SEARCH_LATENCY, index=index_name),
                    create_span("search.query", attributes={"index": index_name, "query.fuzzy": search_query.fuzzy}) as span,
                ):
                    response = self._execute(index, search_query)
                    span.set_attribute("results.total", response.total)
            except QuerySyntaxError:
                SEARCH_COUNT.labels(index=index_name, outcome="error").inc()
                raise

            took_ms = (time.perf_counter() - start) * 1000
            response = response.model_copy(update={"took": took_ms})
            self.analytics.record_outcome(search_query.query, took_ms, response.total)
            SEARCH_COUNT.labels(index=index_name, outcome="hit" if response.total else "empty").inc()

            if took_ms > self.settings.slow_query_ms:
                logger.warning(
                    "Slow query on %s: %r took %.1fms",
                    index_name,
                    search_query.query,
                    took_ms,
                    extra={"query": search_query.query, "took_ms": took_ms, "slow_query": True},
                )
            logger.info(
                "Search completed: %r - %d/%d results in %.1fms",
                search_query.query,
                len(response.results),
                response.total,
                took_ms,
                extra={"query": search_query.query, "took_ms": took_ms, "total": response.total},
            )
            return response

    def _execute(self, index: SearchIndex, query: SearchQuery) -> SearchResponse:
        settings = self.settings
        deadline = Deadline(query.timeout_ms or settings.search_timeout_ms)

        with index.reading():
            parsed = QueryParser(index.analyzer).parse(query.query)
            candidates = CandidateRetriever(
                index,
                fuzzy=query.fuzzy,
                max_edit_distance=settings.fuzzy_max_distance,
                deadline=deadline,
            ).retrieve(parsed)
            scored = TfIdfScorer(index, query.boost or settings.default_boosts()).score(parsed, candidates)

            filtered = apply_filters(scored, query.filters, query_type=query.type)
            aggregations = compute_aggregations(filtered)
            page = paginate(
                sort_results(filtered, query.sort),
                query.pagination,
                default_limit=settings.default_page_size,
            )

            if query.highlight:
                terms = _highlight_terms(parsed, candidates)
                page = [
                    result.model_copy(update={"highlights": build_highlights(result.document, terms)})
                    for result in page
                ]

            suggestions: list[str] = []
            if settings.suggestion_limit:
                suggestions = generate_suggestions(
                    query.query,
                    index.analyzer,
                    index.vocabulary,
                    limit=settings.suggestion_limit,
                    max_distance=settings.fuzzy_max_distance,
                    deadline=deadline,
                )

        return SearchResponse(
            results=page,
            total=len(filtered),
            took=0.0,
            max_score=max((result.score for result in page), default=0.0),
            aggregations=aggregations,
            suggestions=suggestions,
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_analytics(self) -> AnalyticsSnapshot:
        with self._lock:
            indices = list(self._indices.values())
        return self.analytics.snapshot([index.stats() for index in indices])

    def _update_index_gauges(self, index: SearchIndex) -> None:
        INDEX_DOC_COUNT.labels(index=index.name).set(index.document_count)
        INDEX_TERM_COUNT.labels(index=index.name).set(index.term_count)
