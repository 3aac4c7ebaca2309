"""Post-scoring filters and facet aggregation."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import timezone

from record_search.domain.model import DocumentType, SearchDocument
from record_search.domain.search import Aggregations, HistogramBucket, SearchFilters, SearchResult


TOP_TAGS = 20
TOP_CREATORS = 10

_MISSING = object()


def _as_type_set(value: DocumentType | Sequence[DocumentType] | None) -> set[DocumentType] | None:
    if value is None:
        return None
    if isinstance(value, DocumentType):
        return {value}
    return set(value)


def matches_filters(
    document: SearchDocument,
    filters: SearchFilters | None,
    *,
    query_type: DocumentType | Sequence[DocumentType] | None = None,
) -> bool:
    """Return True when ``document`` passes every populated filter."""

    query_types = _as_type_set(query_type)
    if query_types is not None and document.type not in query_types:
        return False
    if filters is None:
        return True

    filter_types = _as_type_set(filters.type)
    if filter_types is not None and document.type not in filter_types:
        return False

    if filters.tags and not any(tag in document.tags for tag in filters.tags):
        return False

    if filters.created_by and document.created_by not in filters.created_by:
        return False

    if filters.date_range is not None:
        lower, upper = filters.date_range.from_, filters.date_range.to
        if lower is not None and document.created_at < lower:
            return False
        if upper is not None and document.created_at > upper:
            return False

    if filters.status and document.status not in filters.status:
        return False

    for key, expected in filters.metadata.items():
        if document.metadata.get(key, _MISSING) != expected:
            return False

    return True


def apply_filters(
    results: Iterable[SearchResult],
    filters: SearchFilters | None,
    *,
    query_type: DocumentType | Sequence[DocumentType] | None = None,
) -> list[SearchResult]:
    """Keep results whose document passes the filters, preserving order."""

    return [result for result in results if matches_filters(result.document, filters, query_type=query_type)]


def compute_aggregations(results: Iterable[SearchResult]) -> Aggregations:
    """Facet counts over the filtered result set."""

    types: Counter[str] = Counter()
    tags: Counter[str] = Counter()
    creators: Counter[str] = Counter()
    months: Counter[str] = Counter()

    for result in results:
        document = result.document
        types[document.type.value] += 1
        tags.update(document.tags)
        creators[document.created_by] += 1
        months[document.created_at.astimezone(timezone.utc).strftime("%Y-%m")] += 1

    return Aggregations(
        types=dict(types),
        tags=dict(tags.most_common(TOP_TAGS)),
        creators=dict(creators.most_common(TOP_CREATORS)),
        date_histogram=[HistogramBucket(date=month, count=months[month]) for month in sorted(months)],
    )
