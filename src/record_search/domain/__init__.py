"""Domain layer - records, queries and responses with no infrastructure dependencies."""

from record_search.domain.model import DocumentStatus, DocumentType, Permissions, SearchDocument
from record_search.domain.search import (
    Aggregations,
    AnalyticsSnapshot,
    BulkIndexError,
    BulkIndexResult,
    DateRange,
    Explanation,
    ExplanationDetail,
    FieldBoosts,
    Highlights,
    HistogramBucket,
    IndexStats,
    NoResultQuery,
    Pagination,
    PopularQuery,
    SearchFilters,
    SearchQuery,
    SearchResponse,
    SearchResult,
    SlowQuery,
    SortField,
)


__all__ = [
    "Aggregations",
    "AnalyticsSnapshot",
    "BulkIndexError",
    "BulkIndexResult",
    "DateRange",
    "DocumentStatus",
    "DocumentType",
    "Explanation",
    "ExplanationDetail",
    "FieldBoosts",
    "Highlights",
    "HistogramBucket",
    "IndexStats",
    "NoResultQuery",
    "Pagination",
    "Permissions",
    "PopularQuery",
    "SearchDocument",
    "SearchFilters",
    "SearchQuery",
    "SearchResponse",
    "SearchResult",
    "SlowQuery",
    "SortField",
]
