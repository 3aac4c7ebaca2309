"""Value objects for search requests and responses.

Requests accept both snake_case and the camelCase keys the web client sends;
responses serialize to camelCase with ``model_dump(by_alias=True)``.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from record_search.domain.model import DocumentStatus, DocumentType, SearchDocument, ensure_aware


class _CamelModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class DateRange(_CamelModel):
    """Inclusive bounds applied to ``created_at``."""

    from_: datetime | None = Field(default=None, alias="from")
    to: datetime | None = None

    @field_validator("from_", "to")
    @classmethod
    def _normalize_timezone(cls, value: datetime | None) -> datetime | None:
        return ensure_aware(value) if value is not None else None


class SearchFilters(_CamelModel):
    """Post-scoring filters; every populated filter must match."""

    type: DocumentType | list[DocumentType] | None = None
    tags: list[str] = Field(default_factory=list)
    created_by: list[str] = Field(default_factory=list)
    date_range: DateRange | None = None
    status: list[DocumentStatus] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SortField(_CamelModel):
    field: str = Field(min_length=1)
    order: Literal["asc", "desc"] = "asc"


class Pagination(_CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)


class FieldBoosts(_CamelModel):
    """Per-field relevance multipliers."""

    title: float = Field(default=2.0, ge=0.0)
    content: float = Field(default=1.0, ge=0.0)
    tags: float = Field(default=1.5, ge=0.0)


class SearchQuery(_CamelModel):
    """A raw query string plus everything that shapes its response."""

    query: str = ""
    type: DocumentType | list[DocumentType] | None = None
    filters: SearchFilters | None = None
    sort: list[SortField] = Field(default_factory=list)
    pagination: Pagination | None = None
    highlight: bool = False
    fuzzy: bool = False
    boost: FieldBoosts | None = None
    timeout_ms: int | None = Field(default=None, ge=1)


class Highlights(_CamelModel):
    title: list[str] | None = None
    content: list[str] | None = None
    tags: list[str] | None = None

    def is_empty(self) -> bool:
        return not (self.title or self.content or self.tags)


class ExplanationDetail(_CamelModel):
    value: float
    description: str


class Explanation(_CamelModel):
    """Score breakdown returned with each hit for observability."""

    value: float
    description: str
    details: list[ExplanationDetail] = Field(default_factory=list)


class SearchResult(_CamelModel):
    document: SearchDocument
    score: float
    highlights: Highlights | None = None
    explanation: Explanation | None = None


class HistogramBucket(_CamelModel):
    date: str
    count: int


class Aggregations(_CamelModel):
    types: dict[str, int] = Field(default_factory=dict)
    tags: dict[str, int] = Field(default_factory=dict)
    creators: dict[str, int] = Field(default_factory=dict)
    date_histogram: list[HistogramBucket] = Field(default_factory=list)


class SearchResponse(_CamelModel):
    results: list[SearchResult]
    total: int
    took: float
    max_score: float
    aggregations: Aggregations = Field(default_factory=Aggregations)
    suggestions: list[str] = Field(default_factory=list)


class BulkIndexError(_CamelModel):
    id: str
    error: str


class BulkIndexResult(_CamelModel):
    indexed: int
    errors: list[BulkIndexError] = Field(default_factory=list)


class PopularQuery(_CamelModel):
    query: str
    count: int


class SlowQuery(_CamelModel):
    query: str
    took: float
    timestamp: datetime


class NoResultQuery(_CamelModel):
    query: str
    timestamp: datetime


class IndexStats(_CamelModel):
    name: str
    document_count: int
    term_count: int
    last_updated: datetime


class AnalyticsSnapshot(_CamelModel):
    """Read-only counters consumed by external reporting."""

    total_searches: int
    popular_queries: list[PopularQuery] = Field(default_factory=list)
    slow_queries: list[SlowQuery] = Field(default_factory=list)
    no_result_queries: list[NoResultQuery] = Field(default_factory=list)
    index_stats: list[IndexStats] = Field(default_factory=list)
