"""Result ordering and pagination."""

from __future__ import annotations

from collections.abc import Sequence
from functools import cmp_to_key
from numbers import Number
from typing import Any

from record_search.domain.search import Pagination, SearchResult, SortField


DEFAULT_PAGE_SIZE = 20

_MISSING = object()


def _sort_value(result: SearchResult, field_name: str) -> Any:
    document = result.document
    if field_name == "score":
        return result.score
    if field_name in ("createdAt", "created_at"):
        return document.created_at
    if field_name in ("updatedAt", "updated_at"):
        return document.updated_at
    if field_name == "title":
        return document.title
    value = document.metadata.get(field_name, _MISSING)
    return _MISSING if value is None else value


def _compare_values(left: Any, right: Any) -> int:
    if left == right:
        return 0
    both_numeric = isinstance(left, Number) and isinstance(right, Number)
    if not both_numeric and type(left) is not type(right):
        left, right = str(left), str(right)
    try:
        less = left < right
    except TypeError:
        # JSON objects have no ordering of their own
        less = str(left) < str(right)
    return -1 if less else 1


def sort_results(results: Sequence[SearchResult], sort: Sequence[SortField] | None) -> list[SearchResult]:
    """Order results by the requested sort fields; without any, keep score order.

    Missing metadata values always sort after present ones. Python's sort is
    stable, so results equal on every requested field keep their score order.
    """

    if not sort:
        return list(results)

    def compare(a: SearchResult, b: SearchResult) -> int:
        for sort_field in sort:
            left, right = _sort_value(a, sort_field.field), _sort_value(b, sort_field.field)
            if left is _MISSING or right is _MISSING:
                if left is right:
                    continue
                return 1 if left is _MISSING else -1
            comparison = _compare_values(left, right)
            if comparison:
                return -comparison if sort_field.order == "desc" else comparison
        return 0

    return sorted(results, key=cmp_to_key(compare))


def paginate(
    results: Sequence[SearchResult],
    pagination: Pagination | None,
    *,
    default_limit: int = DEFAULT_PAGE_SIZE,
) -> list[SearchResult]:
    """Slice ``[(page-1)*limit, page*limit)``; the first page of ``default_limit`` when unset."""

    if pagination is None:
        return list(results[:default_limit])
    start = (pagination.page - 1) * pagination.limit
    return list(results[start : start + pagination.limit])
