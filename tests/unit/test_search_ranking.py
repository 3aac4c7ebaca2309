"""Unit tests for sorting and pagination."""

from datetime import datetime, timezone

import pytest

from record_search.domain.search import Pagination, SearchResult, SortField
from record_search.search.ranking import paginate, sort_results


@pytest.fixture
def results(make_document):
    rows = [
        ("A", 3.0, datetime(2024, 1, 1, tzinfo=timezone.utc), {"value": 500, "region": "Ege"}),
        ("B", 2.0, datetime(2024, 3, 1, tzinfo=timezone.utc), {"value": 1500}),
        ("C", 1.0, datetime(2024, 2, 1, tzinfo=timezone.utc), {"value": 1000, "region": "Akdeniz"}),
        ("D", 0.5, datetime(2024, 2, 1, tzinfo=timezone.utc), {"value": None}),
    ]
    return [
        SearchResult(document=make_document(doc_id, f"Title {doc_id}", created_at=created, metadata=meta), score=score)
        for doc_id, score, created, meta in rows
    ]


def _ids(results):
    return [result.document.id for result in results]


@pytest.mark.unit
class TestSortResults:
    def test_without_sort_keeps_score_order(self, results):
        assert _ids(sort_results(results, None)) == ["A", "B", "C", "D"]
        assert _ids(sort_results(results, [])) == ["A", "B", "C", "D"]

    def test_created_at_descending(self, results):
        ordered = sort_results(results, [SortField(field="createdAt", order="desc")])

        assert _ids(ordered) == ["B", "C", "D", "A"]

    def test_snake_case_date_field(self, results):
        ordered = sort_results(results, [SortField(field="created_at")])

        assert _ids(ordered) == ["A", "C", "D", "B"]

    def test_metadata_field_with_missing_values_last(self, results):
        ascending = sort_results(results, [SortField(field="value", order="asc")])
        descending = sort_results(results, [SortField(field="value", order="desc")])

        assert _ids(ascending) == ["A", "C", "B", "D"]
        assert _ids(descending) == ["B", "C", "A", "D"]

    def test_missing_keys_sort_last_in_both_directions(self, results):
        assert _ids(sort_results(results, [SortField(field="region")])) == ["C", "A", "B", "D"]
        assert _ids(sort_results(results, [SortField(field="region", order="desc")])) == ["A", "C", "B", "D"]

    def test_secondary_key_breaks_ties(self, results):
        ordered = sort_results(
            results,
            [SortField(field="createdAt", order="asc"), SortField(field="score", order="asc")],
        )

        assert _ids(ordered) == ["A", "D", "C", "B"]

    def test_equal_keys_keep_score_order(self, results):
        ordered = sort_results(results, [SortField(field="createdAt", order="desc")])

        assert _ids(ordered).index("C") < _ids(ordered).index("D")

    def test_mixed_types_compare_as_text(self, make_document):
        rows = [
            SearchResult(document=make_document("A", metadata={"ref": "x-1"}), score=2.0),
            SearchResult(document=make_document("B", metadata={"ref": 7}), score=1.0),
        ]

        assert _ids(sort_results(rows, [SortField(field="ref")])) == ["B", "A"]

    def test_object_values_compare_as_text(self, make_document):
        rows = [
            SearchResult(document=make_document("A", metadata={"party": {"name": "b"}}), score=2.0),
            SearchResult(document=make_document("B", metadata={"party": {"name": "a"}}), score=1.0),
        ]

        assert _ids(sort_results(rows, [SortField(field="party")])) == ["B", "A"]
        assert _ids(sort_results(rows, [SortField(field="party", order="desc")])) == ["A", "B"]

    def test_title_sort(self, results):
        ordered = sort_results(results, [SortField(field="title", order="desc")])

        assert _ids(ordered) == ["D", "C", "B", "A"]


@pytest.mark.unit
class TestPaginate:
    def test_default_first_page(self, results):
        assert _ids(paginate(results, None, default_limit=2)) == ["A", "B"]

    def test_page_slicing(self, results):
        assert _ids(paginate(results, Pagination(page=2, limit=3))) == ["D"]

    def test_page_past_the_end(self, results):
        assert paginate(results, Pagination(page=5, limit=3)) == []

    def test_pagination_rejects_invalid_values(self):
        with pytest.raises(ValueError):
            Pagination(page=0, limit=10)
        with pytest.raises(ValueError):
            Pagination(page=1, limit=0)
