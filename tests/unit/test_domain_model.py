"""Unit tests for the document and query models."""

from datetime import datetime, timezone

from pydantic import ValidationError
import pytest

from record_search.domain.model import DocumentStatus, DocumentType, SearchDocument, stringify_metadata
from record_search.domain.search import FieldBoosts, SearchQuery


@pytest.mark.unit
class TestSearchDocument:
    def test_accepts_camel_case_payload(self):
        document = SearchDocument.model_validate(
            {
                "id": "c-1",
                "type": "contract",
                "title": "Gizlilik",
                "createdAt": "2024-01-10T09:00:00Z",
                "updatedAt": "2024-01-11T09:00:00Z",
                "createdBy": "ayse",
            }
        )

        assert document.created_by == "ayse"
        assert document.created_at == datetime(2024, 1, 10, 9, tzinfo=timezone.utc)
        assert document.status is DocumentStatus.ACTIVE

    def test_serializes_to_camel_case(self):
        document = SearchDocument(id="c-1", type=DocumentType.USER, created_by="ayse")

        payload = document.model_dump(mode="json", by_alias=True)

        assert payload["createdBy"] == "ayse"
        assert {"createdAt", "updatedAt"} <= set(payload)

    def test_naive_datetimes_become_utc(self):
        document = SearchDocument(id="c-1", type="contract", created_at=datetime(2024, 1, 1))

        assert document.created_at.tzinfo is timezone.utc

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "contract"},
            {"id": "", "type": "contract"},
            {"id": "c-1", "type": "invoice"},
            {"id": "c-1", "type": "contract", "status": "deleted"},
        ],
    )
    def test_rejects_malformed_payloads(self, payload):
        with pytest.raises(ValidationError):
            SearchDocument.model_validate(payload)

    def test_is_immutable(self):
        document = SearchDocument(id="c-1", type="contract")

        with pytest.raises(ValidationError):
            document.title = "changed"

    def test_field_values(self):
        document = SearchDocument(
            id="c-1",
            type="contract",
            title="Gizlilik",
            content="madde",
            tags=["a", "b"],
            created_by="ayse",
            metadata={"value": 1000, "signed": True, "parties": ["x", "y"]},
        )

        assert document.field_values() == {
            "title": "Gizlilik",
            "content": "madde",
            "tags": "a b",
            "type": "contract",
            "status": "active",
            "createdBy": "ayse",
            "metadata.value": "1000",
            "metadata.signed": "true",
            "metadata.parties": "x y",
        }
        assert document.searchable_fields == ("Gizlilik", "madde")


@pytest.mark.unit
def test_stringify_metadata():
    assert stringify_metadata(None) == ""
    assert stringify_metadata(False) == "false"
    assert stringify_metadata(3.5) == "3.5"
    assert stringify_metadata(("a", 1)) == "a 1"


@pytest.mark.unit
class TestSearchQuery:
    def test_defaults(self):
        query = SearchQuery()

        assert query.query == ""
        assert query.highlight is False
        assert query.fuzzy is False
        assert query.pagination is None

    def test_accepts_camel_case_keys(self):
        query = SearchQuery.model_validate(
            {
                "query": "gizlilik",
                "timeoutMs": 50,
                "filters": {"createdBy": ["ayse"], "dateRange": {"from": "2024-01-01T00:00:00"}},
                "sort": [{"field": "createdAt", "order": "desc"}],
            }
        )

        assert query.timeout_ms == 50
        assert query.filters.created_by == ["ayse"]
        assert query.filters.date_range.from_ == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert query.sort[0].order == "desc"

    def test_partial_boosts_keep_defaults(self):
        query = SearchQuery.model_validate({"boost": {"title": 5}})

        assert query.boost == FieldBoosts(title=5.0, content=1.0, tags=1.5)

    def test_rejects_bad_sort_order(self):
        with pytest.raises(ValidationError):
            SearchQuery.model_validate({"sort": [{"field": "title", "order": "sideways"}]})
