"""Shared test fixtures and configuration."""

from datetime import datetime, timedelta, timezone
import os

import pytest


# Pin every setting the engine reads so a developer's shell or .env cannot leak in
TEST_ENV = {
    "RECORD_SEARCH_DEFAULT_INDEX_NAME": "default",
    "RECORD_SEARCH_ANALYZER": "turkish",
    "RECORD_SEARCH_STOPWORDS": "",
    "RECORD_SEARCH_DEFAULT_PAGE_SIZE": "20",
    "RECORD_SEARCH_FUZZY_MAX_DISTANCE": "2",
    "RECORD_SEARCH_SUGGESTION_LIMIT": "5",
    "RECORD_SEARCH_SLOW_QUERY_MS": "1000",
    "RECORD_SEARCH_ANALYTICS_WINDOW_SIZE": "1000",
    "RECORD_SEARCH_ANALYTICS_REPORT_SIZE": "10",
    "RECORD_SEARCH_LOG_LEVEL": "info",
    "RECORD_SEARCH_LOG_JSON": "false",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value

from record_search.config import Settings
from record_search.domain.model import SearchDocument
from record_search.search_engine import SearchEngine


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset RECORD_SEARCH_* variables to test defaults before each test."""
    for key in list(os.environ):
        if key.startswith("RECORD_SEARCH_") and key not in TEST_ENV:
            monkeypatch.delenv(key, raising=False)
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def make_document():
    """Factory for documents with sensible defaults."""

    def _make(doc_id: str, title: str = "", content: str = "", **overrides) -> SearchDocument:
        payload = {
            "id": doc_id,
            "type": "contract",
            "title": title,
            "content": content,
            "created_by": "ayse",
            "created_at": NOW - timedelta(days=30),
            "updated_at": NOW - timedelta(days=30),
        }
        payload.update(overrides)
        return SearchDocument.model_validate(payload)

    return _make


@pytest.fixture
def turkish_corpus(make_document):
    """Three contract-management records used across engine tests."""
    return [
        make_document(
            "A",
            "Gizlilik Sözleşmesi",
            "Taraflar gizli bilgileri korur",
            tags=["gizlilik"],
            created_by="ayse",
            created_at=datetime(2024, 1, 10, tzinfo=timezone.utc),
        ),
        make_document(
            "B",
            "Ödeme Şartları",
            "Ödeme 30 gün içinde yapılır",
            tags=["ödeme", "finans"],
            created_by="mehmet",
            created_at=datetime(2024, 2, 5, tzinfo=timezone.utc),
        ),
        make_document(
            "C",
            "Gizlilik Maddesi",
            "Bu madde gizlilik ve veriler hakkındadır",
            tags=["gizlilik", "veri"],
            created_by="ayse",
            created_at=datetime(2024, 2, 20, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def engine(settings):
    return SearchEngine(settings)


@pytest.fixture
def loaded_engine(engine, turkish_corpus):
    result = engine.bulk_index("default", turkish_corpus)
    assert result.indexed == len(turkish_corpus)
    return engine
