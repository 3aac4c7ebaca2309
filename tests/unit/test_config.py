"""Unit tests for environment-driven settings."""

from pydantic import ValidationError
import pytest

from record_search.config import Settings
from record_search.domain.search import FieldBoosts


@pytest.mark.unit
class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.default_index_name == "default"
        assert settings.analyzer == "turkish"
        assert settings.default_page_size == 20
        assert settings.slow_query_ms == 1000.0
        assert settings.search_timeout_ms is None
        assert settings.get_stopwords() is None

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("RECORD_SEARCH_DEFAULT_PAGE_SIZE", "5")
        monkeypatch.setenv("RECORD_SEARCH_ANALYZER", "english")
        monkeypatch.setenv("RECORD_SEARCH_SEARCH_TIMEOUT_MS", "250")

        settings = Settings()

        assert settings.default_page_size == 5
        assert settings.analyzer == "english"
        assert settings.search_timeout_ms == 250

    def test_stopword_override(self, monkeypatch):
        monkeypatch.setenv("RECORD_SEARCH_STOPWORDS", " madde, sözleşme ,,")

        assert Settings().get_stopwords() == ["madde", "sözleşme"]

    def test_default_boosts(self):
        settings = Settings(title_boost=3.0)

        assert settings.default_boosts() == FieldBoosts(title=3.0, content=1.0, tags=1.5)

    def test_rejects_invalid_values(self, monkeypatch):
        monkeypatch.setenv("RECORD_SEARCH_DEFAULT_PAGE_SIZE", "0")

        with pytest.raises(ValidationError):
            Settings()

    def test_unprefixed_variables_are_ignored(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_PAGE_SIZE", "7")

        assert Settings().default_page_size == 20
