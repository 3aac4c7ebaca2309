"""Centralized configuration for record-search using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from record_search.domain.search import FieldBoosts


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``RECORD_SEARCH_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RECORD_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Indexing
    default_index_name: str = Field(default="default", min_length=1, description="Index created with the engine")
    analyzer: str = Field(default="turkish", description="Analyzer name used for new indices")
    stopwords: str = Field(
        default="",
        description="Comma-separated stopword override; empty keeps the analyzer's built-in list",
    )

    # Search
    default_page_size: int = Field(default=20, ge=1, description="Results per page when no pagination is given")
    fuzzy_max_distance: int = Field(default=2, ge=1, le=3, description="Maximum edit distance for fuzzy terms")
    suggestion_limit: int = Field(default=5, ge=0, description="Maximum number of query suggestions")
    search_timeout_ms: int | None = Field(
        default=None,
        ge=1,
        description="Default time budget for fuzzy and suggestion scans; unset means unbounded",
    )
    title_boost: float = Field(default=2.0, ge=0.0)
    content_boost: float = Field(default=1.0, ge=0.0)
    tags_boost: float = Field(default=1.5, ge=0.0)

    # Analytics
    slow_query_ms: float = Field(default=1000.0, ge=0.0, description="Searches slower than this are reported")
    analytics_window_size: int = Field(default=1000, ge=1, description="Slow/empty query events kept in memory")
    analytics_report_size: int = Field(default=10, ge=1, description="Entries per analytics report list")

    # Server
    host: str = Field(default="127.0.0.1", description="HTTP server host")
    port: int = Field(default=15010, ge=1, le=65535, description="HTTP server port")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    def get_stopwords(self) -> list[str] | None:
        """Stopword override list, or None to keep the analyzer defaults."""
        if not self.stopwords:
            return None
        return [word.strip() for word in self.stopwords.split(",") if word.strip()]

    def default_boosts(self) -> FieldBoosts:
        return FieldBoosts(title=self.title_boost, content=self.content_boost, tags=self.tags_boost)
