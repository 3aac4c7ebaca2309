"""In-memory full-text search and ranking engine for application records."""

from record_search.search_engine import SearchEngine


__version__ = "0.1.0"

__all__ = ["SearchEngine", "__version__"]
