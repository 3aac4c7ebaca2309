"""Exceptions raised by the search engine."""


class SearchEngineError(Exception):
    """Base error for the search engine."""


class IndexNotFoundError(SearchEngineError, KeyError):
    """Raised when an operation targets an index that was never created."""

    def __init__(self, index_name: str) -> None:
        super().__init__(index_name)
        self.index_name = index_name

    def __str__(self) -> str:
        return f"Index {self.index_name} not found"


class QuerySyntaxError(SearchEngineError, ValueError):
    """Raised when a raw query string cannot be parsed."""
