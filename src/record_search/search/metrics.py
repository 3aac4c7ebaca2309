"""Query analytics collected passively from search calls."""

from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime, timezone
import threading

from record_search.domain.search import AnalyticsSnapshot, IndexStats, NoResultQuery, PopularQuery, SlowQuery


@dataclass(frozen=True)
class SearchEvent:
    """One recorded search call."""

    query: str
    took_ms: float
    result_count: int
    timestamp: datetime


class SearchAnalytics:
    """Counts searches and remembers popular, slow and empty queries."""

    def __init__(
        self,
        *,
        slow_query_ms: float = 1000.0,
        window_size: int = 1000,
        report_size: int = 10,
    ) -> None:
        self.slow_query_ms = slow_query_ms
        self.report_size = report_size
        self._lock = threading.Lock()
        self._total_searches = 0
        self._popular: Counter[str] = Counter()
        self._slow: deque[SearchEvent] = deque(maxlen=window_size)
        self._no_results: deque[SearchEvent] = deque(maxlen=window_size)

    @staticmethod
    def normalize(query: str) -> str:
        return query.strip().lower()

    def track_query(self, query: str) -> None:
        """Count an incoming search before it runs."""
        with self._lock:
            self._total_searches += 1
            self._popular[self.normalize(query)] += 1

    def record_outcome(self, query: str, took_ms: float, result_count: int) -> None:
        """Remember a finished search if it was slow or returned nothing."""
        event = SearchEvent(query=query, took_ms=took_ms, result_count=result_count, timestamp=datetime.now(timezone.utc))
        with self._lock:
            if took_ms > self.slow_query_ms:
                self._slow.append(event)
            if result_count == 0:
                self._no_results.append(event)

    def snapshot(self, index_stats: list[IndexStats]) -> AnalyticsSnapshot:
        with self._lock:
            popular = [
                PopularQuery(query=query, count=count) for query, count in self._popular.most_common(self.report_size)
            ]
            slowest = sorted(self._slow, key=lambda event: event.took_ms, reverse=True)[: self.report_size]
            no_results = list(self._no_results)[-self.report_size :]
            total = self._total_searches

        return AnalyticsSnapshot(
            total_searches=total,
            popular_queries=popular,
            slow_queries=[SlowQuery(query=e.query, took=e.took_ms, timestamp=e.timestamp) for e in slowest],
            no_result_queries=[NoResultQuery(query=e.query, timestamp=e.timestamp) for e in no_results],
            index_stats=index_stats,
        )

    def reset(self) -> None:
        with self._lock:
            self._total_searches = 0
            self._popular.clear()
            self._slow.clear()
            self._no_results.clear()
