"""Fuzzy matching for typo-tolerant search and query suggestions.

The vocabulary of an index is mirrored into a BK-tree so that bounded edit
distance lookups visit only the branches that can still satisfy the
triangle inequality instead of scanning every indexed term. Lookups accept
a ``Deadline`` and stop early once it has expired.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
import time


DEFAULT_MAX_DISTANCE = 2


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Uses two rolling rows, with optional early termination when the
    distance is guaranteed to exceed ``max_distance``.

    Returns:
        The minimum number of single-character insertions, deletions and
        substitutions needed to change s1 into s2. If max_distance is set
        and exceeded, returns max_distance+1.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("gizlilk", "gizlilik")
        1
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)

    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


class Deadline:
    """Monotonic time budget shared by the expensive vocabulary scans."""

    def __init__(self, timeout_ms: float | None = None, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._expires_at = None if timeout_ms is None else clock() + timeout_ms / 1000.0

    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at


@dataclass
class _BKNode:
    term: str
    children: dict[int, _BKNode] = field(default_factory=dict)


class BKTree:
    """Burkhard-Keller tree over the index vocabulary.

    Terms are never unlinked from the tree; removal only drops them from the
    live set, and ``rebuild`` compacts the structure.
    """

    def __init__(self, terms: Iterable[str] = ()) -> None:
        self._root: _BKNode | None = None
        self._live: set[str] = set()
        self._node_count = 0
        for term in terms:
            self.add(term)

    def __len__(self) -> int:
        return len(self._live)

    def __contains__(self, term: object) -> bool:
        return term in self._live

    def __iter__(self) -> Iterator[str]:
        return iter(self._live)

    @property
    def stale_count(self) -> int:
        """Nodes kept in the tree for terms that are no longer live."""
        return self._node_count - len(self._live)

    def add(self, term: str) -> None:
        if not term or term in self._live:
            return
        self._live.add(term)
        if self._root is None:
            self._root = _BKNode(term)
            self._node_count = 1
            return
        node = self._root
        while True:
            if node.term == term:
                return  # resurrected stale node
            distance = levenshtein_distance(term, node.term)
            child = node.children.get(distance)
            if child is None:
                node.children[distance] = _BKNode(term)
                self._node_count += 1
                return
            node = child

    def discard(self, term: str) -> None:
        self._live.discard(term)

    def rebuild(self, terms: Iterable[str] | None = None) -> None:
        live = sorted(self._live if terms is None else set(terms))
        self._root = None
        self._live = set()
        self._node_count = 0
        for term in live:
            self.add(term)

    def search(
        self,
        term: str,
        max_distance: int = DEFAULT_MAX_DISTANCE,
        *,
        deadline: Deadline | None = None,
    ) -> list[tuple[str, int]]:
        """Return live ``(term, distance)`` pairs within ``max_distance``, closest first."""
        if self._root is None or not term:
            return []
        matches: list[tuple[str, int]] = []
        stack = [self._root]
        while stack:
            if deadline is not None and deadline.expired():
                break
            node = stack.pop()
            distance = levenshtein_distance(term, node.term)
            if distance <= max_distance and node.term in self._live:
                matches.append((node.term, distance))
            low, high = distance - max_distance, distance + max_distance
            stack.extend(child for edge, child in node.children.items() if low <= edge <= high)
        matches.sort(key=lambda item: (item[1], item[0]))
        return matches
