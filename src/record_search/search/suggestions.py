"""Did-you-mean suggestions built from near-miss vocabulary terms."""

from __future__ import annotations

import re

from record_search.search.analyzers import Analyzer
from record_search.search.fuzzy import DEFAULT_MAX_DISTANCE, BKTree, Deadline


DEFAULT_SUGGESTION_LIMIT = 5


def generate_suggestions(
    raw_query: str,
    analyzer: Analyzer,
    vocabulary: BKTree,
    *,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
    max_distance: int = DEFAULT_MAX_DISTANCE,
    deadline: Deadline | None = None,
) -> list[str]:
    """Return up to ``limit`` unique rewrites of ``raw_query``.

    Each rewrite substitutes one query term with a vocabulary term at edit
    distance 1..``max_distance``; closer terms are proposed first.
    """

    suggestions: list[str] = []
    for query_term in dict.fromkeys(analyzer.terms(raw_query)):
        if deadline is not None and deadline.expired():
            break
        pattern = re.compile(re.escape(query_term), re.IGNORECASE)
        for candidate, distance in vocabulary.search(query_term, max_distance, deadline=deadline):
            if distance == 0:
                continue
            suggestion = pattern.sub(lambda _match, replacement=candidate: replacement, raw_query)
            if suggestion != raw_query and suggestion not in suggestions:
                suggestions.append(suggestion)
            if len(suggestions) >= limit:
                return suggestions
    return suggestions
