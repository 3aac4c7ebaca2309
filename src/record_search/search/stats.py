"""Statistical helpers for TF-IDF scoring.

The functions here stay independent of the index structures so they can be
unit tested in isolation.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
import math


SECONDS_PER_DAY = 86400.0


def calculate_idf(doc_freq: int, total_docs: int, *, floor: float = 1e-6) -> float:
    """Return ``ln(total_docs / doc_freq)``, floored to stay positive.

    A term present in every document would otherwise weigh exactly zero and
    drop its documents from the results; the floor keeps such matches
    rankable while leaving rarer terms unaffected. Unknown terms weigh 0.
    """

    if total_docs <= 0 or doc_freq <= 0:
        return 0.0
    df = min(doc_freq, total_docs)
    return max(math.log(total_docs / df), floor)


def term_frequency(term: str, tokens: Sequence[str]) -> float:
    """Occurrences of ``term`` divided by the field's token count."""

    if not tokens:
        return 0.0
    return tokens.count(term) / len(tokens)


def recency_multiplier(
    updated_at: datetime,
    now: datetime,
    *,
    horizon_days: float = 365.0,
    max_boost: float = 0.1,
) -> float:
    """Linear freshness boost: ``1 + max_boost`` today, ``1.0`` after ``horizon_days``."""

    days_since_update = (now - updated_at).total_seconds() / SECONDS_PER_DAY
    freshness = max(0.0, 1.0 - days_since_update / horizon_days)
    return 1.0 + min(freshness, 1.0) * max_boost
