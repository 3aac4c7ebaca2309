"""Result highlighting.

Titles get every term occurrence wrapped, content is cut into a few context
windows around matches, and tags are wrapped when they contain a term.
Matching folds case the way analyzers do (so "İ" matches "i") and treats
terms literally.
"""

from __future__ import annotations

from collections.abc import Sequence
import re

from record_search.domain.model import SearchDocument
from record_search.domain.search import Highlights
from record_search.search.analyzers import fold_case


MARK_OPEN = "<mark>"
MARK_CLOSE = "</mark>"
DEFAULT_CONTEXT_CHARS = 50
DEFAULT_MAX_FRAGMENTS = 3


def _fold(text: str) -> str:
    """Case-folded copy of ``text`` with the same length, so offsets carry over."""
    folded = fold_case(text)
    if len(folded) == len(text):
        return folded
    chars = []
    for char in text:
        folded_char = fold_case(char)
        chars.append(folded_char if len(folded_char) == 1 else char)
    return "".join(chars)


def _find_matches(text: str, terms: Sequence[str]) -> list[tuple[int, int]]:
    """Non-overlapping ``(start, end)`` spans, preferring longer matches at the same start."""
    folded = _fold(text)
    matches: list[tuple[int, int]] = []
    for term in terms:
        if not term:
            continue
        pattern = re.compile(re.escape(_fold(term)))
        matches.extend((match.start(), match.end()) for match in pattern.finditer(folded))

    matches.sort(key=lambda span: (span[0], -(span[1] - span[0])))
    selected: list[tuple[int, int]] = []
    for start, end in matches:
        if selected and start < selected[-1][1]:
            continue
        selected.append((start, end))
    return selected


def highlight_terms(text: str, terms: Sequence[str]) -> str:
    """Wrap every occurrence of any term in ``<mark>`` tags."""
    if not text or not terms:
        return text

    spans = _find_matches(text, terms)
    if not spans:
        return text

    # Apply highlights from end to start (to preserve positions)
    result = text
    for start, end in reversed(spans):
        result = f"{result[:start]}{MARK_OPEN}{result[start:end]}{MARK_CLOSE}{result[end:]}"
    return result


def extract_fragments(
    text: str,
    terms: Sequence[str],
    *,
    context_chars: int = DEFAULT_CONTEXT_CHARS,
    max_fragments: int = DEFAULT_MAX_FRAGMENTS,
) -> list[str]:
    """Return up to ``max_fragments`` highlighted windows around matches, in text order."""
    if not text or not terms:
        return []

    fragments: list[str] = []
    window_end = -1
    for start, end in _find_matches(text, terms):
        if start < window_end:
            continue  # already shown in the previous window
        window_start = max(0, start - context_chars)
        window_end = min(len(text), end + context_chars)
        fragments.append(highlight_terms(text[window_start:window_end], terms))
        if len(fragments) >= max_fragments:
            break
    return fragments


def highlight_tags(tags: Sequence[str], terms: Sequence[str]) -> list[str]:
    """Highlighted copies of the tags that contain at least one term."""
    folded_terms = [_fold(term) for term in terms if term]
    return [highlight_terms(tag, terms) for tag in tags if any(term in _fold(tag) for term in folded_terms)]


def build_highlights(document: SearchDocument, terms: Sequence[str]) -> Highlights | None:
    """Highlights for a result, or None when nothing matched."""
    title = highlight_terms(document.title, terms)
    content = extract_fragments(document.content, terms)
    tags = highlight_tags(document.tags, terms)

    highlights = Highlights(
        title=[title] if title != document.title else None,
        content=content or None,
        tags=tags or None,
    )
    return None if highlights.is_empty() else highlights
