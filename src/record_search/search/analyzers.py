"""Analyzer utilities for the in-memory search engine.

Analyzers follow a composable tokenizer/filter design: a tokenizer produces
positioned tokens and a chain of filters normalizes them (case folding,
length and stopword pruning, stemming). The stemming step is a strategy
object so each index can be given an analyzer tuned to its language.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableMapping, Sequence
from dataclasses import dataclass, field
import re
from typing import Any, Protocol


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int = 0
    end_char: int = 0
    attributes: MutableMapping[str, Any] = field(default_factory=dict)

    def copy_with(self, **updates: Any) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "start_char": self.start_char,
            "end_char": self.end_char,
            "attributes": dict(self.attributes),
        }
        data.update(updates)
        return Token(**data)


class Analyzer(Protocol):
    """Capabilities the index and query parser need from an analyzer."""

    def __call__(self, text: str) -> list[Token]:  # pragma: no cover - interface definition
        ...

    def terms(self, text: str) -> list[str]:  # pragma: no cover - interface definition
        ...

    def stem(self, word: str) -> str:  # pragma: no cover - interface definition
        ...

    def is_stopword(self, word: str) -> bool:  # pragma: no cover - interface definition
        ...


class Tokenizer(Protocol):
    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class Stemmer(Protocol):
    """Reduces a normalized word to its approximate root."""

    def __call__(self, word: str) -> str:  # pragma: no cover - interface definition
        ...


DEFAULT_STRIP_PATTERN = r"[^\w\s]"

DEFAULT_STOPWORDS = (
    "a",
    "an",
    "and",
    "are",
    "as",
    "at",
    "be",
    "by",
    "for",
    "from",
    "has",
    "he",
    "in",
    "is",
    "it",
    "its",
    "of",
    "on",
    "that",
    "the",
    "to",
    "was",
    "will",
    "with",
    "bir",
    "bu",
    "da",
    "de",
    "den",
    "için",
    "ile",
    "olan",
    "ve",
    "veya",
    "ya",
)

# Ordered by priority: the first matching suffix wins.
TURKISH_SUFFIXES = (
    "lar",
    "ler",
    "dan",
    "den",
    "tan",
    "ten",
    "nin",
    "nın",
    "nun",
    "nün",
    "da",
    "de",
    "ta",
    "te",
    "ya",
    "ye",
    "a",
    "e",
    "ı",
    "i",
    "u",
    "ü",
    "o",
    "ö",
)

ENGLISH_SUFFIXES = ("ingly", "edly", "ing", "ed", "ly", "es", "s")

# "İ".lower() yields "i" plus a combining dot which the strip pattern would
# split into two tokens.
_CASE_FOLD = str.maketrans({"İ": "i"})


def fold_case(text: str) -> str:
    """Lowercase ``text`` the way analyzers do, so dotted capital I folds to ``i``."""
    return text.translate(_CASE_FOLD).lower()


class CharacterClassTokenizer:
    """Replaces characters outside the word alphabet with spaces, then splits on whitespace.

    Replacement is one character for one character, so token offsets point
    into the original text.
    """

    def __init__(self, strip_pattern: str = DEFAULT_STRIP_PATTERN) -> None:
        self.strip = re.compile(strip_pattern, re.UNICODE)
        self.words = re.compile(r"\S+", re.UNICODE)

    def __call__(self, text: str) -> Iterator[Token]:
        cleaned = self.strip.sub(" ", text)
        for position, match in enumerate(self.words.finditer(cleaned)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.islower():
                yield token
            else:
                yield token.copy_with(text=fold_case(token.text))


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = 2) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        vocab = stopwords if stopwords is not None else DEFAULT_STOPWORDS
        self.stopwords = frozenset(word.lower() for word in vocab)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text not in self.stopwords:
                yield token


class StemFilter:
    """Applies a stemming strategy to every token."""

    def __init__(self, stemmer: Stemmer) -> None:
        self.stemmer = stemmer

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            stemmed = self.stemmer(token.text)
            yield token if stemmed == token.text else token.copy_with(text=stemmed)


class SuffixStripStemmer:
    """Rule-based light stemmer.

    Words shorter than ``min_word_length`` pass through. Otherwise the first
    suffix in ``suffixes`` that the word ends with is removed, provided at
    least ``min_stem_length`` characters remain.
    """

    def __init__(
        self,
        suffixes: Sequence[str] = TURKISH_SUFFIXES,
        *,
        min_word_length: int = 4,
        min_stem_length: int = 3,
    ) -> None:
        self.suffixes = tuple(suffixes)
        self.min_word_length = min_word_length
        self.min_stem_length = min_stem_length

    def __call__(self, word: str) -> str:
        if len(word) < self.min_word_length:
            return word
        for suffix in self.suffixes:
            if word.endswith(suffix) and len(word) - len(suffix) >= self.min_stem_length:
                return word[: -len(suffix)]
        return word


def identity_stemmer(word: str) -> str:
    return word


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class StandardAnalyzer:
    """Default analyzer: fold case, strip punctuation, drop short words and stopwords, stem."""

    def __init__(
        self,
        *,
        stopwords: Iterable[str] | None = None,
        stemmer: Stemmer | None = None,
        strip_pattern: str = DEFAULT_STRIP_PATTERN,
        min_token_length: int = 2,
    ) -> None:
        self.stop_filter = StopFilter(stopwords)
        self.stemmer: Stemmer = stemmer if stemmer is not None else SuffixStripStemmer()
        self.pipeline = AnalyzerPipeline(
            CharacterClassTokenizer(strip_pattern),
            [LowercaseFilter(), MinLengthFilter(min_token_length), self.stop_filter, StemFilter(self.stemmer)],
        )

    def __call__(self, text: str) -> list[Token]:
        if not text:
            return []
        return self.pipeline(text)

    def terms(self, text: str) -> list[str]:
        return [token.text for token in self(text)]

    def stem(self, word: str) -> str:
        return self.stemmer(word)

    def is_stopword(self, word: str) -> bool:
        return word.lower() in self.stop_filter.stopwords


class KeywordAnalyzer:
    """Analyzer that treats the entire (lowercased) input as a single token."""

    def __call__(self, text: str) -> list[Token]:
        normalized = fold_case(text.strip())
        if not normalized:
            return []
        return [Token(text=normalized, position=0, start_char=0, end_char=len(text))]

    def terms(self, text: str) -> list[str]:
        return [token.text for token in self(text)]

    def stem(self, word: str) -> str:
        return word

    def is_stopword(self, word: str) -> bool:
        return False


_ANALYZER_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "default": lambda: StandardAnalyzer(),
    "turkish": lambda: StandardAnalyzer(),
    "english": lambda: StandardAnalyzer(stemmer=SuffixStripStemmer(ENGLISH_SUFFIXES, min_stem_length=2)),
    "simple": lambda: StandardAnalyzer(stemmer=identity_stemmer),
    "keyword": lambda: KeywordAnalyzer(),
}


def register_analyzer(name: str, factory: Callable[[], Analyzer]) -> None:
    """Make an analyzer available to ``get_analyzer`` under ``name``."""

    _ANALYZER_FACTORIES[name.lower()] = factory


def get_analyzer(name: str | None = None, *, stopwords: Sequence[str] | None = None) -> Analyzer:
    """Return analyzer by name, defaulting to the standard (Turkish-stemming) analyzer.

    ``stopwords`` overrides the stopword set for the standard analyzer family.
    """

    normalized = (name or "default").lower()
    if normalized not in _ANALYZER_FACTORIES:
        msg = f"Unknown analyzer '{name}'. Available: {sorted(_ANALYZER_FACTORIES)}"
        raise ValueError(msg)
    analyzer = _ANALYZER_FACTORIES[normalized]()
    if stopwords is not None and isinstance(analyzer, StandardAnalyzer):
        analyzer.stop_filter.stopwords = frozenset(word.lower() for word in stopwords)
    return analyzer
