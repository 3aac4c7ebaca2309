"""Parse raw query strings into terms, phrases, operators and a boolean tree.

Grammar (everything else is plain text):

- ``"quoted text"`` is a phrase whose tokens must be adjacent
- ``+word`` / ``AND word`` marks a required term
- ``-word`` / ``NOT word`` marks an excluded term
- ``OR word`` marks an optional term

Required clauses are intersected; without any, the optional clauses (plain
terms, phrases, ``OR`` terms) are unioned. Excluded clauses are subtracted.
A query with no text at all matches every document.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re
from typing import Union

from record_search.search.analyzers import Analyzer
from record_search.search.errors import QuerySyntaxError


_PHRASE_PATTERN = re.compile(r'"([^"]*)"')
_KEYWORD_OPERATORS = {"AND", "OR", "NOT"}


class OperatorType(str, Enum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


@dataclass(frozen=True)
class QueryOperator:
    type: OperatorType
    term: str


@dataclass(frozen=True)
class TermNode:
    term: str


@dataclass(frozen=True)
class PhraseNode:
    text: str
    terms: tuple[str, ...]


@dataclass(frozen=True)
class MatchAllNode:
    pass


@dataclass(frozen=True)
class MatchNoneNode:
    pass


@dataclass(frozen=True)
class AndNode:
    children: tuple[QueryNode, ...]


@dataclass(frozen=True)
class OrNode:
    children: tuple[QueryNode, ...]


@dataclass(frozen=True)
class NotNode:
    child: QueryNode


QueryNode = Union[TermNode, PhraseNode, MatchAllNode, MatchNoneNode, AndNode, OrNode, NotNode]


@dataclass(frozen=True)
class ParsedQuery:
    """Structured form of a raw query string."""

    raw: str
    terms: tuple[str, ...]
    phrases: tuple[PhraseNode, ...]
    operators: tuple[QueryOperator, ...]
    expression: QueryNode

    @property
    def scoring_terms(self) -> tuple[str, ...]:
        """Plain terms plus required and optional operator terms, without duplicates."""
        ordered = list(self.terms)
        ordered.extend(op.term for op in self.operators if op.type is not OperatorType.NOT)
        return tuple(dict.fromkeys(ordered))

    @property
    def excluded_terms(self) -> tuple[str, ...]:
        return tuple(op.term for op in self.operators if op.type is OperatorType.NOT)

    @property
    def is_match_all(self) -> bool:
        """True when no positive clause constrains the query (exclusions may still apply)."""
        expression = self.expression
        if isinstance(expression, AndNode):
            expression = expression.children[0]
        return isinstance(expression, MatchAllNode)


class QueryParser:
    """Turns raw strings into ``ParsedQuery`` objects using an index's analyzer."""

    def __init__(self, analyzer: Analyzer) -> None:
        self.analyzer = analyzer

    def parse(self, raw: str) -> ParsedQuery:
        if raw.count('"') % 2:
            raise QuerySyntaxError("Unbalanced quote in query")

        phrases: list[PhraseNode] = []
        for text in _PHRASE_PATTERN.findall(raw):
            terms = tuple(self.analyzer.terms(text))
            if terms:
                phrases.append(PhraseNode(text=text.strip(), terms=terms))
        remaining = _PHRASE_PATTERN.sub(" ", raw)

        plain_words, operators = self._extract_operators(remaining)
        plain_text = " ".join(plain_words)
        terms = tuple(dict.fromkeys(self.analyzer.terms(plain_text)))

        expression = self._build_expression(
            terms=terms,
            phrases=phrases,
            operators=operators,
            has_text=bool(plain_text.strip()) or bool(_PHRASE_PATTERN.search(raw)),
        )
        return ParsedQuery(
            raw=raw,
            terms=terms,
            phrases=tuple(phrases),
            operators=tuple(operators),
            expression=expression,
        )

    def _extract_operators(self, text: str) -> tuple[list[str], list[QueryOperator]]:
        words = text.split()
        plain: list[str] = []
        operators: list[QueryOperator] = []
        idx = 0
        while idx < len(words):
            word = words[idx]
            if word in _KEYWORD_OPERATORS or word in {"+", "-"}:
                if idx + 1 >= len(words):
                    raise QuerySyntaxError(f"Operator '{word}' has no operand")
                operand = words[idx + 1].lstrip("+-")
                idx += 2
            elif len(word) > 1 and word[0] in "+-":
                operand = word[1:]
                idx += 1
            else:
                plain.append(word)
                idx += 1
                continue

            op_type = _operator_type(word)
            operators.extend(QueryOperator(type=op_type, term=term) for term in self.analyzer.terms(operand))
        return plain, operators

    @staticmethod
    def _build_expression(
        *,
        terms: tuple[str, ...],
        phrases: list[PhraseNode],
        operators: list[QueryOperator],
        has_text: bool,
    ) -> QueryNode:
        required = [TermNode(op.term) for op in operators if op.type is OperatorType.AND]
        optional: list[QueryNode] = [TermNode(term) for term in terms]
        optional.extend(phrases)
        optional.extend(TermNode(op.term) for op in operators if op.type is OperatorType.OR)
        excluded = [NotNode(TermNode(op.term)) for op in operators if op.type is OperatorType.NOT]

        positive: QueryNode
        if required:
            positive = AndNode(tuple(required))
        elif optional:
            positive = OrNode(tuple(optional))
        elif has_text:
            # Text that analyzes to nothing (only stopwords or punctuation).
            positive = MatchNoneNode()
        else:
            positive = MatchAllNode()

        if not excluded:
            return positive
        return AndNode((positive, *excluded))


def _operator_type(word: str) -> OperatorType:
    if word == "AND" or word.startswith("+"):
        return OperatorType.AND
    if word == "NOT" or word.startswith("-"):
        return OperatorType.NOT
    return OperatorType.OR
