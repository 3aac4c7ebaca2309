"""Candidate retrieval: evaluate a parsed query tree against an index."""

from __future__ import annotations

from dataclasses import dataclass, field

from record_search.search.fuzzy import DEFAULT_MAX_DISTANCE, Deadline
from record_search.search.inverted_index import SearchIndex
from record_search.search.phrase import has_consecutive_positions
from record_search.search.query_parser import (
    AndNode,
    MatchAllNode,
    MatchNoneNode,
    NotNode,
    OrNode,
    ParsedQuery,
    PhraseNode,
    QueryNode,
    TermNode,
)


@dataclass
class Candidates:
    """Documents that can match plus the fuzzy expansions used to find them."""

    doc_ids: set[str]
    fuzzy_expansions: dict[str, list[tuple[str, int]]] = field(default_factory=dict)


class CandidateRetriever:
    """Turns a ``ParsedQuery`` into a candidate id set via set algebra."""

    def __init__(
        self,
        index: SearchIndex,
        *,
        fuzzy: bool = False,
        max_edit_distance: int = DEFAULT_MAX_DISTANCE,
        deadline: Deadline | None = None,
    ) -> None:
        self.index = index
        self.fuzzy = fuzzy
        self.max_edit_distance = max_edit_distance
        self.deadline = deadline
        self._expansions: dict[str, list[tuple[str, int]]] = {}

    def retrieve(self, query: ParsedQuery) -> Candidates:
        self._expansions = {}
        doc_ids = self._evaluate(query.expression)
        return Candidates(doc_ids=doc_ids, fuzzy_expansions=dict(self._expansions))

    def _evaluate(self, node: QueryNode) -> set[str]:
        if isinstance(node, TermNode):
            return self._match_term(node.term)
        if isinstance(node, PhraseNode):
            return self._match_phrase(node)
        if isinstance(node, MatchAllNode):
            return self.index.all_doc_ids()
        if isinstance(node, MatchNoneNode):
            return set()
        if isinstance(node, OrNode):
            result: set[str] = set()
            for child in node.children:
                result |= self._evaluate(child)
            return result
        if isinstance(node, AndNode):
            return self._evaluate_and(node)
        if isinstance(node, NotNode):
            # A bare NOT only makes sense relative to everything else.
            return self.index.all_doc_ids() - self._evaluate(node.child)
        raise TypeError(f"Unsupported query node: {node!r}")

    def _evaluate_and(self, node: AndNode) -> set[str]:
        positives = [child for child in node.children if not isinstance(child, NotNode)]
        negatives = [child for child in node.children if isinstance(child, NotNode)]

        result: set[str] | None = None
        for child in positives:
            matched = self._evaluate(child)
            result = matched if result is None else result & matched
            if not result:
                return set()
        if result is None:
            result = self.index.all_doc_ids()
        for child in negatives:
            result -= self._evaluate(child.child)
        return result

    def _match_term(self, term: str) -> set[str]:
        matched = set(self.index.doc_ids_for(term))
        if not self.fuzzy:
            return matched
        expansions = self._expansions.get(term)
        if expansions is None:
            expansions = [
                (candidate, distance)
                for candidate, distance in self.index.vocabulary.search(
                    term, self.max_edit_distance, deadline=self.deadline
                )
                if distance > 0
            ]
            self._expansions[term] = expansions
        for candidate, _distance in expansions:
            matched |= self.index.doc_ids_for(candidate)
        return matched

    def _match_phrase(self, phrase: PhraseNode) -> set[str]:
        matched = set(self.index.doc_ids_for(phrase.terms[0]))
        for term in phrase.terms[1:]:
            if not matched:
                return set()
            matched &= self.index.doc_ids_for(term)
        return {
            doc_id
            for doc_id in matched
            if has_consecutive_positions([self.index.term_positions(term, doc_id) for term in phrase.terms])
        }
