"""TF-IDF relevance scoring with field boosts, phrase bonuses and recency."""

from __future__ import annotations

from datetime import datetime, timezone

from record_search.domain.search import Explanation, ExplanationDetail, FieldBoosts, SearchResult
from record_search.search.inverted_index import SearchIndex
from record_search.search.query_parser import ParsedQuery
from record_search.search.retriever import Candidates
from record_search.search.stats import calculate_idf, recency_multiplier, term_frequency


# Fuzzy match scores are discounted to prefer exact matches
FUZZY_DISCOUNT = 0.8
TITLE_PHRASE_BONUS = 10.0
CONTENT_PHRASE_BONUS = 5.0
MATCH_ALL_SCORE = 1.0


class TfIdfScorer:
    """Score candidate documents for a parsed query."""

    def __init__(
        self,
        index: SearchIndex,
        boosts: FieldBoosts | None = None,
        *,
        fuzzy_discount: float = FUZZY_DISCOUNT,
        now: datetime | None = None,
    ) -> None:
        self.index = index
        self.boosts = boosts or FieldBoosts()
        self.fuzzy_discount = fuzzy_discount
        self.now = now or datetime.now(timezone.utc)
        self._idf_cache: dict[str, float] = {}

    def score(self, query: ParsedQuery, candidates: Candidates) -> list[SearchResult]:
        """Return results with a positive score, best first (ties by document id)."""

        results: list[SearchResult] = []
        terms = query.scoring_terms
        for doc_id in candidates.doc_ids:
            document = self.index.documents.get(doc_id)
            if document is None:
                continue

            details: list[ExplanationDetail] = []
            score = 0.0
            if query.is_match_all:
                score += MATCH_ALL_SCORE
                details.append(ExplanationDetail(value=MATCH_ALL_SCORE, description="match all documents"))

            for term in terms:
                weight = self._term_weight(doc_id, term)
                if weight > 0:
                    details.append(ExplanationDetail(value=weight, description=f"tf-idf weight of '{term}'"))
                    score += weight
                    continue
                fuzzy_weight, fuzzy_term = self._best_fuzzy_weight(doc_id, candidates.fuzzy_expansions.get(term, ()))
                if fuzzy_weight > 0:
                    details.append(
                        ExplanationDetail(value=fuzzy_weight, description=f"fuzzy weight of '{fuzzy_term}' for '{term}'")
                    )
                    score += fuzzy_weight

            title_lower = document.title.lower()
            content_lower = document.content.lower()
            for phrase in query.phrases:
                # Adjacency can hold across dropped stopwords where the literal text differs.
                phrase_weight = sum(self._term_weight(doc_id, term) for term in dict.fromkeys(phrase.terms))
                if phrase_weight > 0:
                    details.append(
                        ExplanationDetail(value=phrase_weight, description=f"tf-idf weight of phrase '{phrase.text}'")
                    )
                    score += phrase_weight
                needle = phrase.text.lower()
                if needle and needle in title_lower:
                    bonus = TITLE_PHRASE_BONUS * self.boosts.title
                    details.append(ExplanationDetail(value=bonus, description=f"phrase '{phrase.text}' in title"))
                    score += bonus
                if needle and needle in content_lower:
                    bonus = CONTENT_PHRASE_BONUS * self.boosts.content
                    details.append(ExplanationDetail(value=bonus, description=f"phrase '{phrase.text}' in content"))
                    score += bonus

            multiplier = recency_multiplier(document.updated_at, self.now)
            score *= multiplier
            details.append(ExplanationDetail(value=multiplier, description="recency multiplier"))

            if score <= 0:
                continue
            results.append(
                SearchResult(
                    document=document,
                    score=score,
                    explanation=Explanation(
                        value=score,
                        description=f"Score for document {doc_id}",
                        details=details,
                    ),
                )
            )

        results.sort(key=lambda result: (-result.score, result.document.id))
        return results

    def _idf(self, term: str) -> float:
        idf = self._idf_cache.get(term)
        if idf is None:
            idf = calculate_idf(self.index.document_frequency(term), self.index.document_count)
            self._idf_cache[term] = idf
        return idf

    def _term_weight(self, doc_id: str, term: str) -> float:
        idf = self._idf(term)
        if idf <= 0:
            return 0.0
        weighted_tf = (
            term_frequency(term, self.index.field_terms(doc_id, "title")) * self.boosts.title
            + term_frequency(term, self.index.field_terms(doc_id, "content")) * self.boosts.content
            + term_frequency(term, self.index.field_terms(doc_id, "tags")) * self.boosts.tags
        )
        return weighted_tf * idf

    def _best_fuzzy_weight(self, doc_id: str, expansions) -> tuple[float, str]:
        best_weight, best_term = 0.0, ""
        for candidate, _distance in expansions:
            weight = self._term_weight(doc_id, candidate) * self.fuzzy_discount
            if weight > best_weight:
                best_weight, best_term = weight, candidate
        return best_weight, best_term
