"""Named in-memory index: document store, inverted indices and vocabulary.

One ``SearchIndex`` owns:

- ``documents``: document id -> stored ``SearchDocument`` copy
- ``inverted_index``: term -> ids of documents whose title+content contain it
- ``field_index``: field -> term -> ids (title, content, tags, type, status,
  createdBy and ``metadata.<key>``)
- ``positions``: term -> id -> token positions in the title+content stream,
  used for exact phrase matching
- ``vocabulary``: BK-tree mirror of the global terms for fuzzy lookups

No empty id set is ever left behind by ``remove_document``; ``optimize``
sweeps anything that slipped through and compacts the BK-tree.

Mutations hold the write side of the index lock. Read helpers do not lock;
callers wrap a whole query in ``with index.reading():`` so the term sets they
iterate cannot change underneath them.
"""

from __future__ import annotations

from array import array
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
import logging
import threading

from record_search.domain.model import SearchDocument
from record_search.domain.search import IndexStats
from record_search.search.analyzers import Analyzer, get_analyzer
from record_search.search.fuzzy import BKTree


logger = logging.getLogger(__name__)

_EMPTY: frozenset[str] = frozenset()


class ReadWriteLock:
    """Single-writer/multi-reader lock that prefers waiting writers.

    Not reentrant: a thread holding the read side must not acquire it again
    while a writer may be queued.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class SearchIndex:
    """A named, independently locked inverted index."""

    SCORED_FIELDS = ("title", "content", "tags")

    def __init__(self, name: str, analyzer: Analyzer | None = None) -> None:
        self.name = name
        self.analyzer: Analyzer = analyzer if analyzer is not None else get_analyzer()
        self.documents: dict[str, SearchDocument] = {}
        self.inverted_index: dict[str, set[str]] = {}
        self.field_index: dict[str, dict[str, set[str]]] = {}
        self.positions: dict[str, dict[str, array]] = {}
        self.vocabulary = BKTree()
        self.created_at = datetime.now(timezone.utc)
        self.last_updated = self.created_at
        self._doc_terms: dict[str, tuple[str, ...]] = {}
        self._doc_field_terms: dict[str, dict[str, list[str]]] = {}
        self._lock = ReadWriteLock()

    @property
    def document_count(self) -> int:
        return len(self.documents)

    @property
    def term_count(self) -> int:
        return len(self.inverted_index)

    def reading(self):
        """Context manager holding the read side of the index lock."""
        return self._lock.read()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def index_document(self, document: SearchDocument) -> bool:
        """Insert ``document``, replacing any stored version with the same id.

        Returns True when an older version was replaced.
        """
        with self._lock.write():
            replaced = self._remove(document.id)
            self._insert(document)
            self.last_updated = datetime.now(timezone.utc)
        logger.debug("Indexed document %s into %s (replaced=%s)", document.id, self.name, replaced)
        return replaced

    def remove_document(self, doc_id: str) -> bool:
        """Remove a document; returns False when it was not indexed."""
        with self._lock.write():
            removed = self._remove(doc_id)
            if removed:
                self.last_updated = datetime.now(timezone.utc)
        if removed:
            logger.debug("Removed document %s from %s", doc_id, self.name)
        return removed

    def optimize(self) -> int:
        """Drop empty term entries and compact the vocabulary tree.

        Returns the number of term entries removed.
        """
        with self._lock.write():
            removed = 0
            for term in [term for term, doc_ids in self.inverted_index.items() if not doc_ids]:
                del self.inverted_index[term]
                removed += 1
            for term in [term for term, by_doc in self.positions.items() if not by_doc]:
                del self.positions[term]
            for field_name in list(self.field_index):
                bucket = self.field_index[field_name]
                for term in [term for term, doc_ids in bucket.items() if not doc_ids]:
                    del bucket[term]
                    removed += 1
                if not bucket:
                    del self.field_index[field_name]
            self.vocabulary.rebuild(self.inverted_index)
            self.last_updated = datetime.now(timezone.utc)
        return removed

    def _insert(self, document: SearchDocument) -> None:
        doc_id = document.id
        self.documents[doc_id] = document

        # Each field starts one position past the previous one so phrases never
        # match across the title/content boundary.
        postings: dict[str, array] = {}
        offset = 0
        for text in document.searchable_fields:
            tokens = self.analyzer(text)
            for token in tokens:
                postings.setdefault(token.text, array("I")).append(offset + token.position)
            if tokens:
                offset += tokens[-1].position + 2

        for term, term_positions in postings.items():
            doc_ids = self.inverted_index.get(term)
            if doc_ids is None:
                doc_ids = self.inverted_index[term] = set()
                self.vocabulary.add(term)
            doc_ids.add(doc_id)
            self.positions.setdefault(term, {})[doc_id] = term_positions
        self._doc_terms[doc_id] = tuple(postings)

        field_terms: dict[str, list[str]] = {}
        for field_name, value in document.field_values().items():
            terms = self.analyzer.terms(value)
            field_terms[field_name] = terms
            if not terms:
                continue
            bucket = self.field_index.setdefault(field_name, {})
            for term in set(terms):
                bucket.setdefault(term, set()).add(doc_id)
        self._doc_field_terms[doc_id] = field_terms

    def _remove(self, doc_id: str) -> bool:
        if self.documents.pop(doc_id, None) is None:
            return False

        for term in self._doc_terms.pop(doc_id, ()):
            doc_ids = self.inverted_index.get(term)
            if doc_ids is not None:
                doc_ids.discard(doc_id)
                if not doc_ids:
                    del self.inverted_index[term]
                    self.vocabulary.discard(term)
            by_doc = self.positions.get(term)
            if by_doc is not None:
                by_doc.pop(doc_id, None)
                if not by_doc:
                    del self.positions[term]

        for field_name, terms in self._doc_field_terms.pop(doc_id, {}).items():
            bucket = self.field_index.get(field_name)
            if bucket is None:
                continue
            for term in set(terms):
                doc_ids = bucket.get(term)
                if doc_ids is None:
                    continue
                doc_ids.discard(doc_id)
                if not doc_ids:
                    del bucket[term]
            if not bucket:
                del self.field_index[field_name]
        return True

    # ------------------------------------------------------------------
    # Read helpers (caller holds ``reading()``)
    # ------------------------------------------------------------------

    def doc_ids_for(self, term: str) -> set[str] | frozenset[str]:
        return self.inverted_index.get(term, _EMPTY)

    def document_frequency(self, term: str) -> int:
        return len(self.inverted_index.get(term, _EMPTY))

    def term_positions(self, term: str, doc_id: str) -> Sequence[int]:
        return self.positions.get(term, {}).get(doc_id, ())

    def field_terms(self, doc_id: str, field_name: str) -> list[str]:
        return self._doc_field_terms.get(doc_id, {}).get(field_name, [])

    def all_doc_ids(self) -> set[str]:
        return set(self.documents)

    def stats(self) -> IndexStats:
        with self._lock.read():
            return IndexStats(
                name=self.name,
                document_count=self.document_count,
                term_count=self.term_count,
                last_updated=self.last_updated,
            )
