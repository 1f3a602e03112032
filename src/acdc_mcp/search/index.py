"""In-memory field-boosted BM25 index with stemming and fuzzy matching."""

from __future__ import annotations

import logging
import math
import threading
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from acdc_mcp.cancellation import raise_if_cancelled
from acdc_mcp.resources.models import Document
from acdc_mcp.search.analysis import Token, query_terms, stem, tokenize
from acdc_mcp.search.snippets import build_snippet

logger = logging.getLogger(__name__)

BM25_K1 = 1.2
BM25_B = 0.75
FUZZY_MIN_LENGTH = 3
FUZZY_MAX_DISTANCE = 1
FUZZY_WEIGHT = 0.5
DEFAULT_MAX_RESULTS = 10

NAME_FIELD = "name"
CONTENT_FIELD = "content"
KEYWORDS_FIELD = "keywords"


class IndexClosedError(RuntimeError):
    """Raised when the index is used after close()."""

    def __init__(self) -> None:
        super().__init__("search index is closed")


@dataclass(slots=True, frozen=True)
class SearchSettings:
    """Result cap and per-field boosts."""

    max_results: int = DEFAULT_MAX_RESULTS
    name_boost: float = 2.0
    content_boost: float = 1.0
    keywords_boost: float = 3.0


@dataclass(slots=True, frozen=True)
class SearchOptions:
    """Per-query options."""

    source: str | None = None
    limit: int | None = None


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Single ranked hit."""

    name: str
    uri: str
    snippet: str
    source: str
    score: float

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "uri": self.uri,
            "snippet": self.snippet,
            "source": self.source,
            "score": self.score,
        }


@dataclass(slots=True)
class _FieldIndex:
    boost: float
    postings: dict[str, dict[int, int]] = field(default_factory=dict)
    lengths: dict[int, int] = field(default_factory=dict)
    total_length: int = 0


@dataclass(slots=True, frozen=True)
class _AnalyzedDocument:
    document: Document
    content_tokens: tuple[Token, ...]
    field_tokens: tuple[tuple[str, tuple[Token, ...]], ...]


class SearchIndex:
    """Thread-safe in-memory index built once from a document stream."""

    def __init__(self, settings: SearchSettings | None = None) -> None:
        self._settings = settings or SearchSettings()
        self._lock = threading.RLock()
        self._closed = False
        self._documents: list[_AnalyzedDocument] = []
        self._fields = self._empty_fields()
        self._surface_stems: dict[str, str] = {}
        self._surfaces: list[str] = []

    @property
    def settings(self) -> SearchSettings:
        return self._settings

    @property
    def document_count(self) -> int:
        with self._lock:
            return len(self._documents)

    @property
    def closed(self) -> bool:
        return self._closed

    def index(self, documents: Iterable[Document], cancel: threading.Event | None = None) -> int:
        """Consume documents and commit each one atomically.

        Cancellation between documents raises OperationCancelledError; every
        document committed before that stays searchable.
        """
        count = 0
        raise_if_cancelled(cancel, "indexing")
        for document in documents:
            raise_if_cancelled(cancel, "indexing")
            analyzed = _analyze(document)
            with self._lock:
                self._ensure_open()
                self._commit(analyzed)
            count += 1
        logger.info("Indexed %d documents", count)
        return count

    def search(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """Return ranked results by descending score, ties in ingestion order."""
        options = options or SearchOptions()
        limit = self._effective_limit(options.limit)
        with self._lock:
            self._ensure_open()
            weights = self._expand_query(query)
            if not weights or not self._documents:
                return []
            scores = self._score(weights, options.source)
            ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))[:limit]
            matched = frozenset(weights)
            return [self._result(doc_id, score, matched) for doc_id, score in ranked]

    def close(self) -> None:
        """Release index memory. Later calls are no-ops."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._documents = []
            self._fields = self._empty_fields()
            self._surface_stems = {}
            self._surfaces = []
        logger.debug("Search index closed")

    def _empty_fields(self) -> dict[str, _FieldIndex]:
        return {
            NAME_FIELD: _FieldIndex(boost=self._settings.name_boost),
            CONTENT_FIELD: _FieldIndex(boost=self._settings.content_boost),
            KEYWORDS_FIELD: _FieldIndex(boost=self._settings.keywords_boost),
        }

    def _ensure_open(self) -> None:
        if self._closed:
            raise IndexClosedError()

    def _effective_limit(self, limit: int | None) -> int:
        if limit is None:
            return self._settings.max_results
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise ValueError("limit must be a positive integer")
        return min(limit, self._settings.max_results)

    def _commit(self, analyzed: _AnalyzedDocument) -> None:
        doc_id = len(self._documents)
        self._documents.append(analyzed)
        for field_name, tokens in analyzed.field_tokens:
            field_index = self._fields[field_name]
            for term_stem, frequency in Counter(token.stem for token in tokens).items():
                field_index.postings.setdefault(term_stem, {})[doc_id] = frequency
            field_index.lengths[doc_id] = len(tokens)
            field_index.total_length += len(tokens)
            for token in tokens:
                if token.term not in self._surface_stems:
                    self._surface_stems[token.term] = token.stem
                    self._surfaces.append(token.term)

    def _expand_query(self, query: str) -> dict[str, float]:
        terms = query_terms(query)
        weights: dict[str, float] = {stem(term): 1.0 for term in terms}
        for term in terms:
            if len(term) < FUZZY_MIN_LENGTH:
                continue
            for surface, _distance, _position in process.extract(
                term,
                self._surfaces,
                scorer=Levenshtein.distance,
                score_cutoff=FUZZY_MAX_DISTANCE,
                limit=None,
            ):
                weights.setdefault(self._surface_stems[surface], FUZZY_WEIGHT)
        return weights

    def _score(self, weights: dict[str, float], source: str | None) -> dict[int, float]:
        total_docs = len(self._documents)
        scores: dict[int, float] = {}
        for term_stem in sorted(weights):
            weight = weights[term_stem]
            for field_index in self._fields.values():
                postings = field_index.postings.get(term_stem)
                if not postings:
                    continue
                avgdl = field_index.total_length / total_docs
                if avgdl <= 0:
                    continue
                n_qi = len(postings)
                idf = math.log(1.0 + ((total_docs - n_qi + 0.5) / (n_qi + 0.5)))
                for doc_id, tf in postings.items():
                    if source is not None and self._documents[doc_id].document.source != source:
                        continue
                    doc_len = field_index.lengths[doc_id]
                    denom = tf + BM25_K1 * (1.0 - BM25_B + BM25_B * (doc_len / avgdl))
                    contribution = idf * ((tf * (BM25_K1 + 1.0)) / denom)
                    scores[doc_id] = scores.get(doc_id, 0.0) + (
                        field_index.boost * weight * contribution
                    )
        return scores

    def _result(self, doc_id: int, score: float, matched: frozenset[str]) -> SearchResult:
        analyzed = self._documents[doc_id]
        document = analyzed.document
        return SearchResult(
            name=document.name,
            uri=document.uri,
            snippet=build_snippet(document.content, analyzed.content_tokens, matched),
            source=document.source,
            score=score,
        )


def _analyze(document: Document) -> _AnalyzedDocument:
    content_tokens = tuple(tokenize(document.content))
    keyword_tokens: list[Token] = []
    for keyword in document.keywords:
        keyword_tokens.extend(tokenize(keyword))
    return _AnalyzedDocument(
        document=document,
        content_tokens=content_tokens,
        field_tokens=(
            (NAME_FIELD, tuple(tokenize(document.name))),
            (CONTENT_FIELD, content_tokens),
            (KEYWORDS_FIELD, tuple(keyword_tokens)),
        ),
    )
