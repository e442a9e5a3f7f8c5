"""In-process search index scored with rank_bm25."""

import copy
import re
from typing import Any

import structlog
from rank_bm25 import BM25Okapi

from skilldex.exceptions import CollectionNotFoundError, DocumentNotFoundError
from skilldex.index.base import SearchHit, SearchIndex, SearchParams, SearchResponse
from skilldex.index.filters import matches_filter, parse_filter
from skilldex.models.index import UpsertResult

logger = structlog.get_logger()

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> list[str]:
    """Lowercase and split on non-alphanumeric characters."""
    return TOKEN_PATTERN.findall((text or "").lower())


class InMemoryIndex(SearchIndex):
    """
    Search index kept in a dict.

    Used for local development and tests. Matching is token presence in any
    query_by field; ranking is a weighted sum of per-field BM25 scores.
    Typo tolerance is not modelled.
    """

    def __init__(self, k1: float = 1.5, b: float = 0.75):
        self.k1 = k1
        self.b = b
        self._documents: dict[str, dict[str, Any]] | None = None

    @property
    def exists(self) -> bool:
        return self._documents is not None

    def _require(self) -> dict[str, dict[str, Any]]:
        if self._documents is None:
            raise CollectionNotFoundError("Collection not found", status_code=404)
        return self._documents

    async def ensure_collection(self):
        if self._documents is None:
            self._documents = {}
            logger.info("collection_created", backend="memory")

    async def drop_collection(self):
        self._require()
        self._documents = None

    async def upsert(self, documents: list[dict[str, Any]]) -> UpsertResult:
        store = self._require()
        result = UpsertResult()
        for document in documents:
            if not document.get("id"):
                result.failed += 1
                result.errors.append("Document is missing an id")
                continue
            store[document["id"]] = copy.deepcopy(document)
            result.success += 1
        return result

    async def delete_by_filter(self, filter_by: str) -> int:
        store = self._require()
        clauses = parse_filter(filter_by)
        doomed = [doc_id for doc_id, doc in store.items() if matches_filter(doc, clauses)]
        for doc_id in doomed:
            del store[doc_id]
        return len(doomed)

    async def retrieve(self, document_id: str) -> dict[str, Any]:
        store = self._require()
        if document_id not in store:
            raise DocumentNotFoundError(f"Could not find a document with id: {document_id}", status_code=404)
        return copy.deepcopy(store[document_id])

    async def search(self, params: SearchParams) -> SearchResponse:
        store = self._require()
        clauses = parse_filter(params.filter_by)
        candidates = [doc for doc in store.values() if matches_filter(doc, clauses)]

        if params.q.strip() == "*":
            scored = [(doc, 0.0) for doc in candidates]
        else:
            scored = self._score(candidates, params)

        scored = _sort(scored, params.sort_by)

        facet_counts: dict[str, dict[str, int]] = {}
        if params.facet_by:
            for facet in (f.strip() for f in params.facet_by.split(",")):
                counts: dict[str, int] = {}
                for doc, _ in scored:
                    value = doc.get(facet)
                    for v in value if isinstance(value, list) else [value]:
                        if v is not None:
                            counts[str(v)] = counts.get(str(v), 0) + 1
                facet_counts[facet] = counts

        start = (max(params.page, 1) - 1) * params.per_page
        page = scored[start:start + params.per_page]
        return SearchResponse(
            found=len(scored),
            hits=[SearchHit(document=copy.deepcopy(doc), score=score) for doc, score in page],
            facet_counts=facet_counts,
        )

    def _score(
        self, candidates: list[dict[str, Any]], params: SearchParams
    ) -> list[tuple[dict[str, Any], float]]:
        query_tokens = tokenize(params.q)
        if not candidates or not query_tokens:
            return []

        fields = [f.strip() for f in params.query_by.split(",") if f.strip()]
        weights = [1.0] * len(fields)
        if params.query_by_weights:
            parsed = [float(w) for w in params.query_by_weights.split(",")]
            weights = (parsed + [1.0] * len(fields))[: len(fields)]

        query_set = set(query_tokens)
        totals = [0.0] * len(candidates)
        matched = [False] * len(candidates)

        for field_name, weight in zip(fields, weights):
            corpus = [tokenize(str(doc.get(field_name, ""))) for doc in candidates]
            for i, tokens in enumerate(corpus):
                if query_set.intersection(tokens):
                    matched[i] = True
            # BM25Okapi divides by corpus length; skip fields with no text at all
            if not any(corpus):
                continue
            bm25 = BM25Okapi(corpus, k1=self.k1, b=self.b)
            for i, score in enumerate(bm25.get_scores(query_tokens)):
                totals[i] += weight * float(score)

        return [(doc, totals[i]) for i, doc in enumerate(candidates) if matched[i]]


def _sort(
    scored: list[tuple[dict[str, Any], float]], sort_by: str | None
) -> list[tuple[dict[str, Any], float]]:
    """Apply "field:dir,..." ordering; "_text_match" is the query score."""
    result = list(scored)
    if not sort_by:
        return sorted(result, key=lambda item: item[1], reverse=True)

    # Stable sorts applied from the least to the most significant key
    for spec in reversed([s.strip() for s in sort_by.split(",") if s.strip()]):
        field_name, _, direction = spec.partition(":")
        reverse = direction.lower() != "asc"
        if field_name == "_text_match":
            result.sort(key=lambda item: item[1], reverse=reverse)
        else:
            result.sort(key=lambda item: item[0].get(field_name) or 0, reverse=reverse)
    return result
