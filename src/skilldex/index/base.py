"""Search-index collaborator contract."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from skilldex.models.index import UpsertResult


@dataclass
class SearchParams:
    """Parameters of one filtered, scored full-text query."""

    q: str
    query_by: str = "content,name,description"
    query_by_weights: str | None = None
    filter_by: str | None = None
    sort_by: str | None = None
    per_page: int = 10
    page: int = 1
    num_typos: int = 1
    prioritize_exact_match: bool = True
    facet_by: str | None = None

    def to_query(self) -> dict[str, Any]:
        """Render as HTTP query parameters, omitting unset values."""
        params: dict[str, Any] = {
            "q": self.q,
            "query_by": self.query_by,
            "per_page": self.per_page,
            "page": self.page,
            "num_typos": self.num_typos,
            "prioritize_exact_match": str(self.prioritize_exact_match).lower(),
        }
        for key in ("query_by_weights", "filter_by", "sort_by", "facet_by"):
            value = getattr(self, key)
            if value:
                params[key] = value
        return params


@dataclass
class SearchHit:
    document: dict[str, Any]
    score: float = 0.0


@dataclass
class SearchResponse:
    found: int = 0
    hits: list[SearchHit] = field(default_factory=list)
    facet_counts: dict[str, dict[str, int]] = field(default_factory=dict)


class SearchIndex(ABC):
    """
    External search engine holding indexed documents.

    Implementations raise CollectionNotFoundError when the collection does
    not exist yet, DocumentNotFoundError for a missing point lookup, and
    SearchIndexError for everything else.
    """

    @abstractmethod
    async def ensure_collection(self):
        """Create the collection if it does not exist."""
        pass

    @abstractmethod
    async def drop_collection(self):
        """Delete the collection and every document in it."""
        pass

    @abstractmethod
    async def upsert(self, documents: list[dict[str, Any]]) -> UpsertResult:
        """Create or replace documents by id, reporting per-document outcomes."""
        pass

    @abstractmethod
    async def delete_by_filter(self, filter_by: str) -> int:
        """Delete documents matching a filter expression; return the count."""
        pass

    @abstractmethod
    async def retrieve(self, document_id: str) -> dict[str, Any]:
        """Fetch one document by id."""
        pass

    @abstractmethod
    async def search(self, params: SearchParams) -> SearchResponse:
        """Run a filtered, scored query."""
        pass

    async def close(self):
        """Release network resources."""
        return None
