"""Resource document operations on top of a search index."""

import time
from typing import Literal

import structlog

from skilldex.exceptions import CollectionNotFoundError
from skilldex.index.base import SearchIndex, SearchParams
from skilldex.index.documents import PUBLIC_SCOPE
from skilldex.index.schema import DEFAULT_QUERY_BY, DEFAULT_SORT, DEFAULT_WEIGHTS
from skilldex.models.index import (
    IndexedDocument,
    IndexStats,
    ResourceHit,
    SourceFreshness,
    UpsertResult,
)
from skilldex.observability import INDEXED_DOCUMENTS

logger = structlog.get_logger()

SearchMode = Literal["semantic", "keyword", "hybrid"]

EXPORT_PAGE_SIZE = 250

# (num_typos, prioritize_exact_match)
MODE_PARAMS: dict[str, tuple[int, bool]] = {
    "keyword": (0, True),
    "semantic": (2, False),
    "hybrid": (1, True),
}


def scope_filter(scopes: list[str] | None) -> str:
    """Filter admitting unrestricted documents plus those of held scopes."""
    effective = [PUBLIC_SCOPE] + [s for s in (scopes or []) if s != PUBLIC_SCOPE]
    return f"scopes:=[{','.join(effective)}]"


class ResourceStore:
    """
    Index-side operations used by sync, dispatch and discovery.

    A missing collection reads as empty. Any other index failure propagates
    so the caller can isolate it at the narrowest scope.
    """

    def __init__(self, index: SearchIndex):
        self.index = index

    async def index_documents(self, documents: list[IndexedDocument]) -> UpsertResult:
        """Upsert documents, creating the collection when needed."""
        if not documents:
            return UpsertResult()

        await self.index.ensure_collection()
        result = await self.index.upsert([doc.model_dump() for doc in documents])

        INDEXED_DOCUMENTS.labels(status="success").inc(result.success)
        INDEXED_DOCUMENTS.labels(status="failed").inc(result.failed)
        if result.failed:
            logger.warning(
                "documents_failed_to_index",
                success=result.success,
                failed=result.failed,
                sample_errors=result.errors[:3],
            )
        else:
            logger.debug("documents_indexed", count=result.success)
        return result

    async def delete_source_documents(self, source_id: str) -> int:
        """Delete every document of a source."""
        return await self._delete(f"source_id:={source_id}")

    async def delete_stale_generations(self, source_id: str, generation: str) -> int:
        """Delete a source's documents written by any other generation."""
        return await self._delete(f"source_id:={source_id} && generation:!={generation}")

    async def _delete(self, filter_by: str) -> int:
        try:
            deleted = await self.index.delete_by_filter(filter_by)
        except CollectionNotFoundError:
            return 0
        logger.debug("documents_deleted", filter_by=filter_by, count=deleted)
        return deleted

    async def get_source_freshness(
        self, source_id: str, now_ms: int | None = None
    ) -> SourceFreshness | None:
        """
        Age of a source's oldest indexed document.

        Returns:
            None when the source has no indexed documents
        """
        params = SearchParams(
            q="*",
            query_by="name",
            filter_by=f"source_id:={source_id}",
            sort_by="indexed_at:asc",
            per_page=1,
        )
        try:
            response = await self.index.search(params)
        except CollectionNotFoundError:
            return None

        if not response.hits:
            return None

        oldest = int(response.hits[0].document.get("indexed_at", 0))
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        return SourceFreshness(
            source_id=source_id,
            age_ms=max(now_ms - oldest, 0),
            document_count=response.found,
        )

    async def get_document_by_uri(self, uri: str) -> IndexedDocument | None:
        """Most recently indexed document carrying this URI."""
        params = SearchParams(
            q="*",
            query_by="name",
            filter_by=f"uri:=`{uri}`",
            sort_by="indexed_at:desc",
            per_page=1,
        )
        try:
            response = await self.index.search(params)
        except CollectionNotFoundError:
            return None

        if not response.hits:
            return None
        return IndexedDocument.model_validate(response.hits[0].document)

    async def search_resources(
        self,
        query: str,
        domain: str | None = None,
        limit: int = 10,
        mode: SearchMode = "hybrid",
        query_by: str | None = None,
        weights: str | None = None,
        filter_by: str | None = None,
        scopes: list[str] | None = None,
    ) -> list[ResourceHit]:
        """
        Scored, scope-filtered search.

        Args:
            query: Free-text query ("*" matches everything)
            domain: Restrict to one skill
            limit: Maximum hits
            mode: Typo tolerance and exact-match preference
            query_by: Searched fields (default: content,name,description)
            weights: Per-field weights (default: 4,2,1)
            filter_by: Extra filter clause, e.g. a segment filter
            scopes: Caller's scopes; "public" is always added

        Returns:
            Hits in ranking order
        """
        filters = []
        if domain:
            filters.append(f"domain:=`{domain}`")
        if filter_by:
            filters.append(filter_by)
        filters.append(scope_filter(scopes))

        num_typos, exact = MODE_PARAMS[mode]
        params = SearchParams(
            q=query,
            query_by=query_by or DEFAULT_QUERY_BY,
            query_by_weights=weights or DEFAULT_WEIGHTS,
            filter_by=" && ".join(filters),
            sort_by=DEFAULT_SORT,
            per_page=limit,
            num_typos=num_typos,
            prioritize_exact_match=exact,
        )

        try:
            response = await self.index.search(params)
        except CollectionNotFoundError:
            logger.debug("collection_not_created", query=query)
            return []

        return [
            ResourceHit(
                uri=hit.document["uri"],
                domain=hit.document.get("domain", ""),
                name=hit.document.get("name", ""),
                description=hit.document.get("description", ""),
                resource_type=hit.document.get("resource_type", "resource"),
                content_size=hit.document.get("content_size", 0),
                child_count=hit.document.get("child_count", 0),
                relevance=hit.score,
            )
            for hit in response.hits
        ]

    async def export_source_documents(self, source_id: str) -> list[IndexedDocument]:
        """Page through every document of one source."""
        documents: list[IndexedDocument] = []
        page = 1
        while True:
            params = SearchParams(
                q="*",
                query_by="name",
                filter_by=f"source_id:={source_id}",
                per_page=EXPORT_PAGE_SIZE,
                page=page,
            )
            try:
                response = await self.index.search(params)
            except CollectionNotFoundError:
                return []

            documents.extend(IndexedDocument.model_validate(h.document) for h in response.hits)
            if len(response.hits) < EXPORT_PAGE_SIZE:
                return documents
            page += 1

    async def get_stats(self) -> IndexStats:
        """Document counts by domain and by source."""
        params = SearchParams(q="*", query_by="name", per_page=0, facet_by="domain,source_id")
        try:
            response = await self.index.search(params)
        except CollectionNotFoundError:
            return IndexStats()
        return IndexStats(
            total_documents=response.found,
            by_domain=response.facet_counts.get("domain", {}),
            by_source=response.facet_counts.get("source_id", {}),
        )

    async def clear_all(self):
        """Drop and recreate the collection."""
        try:
            await self.index.drop_collection()
        except CollectionNotFoundError:
            pass
        await self.index.ensure_collection()
        logger.info("collection_cleared")
