"""Search index package."""

from skilldex.config import Settings, get_settings
from skilldex.index.base import SearchHit, SearchIndex, SearchParams, SearchResponse
from skilldex.index.documents import PUBLIC_SCOPE, build_documents
from skilldex.index.memory import InMemoryIndex
from skilldex.index.schema import make_document_id, resource_uri
from skilldex.index.store import ResourceStore
from skilldex.index.typesense import TypesenseIndex


def create_index(settings: Settings | None = None) -> SearchIndex:
    """Build the configured index backend."""
    settings = settings or get_settings()
    if settings.index_backend == "typesense":
        return TypesenseIndex(
            base_url=settings.typesense_url,
            api_key=settings.typesense_api_key,
            collection=settings.collection_name,
            timeout=settings.typesense_timeout_seconds,
        )
    return InMemoryIndex()


__all__ = [
    "InMemoryIndex",
    "PUBLIC_SCOPE",
    "ResourceStore",
    "SearchHit",
    "SearchIndex",
    "SearchParams",
    "SearchResponse",
    "TypesenseIndex",
    "build_documents",
    "create_index",
    "make_document_id",
    "resource_uri",
]
