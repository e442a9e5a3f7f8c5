"""Typesense search index over its HTTP API."""

import json
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from skilldex.config import get_settings
from skilldex.exceptions import (
    CollectionNotFoundError,
    DocumentNotFoundError,
    SearchIndexError,
)
from skilldex.index.base import SearchHit, SearchIndex, SearchParams, SearchResponse
from skilldex.index.schema import collection_schema
from skilldex.models.index import UpsertResult

logger = structlog.get_logger()


class TypesenseIndex(SearchIndex):
    """
    Typesense collection accessed with httpx.

    Documents are imported as JSONL with action=upsert. A 404 on a
    collection path becomes CollectionNotFoundError; a 404 for a point
    lookup inside an existing collection becomes DocumentNotFoundError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        collection: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the Typesense index.

        Args:
            base_url: Server URL (default: SKILLDEX_TYPESENSE_URL)
            api_key: API key (default: SKILLDEX_TYPESENSE_API_KEY)
            collection: Collection name (default: SKILLDEX_COLLECTION_NAME)
            timeout: Request timeout in seconds
            client: Preconfigured client, mainly for tests
        """
        settings = get_settings()
        self.base_url = (base_url or settings.typesense_url).rstrip("/")
        self.collection = collection or settings.collection_name
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={"X-TYPESENSE-API-KEY": api_key or settings.typesense_api_key},
            timeout=timeout or settings.typesense_timeout_seconds,
        )

    @property
    def _collection_path(self) -> str:
        return f"/collections/{quote(self.collection, safe='')}"

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise SearchIndexError(f"Typesense request failed: {e}") from e

        if response.status_code == 404:
            message = _error_message(response)
            if "document" in message.lower():
                raise DocumentNotFoundError(message, status_code=404)
            raise CollectionNotFoundError(message, status_code=404)
        if response.status_code >= 400:
            raise SearchIndexError(_error_message(response), status_code=response.status_code)
        return response

    async def ensure_collection(self):
        try:
            await self._request("GET", self._collection_path)
        except CollectionNotFoundError:
            logger.info("collection_created", collection=self.collection)
            await self._request("POST", "/collections", json=collection_schema(self.collection))

    async def drop_collection(self):
        await self._request("DELETE", self._collection_path)
        logger.info("collection_dropped", collection=self.collection)

    async def upsert(self, documents: list[dict[str, Any]]) -> UpsertResult:
        if not documents:
            return UpsertResult()

        body = "\n".join(json.dumps(doc) for doc in documents)
        response = await self._request(
            "POST",
            f"{self._collection_path}/documents/import",
            params={"action": "upsert"},
            content=body.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )

        result = UpsertResult()
        for line in response.text.splitlines():
            if not line.strip():
                continue
            outcome = json.loads(line)
            if outcome.get("success"):
                result.success += 1
            else:
                result.failed += 1
                result.errors.append(outcome.get("error", "unknown error"))
        return result

    async def delete_by_filter(self, filter_by: str) -> int:
        response = await self._request(
            "DELETE",
            f"{self._collection_path}/documents",
            params={"filter_by": filter_by},
        )
        return int(response.json().get("num_deleted", 0))

    async def retrieve(self, document_id: str) -> dict[str, Any]:
        response = await self._request(
            "GET", f"{self._collection_path}/documents/{quote(document_id, safe='')}"
        )
        return response.json()

    async def search(self, params: SearchParams) -> SearchResponse:
        response = await self._request(
            "GET",
            f"{self._collection_path}/documents/search",
            params=params.to_query(),
        )
        payload = response.json()

        hits = [
            SearchHit(
                document=hit.get("document", {}),
                score=float(hit.get("text_match") or 0),
            )
            for hit in payload.get("hits", [])
        ]
        facet_counts = {
            facet["field_name"]: {c["value"]: c["count"] for c in facet.get("counts", [])}
            for facet in payload.get("facet_counts", [])
        }
        return SearchResponse(found=payload.get("found", len(hits)), hits=hits, facet_counts=facet_counts)

    async def close(self):
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message", response.text)
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
