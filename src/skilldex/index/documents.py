"""Conversion of resource trees into index documents."""

import time

from skilldex.config import Settings, get_settings
from skilldex.ingestion.tree import flatten_resources
from skilldex.index.schema import make_document_id, resource_uri
from skilldex.models.index import IndexedDocument
from skilldex.models.resource import ResourceNode
from skilldex.utils.text import truncate_text

# Synthetic scope held by every caller and carried by unrestricted documents.
PUBLIC_SCOPE = "public"


def build_documents(
    domain: str,
    source_id: str,
    resources: list[ResourceNode],
    inherited_scopes: list[str] | None = None,
    generation: str = "",
    indexed_at: int | None = None,
    settings: Settings | None = None,
) -> list[IndexedDocument]:
    """
    Flatten resource trees into index documents for one source.

    Args:
        domain: Owning skill name
        source_id: Identifier of the producing pipeline
        resources: Top-level nodes returned by the pipeline
        inherited_scopes: Skill scopes merged with pipeline scopes; a node's
            own metadata.scopes replaces them
        generation: Sync generation tag
        indexed_at: Ingestion timestamp in epoch ms (default: now)
        settings: Supplies description length and default quality score

    Returns:
        One document per node, parents first
    """
    settings = settings or get_settings()
    indexed_at = indexed_at if indexed_at is not None else int(time.time() * 1000)
    inherited = list(dict.fromkeys(inherited_scopes or []))

    documents = []
    for resource in flatten_resources(resources):
        path = resource.path.lstrip("/")
        uri = resource_uri(domain, path)
        meta = resource.metadata

        scopes = meta.scopes if meta.scopes is not None else inherited
        unrestricted = len(scopes) == 0

        documents.append(
            IndexedDocument(
                id=make_document_id(source_id, uri),
                uri=uri,
                domain=domain,
                path=path,
                source_id=source_id,
                name=resource.name,
                content=resource.content,
                description=truncate_text(
                    resource.description or resource.content,
                    settings.description_max_chars,
                ) or "",
                scopes=[PUBLIC_SCOPE] if unrestricted else scopes,
                is_unrestricted=unrestricted,
                content_size=len(resource.content),
                child_count=resource.child_count,
                resource_type=meta.resource_type or "resource",
                path_segment=path.split("/")[0] if path else "",
                quality_score=(
                    meta.quality_score
                    if meta.quality_score is not None
                    else settings.default_quality_score
                ),
                unlocks=meta.unlocks or [],
                indexed_at=indexed_at,
                generation=generation,
            )
        )
    return documents
