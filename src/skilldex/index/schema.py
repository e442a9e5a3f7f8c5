"""Collection schema and document identity."""

import base64

COLLECTION_FIELDS = [
    # Identity
    {"name": "uri", "type": "string"},
    {"name": "domain", "type": "string", "facet": True},
    {"name": "path", "type": "string"},
    {"name": "scopes", "type": "string[]", "optional": True},
    {"name": "is_unrestricted", "type": "bool"},
    # Source tracking
    {"name": "source_id", "type": "string", "facet": True},
    {"name": "generation", "type": "string"},
    # Searchable content
    {"name": "name", "type": "string"},
    {"name": "content", "type": "string"},
    {"name": "description", "type": "string"},
    # Ranking inputs
    {"name": "content_size", "type": "int32"},
    {"name": "child_count", "type": "int32"},
    {"name": "resource_type", "type": "string", "facet": True},
    {"name": "path_segment", "type": "string", "facet": True},
    {"name": "quality_score", "type": "int32"},
    {"name": "unlocks", "type": "string[]", "optional": True, "index": False},
    {"name": "indexed_at", "type": "int64"},
]

DEFAULT_QUERY_BY = "content,name,description"
DEFAULT_WEIGHTS = "4,2,1"
DEFAULT_SORT = "_text_match:desc,quality_score:desc,indexed_at:desc"


def collection_schema(name: str) -> dict:
    return {
        "name": name,
        "fields": COLLECTION_FIELDS,
        "default_sorting_field": "quality_score",
    }


def make_document_id(source_id: str, uri: str) -> str:
    """
    URL-safe base64 of the source id and canonical URI, without padding.

    Two sources of one skill may produce the same URI; each keeps its own
    document.
    """
    key = f"{source_id}|{uri}"
    return base64.urlsafe_b64encode(key.encode("utf-8")).decode("ascii").rstrip("=")


def resource_uri(domain: str, path: str) -> str:
    return f"{domain}://resources/{path.lstrip('/')}"
