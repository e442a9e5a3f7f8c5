"""Ingestion package."""

from skilldex.ingestion.formats import ContentFormat, MarkdownFormat
from skilldex.ingestion.pipeline import (
    ContentPipeline,
    PipelineConfig,
    build_document_path,
    generate_source_id,
)
from skilldex.ingestion.sources import (
    ContentSource,
    GitHubIssuesSource,
    GitHubSource,
    LocalSource,
)
from skilldex.ingestion.tree import build_content, flatten_resources

__all__ = [
    "ContentFormat",
    "ContentPipeline",
    "ContentSource",
    "GitHubIssuesSource",
    "GitHubSource",
    "LocalSource",
    "MarkdownFormat",
    "PipelineConfig",
    "build_content",
    "build_document_path",
    "flatten_resources",
    "generate_source_id",
]
