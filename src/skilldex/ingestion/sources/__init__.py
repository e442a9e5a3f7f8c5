"""Source adapters."""

from skilldex.ingestion.sources.base import ContentSource
from skilldex.ingestion.sources.github import GitHubIssuesSource, GitHubSource
from skilldex.ingestion.sources.local import LocalSource

__all__ = [
    "ContentSource",
    "GitHubIssuesSource",
    "GitHubSource",
    "LocalSource",
]
