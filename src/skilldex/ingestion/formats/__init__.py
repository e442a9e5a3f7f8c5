"""Format adapters."""

from skilldex.ingestion.formats.base import ContentFormat
from skilldex.ingestion.formats.markdown import MarkdownFormat

__all__ = ["ContentFormat", "MarkdownFormat"]
