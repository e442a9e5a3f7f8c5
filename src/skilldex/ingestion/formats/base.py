"""Abstract format adapter interface."""

from abc import ABC, abstractmethod

from skilldex.models.resource import RawContent, ResourceNode


class ContentFormat(ABC):
    """
    Knows how to interpret raw content of a media type.

    Parses content into a resource tree. Never fetches anything.
    """

    name: str = "format"

    @abstractmethod
    def can_handle(self, content_type: str) -> bool:
        """Return True if this format can parse the content type."""
        pass

    @abstractmethod
    def parse(self, content: RawContent, base_path: str) -> list[ResourceNode]:
        """
        Parse raw content into resource nodes.

        Args:
            content: Raw content fetched by a source adapter
            base_path: Path every produced node is rooted under

        Returns:
            Top-level resource nodes (children nested)
        """
        pass
