"""Abstract source adapter interface."""

from abc import ABC, abstractmethod

from skilldex.models.resource import RawContent, RawDocument


class ContentSource(ABC):
    """
    Knows where content lives.

    Lists document handles and fetches raw content for one handle.
    Never interprets the content it returns.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the source name used in logs and source identifiers."""
        pass

    @abstractmethod
    async def list_documents(self) -> list[RawDocument]:
        """List available documents (metadata only, no content)."""
        pass

    @abstractmethod
    async def fetch_content(self, doc_id: str) -> RawContent:
        """
        Fetch raw content for one document.

        Args:
            doc_id: The id of a document returned by list_documents()

        Returns:
            RawContent ready for a format adapter
        """
        pass
