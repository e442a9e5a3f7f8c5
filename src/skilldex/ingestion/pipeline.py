"""Content pipeline: one source composed with ordered format adapters."""

import re
from dataclasses import dataclass, field

import structlog

from skilldex.exceptions import ConfigurationError, PipelineError
from skilldex.ingestion.formats.base import ContentFormat
from skilldex.ingestion.sources.base import ContentSource
from skilldex.models.resource import RawDocument, ResourceNode

logger = structlog.get_logger()

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def generate_source_id(source_name: str, base_path: str | None = None) -> str:
    """
    Derive the deterministic identifier joining a source's pipeline runs,
    index documents and freshness checks.

    Example: ("local:./docs", "/guides") -> "local___docs___guides"
    """
    source = _NON_ALNUM.sub("_", source_name.lower())
    path = _NON_ALNUM.sub("_", (base_path or "root").lower())
    return f"{source}__{path}"


def build_document_path(base_path: str, doc_path: str) -> str:
    """Join a pipeline base path and a document path with single slashes."""
    doc_path = doc_path.lstrip("/")
    base = base_path.rstrip("/")

    if not base:
        return f"/{doc_path}" if doc_path else ""

    if not base.startswith("/"):
        base = f"/{base}"
    return f"{base}/{doc_path}" if doc_path else base


@dataclass
class PipelineConfig:
    """
    Static ingestion configuration for one skill.

    A ttl of None falls back to SKILLDEX_DEFAULT_CACHE_TTL_SECONDS. Scopes
    are merged with the owning skill's required scopes at index time.
    """

    source: ContentSource
    formats: list[ContentFormat]
    base_path: str = ""
    cache_ttl_seconds: int | None = None
    scopes: list[str] = field(default_factory=list)


class ContentPipeline:
    """
    Turns a source's documents into resource trees.

    Flow:
    1. List document handles from the source
    2. Pick the first format that accepts each document's content type
    3. Fetch and parse under the joined document path
    4. Stamp every node with the pipeline's source id
    """

    def __init__(
        self,
        source: ContentSource,
        formats: list[ContentFormat],
        base_path: str = "",
    ):
        if not formats:
            raise ConfigurationError("ContentPipeline requires at least one format adapter")

        self.source = source
        self.formats = list(formats)
        self.base_path = base_path or ""
        self.source_id = generate_source_id(source.name, self.base_path)

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "ContentPipeline":
        return cls(config.source, config.formats, config.base_path)

    async def fetch_resources(self) -> list[ResourceNode]:
        """
        Run the pipeline.

        Per-document failures are logged and skipped.

        Returns:
            Top-level resource nodes from every parsed document

        Raises:
            PipelineError: If listing the source's documents fails
        """
        try:
            documents = await self.source.list_documents()
        except Exception as e:
            logger.error("pipeline_listing_failed", source=self.source.name, error=str(e))
            raise PipelineError(f"ContentPipeline failed: {e}") from e

        if not documents:
            logger.info("pipeline_no_documents", source=self.source.name)
            return []

        resources: list[ResourceNode] = []
        for doc in documents:
            try:
                resources.extend(await self._process_document(doc))
            except Exception as e:
                logger.error(
                    "document_processing_error",
                    doc_id=doc.id,
                    source=self.source.name,
                    error=str(e),
                )

        self._attach_source_id(resources)

        logger.info(
            "pipeline_complete",
            source=self.source.name,
            source_id=self.source_id,
            documents=len(documents),
            resources=len(resources),
        )
        return resources

    async def _process_document(self, doc: RawDocument) -> list[ResourceNode]:
        fmt = self._find_format(doc.content_type)
        if fmt is None:
            logger.warning(
                "no_format_for_document",
                doc_id=doc.id,
                content_type=doc.content_type,
                formats=[f.name for f in self.formats],
            )
            return []

        content = await self.source.fetch_content(doc.id)
        return fmt.parse(content, build_document_path(self.base_path, doc.path))

    def _find_format(self, content_type: str) -> ContentFormat | None:
        for fmt in self.formats:
            if fmt.can_handle(content_type):
                return fmt
        return None

    def _attach_source_id(self, nodes: list[ResourceNode]):
        for node in nodes:
            node.metadata.source_id = self.source_id
            self._attach_source_id(node.children)

    def summary(self) -> dict:
        return {
            "source": self.source.name,
            "source_id": self.source_id,
            "formats": [f.name for f in self.formats],
            "base_path": self.base_path,
        }
