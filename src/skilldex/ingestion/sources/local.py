"""Local filesystem source adapter."""

from datetime import datetime, timezone
from pathlib import Path

import structlog

from skilldex.config import get_settings
from skilldex.exceptions import ConfigurationError
from skilldex.ingestion.sources.base import ContentSource
from skilldex.models.resource import RawContent, RawDocument

logger = structlog.get_logger()

CONTENT_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
    ".html": "text/html",
    ".json": "application/json",
    ".csv": "text/csv",
}


class LocalSource(ContentSource):
    """
    Source for files on the local disk.

    Local sources are always refetched on sync, so they should stay cheap.
    """

    def __init__(
        self,
        root: str | Path,
        extensions: list[str] | None = None,
        recursive: bool = True,
        base_path: str | Path | None = None,
        prefix: str | None = None,
    ):
        """
        Initialize the local source.

        Args:
            root: A file or directory to read
            extensions: File extensions to include (default: .md, .markdown)
            recursive: Scan subdirectories
            base_path: Directory stripped from document paths (default: root)
            prefix: Name prefix marking the source as local
                (default: SKILLDEX_LOCAL_SOURCE_PREFIX)
        """
        self.root = Path(root)
        if not self.root.exists():
            raise ConfigurationError(f"Local source path does not exist: {self.root}")

        self.extensions = [e.lower() for e in (extensions or [".md", ".markdown"])]
        self.recursive = recursive
        self.prefix = prefix or get_settings().local_source_prefix
        if base_path is not None:
            self.base_path = Path(base_path)
        elif self.root.is_file():
            self.base_path = self.root.parent
        else:
            self.base_path = self.root

    @property
    def name(self) -> str:
        return f"{self.prefix}{self.root}"

    async def list_documents(self) -> list[RawDocument]:
        """List matching files under the root."""
        if self.root.is_file():
            files = [self.root]
        else:
            pattern = "**/*" if self.recursive else "*"
            files = sorted(p for p in self.root.glob(pattern) if p.is_file())

        documents = []
        for file_path in files:
            suffix = file_path.suffix.lower()
            if suffix not in self.extensions:
                continue

            stat = file_path.stat()
            documents.append(
                RawDocument(
                    id=str(file_path.resolve()),
                    path=self._document_path(file_path),
                    content_type=CONTENT_TYPES.get(suffix, "text/plain"),
                    metadata={
                        "file_name": file_path.name,
                        "size": stat.st_size,
                        "last_modified": datetime.fromtimestamp(
                            stat.st_mtime, tz=timezone.utc
                        ).isoformat(),
                    },
                )
            )

        logger.debug("local_documents_listed", source=self.name, count=len(documents))
        return documents

    async def fetch_content(self, doc_id: str) -> RawContent:
        """Read one file as UTF-8 text."""
        file_path = Path(doc_id)
        stat = file_path.stat()
        return RawContent(
            content=file_path.read_text(encoding="utf-8"),
            content_type=CONTENT_TYPES.get(file_path.suffix.lower(), "text/plain"),
            metadata={
                "file_name": file_path.name,
                "last_modified": datetime.fromtimestamp(
                    stat.st_mtime, tz=timezone.utc
                ).isoformat(),
            },
        )

    def _document_path(self, file_path: Path) -> str:
        """Path relative to base_path, extension removed, with a leading slash."""
        relative = file_path.relative_to(self.base_path).with_suffix("")
        return "/" + relative.as_posix()
