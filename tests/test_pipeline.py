"""Tests for source identifiers, path joining, pipelines and the local source."""

from unittest.mock import AsyncMock

import pytest

from skilldex.exceptions import ConfigurationError, PipelineError
from skilldex.ingestion.formats import MarkdownFormat
from skilldex.ingestion.pipeline import (
    ContentPipeline,
    PipelineConfig,
    build_document_path,
    generate_source_id,
)
from skilldex.ingestion.sources import LocalSource
from skilldex.models.resource import RawDocument
from tests.conftest import StaticSource


class TestGenerateSourceId:
    def test_replaces_non_alphanumerics(self):
        """Every character outside [a-z0-9] becomes an underscore."""
        assert generate_source_id("local:./docs", "/guides") == "local___docs___guides"

    def test_empty_base_path_is_root(self):
        """A missing base path normalizes to "root"."""
        assert generate_source_id("static:Docs", "") == "static_docs__root"
        assert generate_source_id("static:Docs") == "static_docs__root"

    def test_deterministic(self):
        """Same inputs always produce the same id."""
        assert generate_source_id("github:a/b@main", "/x") == generate_source_id("github:a/b@main", "/x")


class TestBuildDocumentPath:
    def test_joins_with_single_slash(self):
        """Leading and trailing slashes never double up."""
        assert build_document_path("/docs", "meetings/notes") == "/docs/meetings/notes"
        assert build_document_path("/docs/", "/meetings/notes") == "/docs/meetings/notes"

    def test_base_without_leading_slash(self):
        """A base path gains a leading slash."""
        assert build_document_path("docs", "/a") == "/docs/a"

    def test_empty_base(self):
        """Without a base path the document path is returned rooted."""
        assert build_document_path("", "meetings/notes") == "/meetings/notes"
        assert build_document_path("", "") == ""


class TestContentPipeline:
    def test_requires_a_format(self):
        """A pipeline without format adapters is a configuration error."""
        with pytest.raises(ConfigurationError):
            ContentPipeline(StaticSource({}), [])

    @pytest.mark.asyncio
    async def test_parses_and_stamps_source_id(self):
        """Every node, children included, carries the pipeline's source id."""
        source = StaticSource({"/setup": "# Setup\n\nIntro.\n\n## Install\n\nRun it."})
        pipeline = ContentPipeline(source, [MarkdownFormat()], base_path="/guides")

        resources = await pipeline.fetch_resources()

        assert len(resources) == 1
        root = resources[0]
        assert root.path == "/guides/setup/setup"
        assert root.metadata.source_id == pipeline.source_id
        assert root.children[0].metadata.source_id == pipeline.source_id
        assert pipeline.source_id == "static_docs___guides"

    @pytest.mark.asyncio
    async def test_listing_failure_is_wrapped(self):
        """A listing failure becomes a PipelineError chained to its cause."""
        pipeline = ContentPipeline(StaticSource({}, fail_listing=True), [MarkdownFormat()])

        with pytest.raises(PipelineError, match="ContentPipeline failed") as exc_info:
            await pipeline.fetch_resources()
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_document_failure_is_skipped(self):
        """One failing document does not stop the others."""
        source = StaticSource({"/a": "# A\n\nFirst.", "/b": "# B\n\nSecond."})
        original = source.fetch_content

        async def flaky(doc_id):
            if doc_id == "/a":
                raise OSError("disk error")
            return await original(doc_id)

        source.fetch_content = flaky
        pipeline = ContentPipeline(source, [MarkdownFormat(split=False)])

        resources = await pipeline.fetch_resources()

        assert [r.name for r in resources] == ["B"]

    @pytest.mark.asyncio
    async def test_unhandled_content_type_is_skipped(self):
        """Documents no format accepts are skipped without fetching."""
        source = StaticSource({})
        source.list_documents = AsyncMock(
            return_value=[RawDocument(id="x", path="/x", content_type="application/pdf")]
        )
        source.fetch_content = AsyncMock()
        pipeline = ContentPipeline(source, [MarkdownFormat()])

        assert await pipeline.fetch_resources() == []
        source.fetch_content.assert_not_awaited()

    def test_from_config(self):
        """A pipeline config carries source, formats and base path."""
        config = PipelineConfig(source=StaticSource({}), formats=[MarkdownFormat()], base_path="/kb")
        pipeline = ContentPipeline.from_config(config)
        assert pipeline.summary() == {
            "source": "static:docs",
            "source_id": "static_docs___kb",
            "formats": ["markdown"],
            "base_path": "/kb",
        }


class TestLocalSource:
    def test_missing_root(self, tmp_path):
        """A root that does not exist is rejected at construction."""
        with pytest.raises(ConfigurationError):
            LocalSource(tmp_path / "missing")

    @pytest.mark.asyncio
    async def test_lists_markdown_recursively(self, tmp_path):
        """Paths are relative, rooted and extensionless; other files are ignored."""
        (tmp_path / "guides").mkdir()
        (tmp_path / "guides" / "setup.md").write_text("# Setup\n")
        (tmp_path / "readme.markdown").write_text("# Readme\n")
        (tmp_path / "data.csv").write_text("a,b\n")

        source = LocalSource(tmp_path)
        documents = await source.list_documents()

        assert sorted(d.path for d in documents) == ["/guides/setup", "/readme"]
        assert all(d.content_type == "text/markdown" for d in documents)
        assert source.name == f"local:{tmp_path}"

    @pytest.mark.asyncio
    async def test_fetch_content(self, tmp_path):
        """Content is read as text with the file name in metadata."""
        path = tmp_path / "notes.md"
        path.write_text("# Notes\n\nHello.")
        source = LocalSource(tmp_path)

        documents = await source.list_documents()
        content = await source.fetch_content(documents[0].id)

        assert content.text == "# Notes\n\nHello."
        assert content.metadata["file_name"] == "notes.md"

    @pytest.mark.asyncio
    async def test_single_file_root(self, tmp_path):
        """A file root lists just that file."""
        path = tmp_path / "only.md"
        path.write_text("# Only")
        documents = await LocalSource(path).list_documents()
        assert [d.path for d in documents] == ["/only"]
