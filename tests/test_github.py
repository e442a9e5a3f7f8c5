"""Tests for the GitHub source adapters against a mocked transport."""

import httpx
import pytest

from skilldex.ingestion.sources import GitHubIssuesSource, GitHubSource

TREE = {
    "tree": [
        {"path": "docs/guide.md", "type": "blob", "sha": "1"},
        {"path": "docs/deep/faq.markdown", "type": "blob", "sha": "2"},
        {"path": "docs/image.png", "type": "blob", "sha": "3"},
        {"path": "docs/deep", "type": "tree", "sha": "4"},
        {"path": "README.md", "type": "blob", "sha": "5"},
    ]
}

ISSUES = [
    {
        "number": 7,
        "title": "Disk fills up",
        "state": "open",
        "labels": [{"name": "bug"}],
        "user": {"login": "ada"},
        "body": "The disk fills up nightly.",
        "comments": 1,
        "comments_url": "https://api.github.com/repos/acme/ops/issues/7/comments",
        "updated_at": "2024-01-01T00:00:00Z",
        "html_url": "https://github.com/acme/ops/issues/7",
    },
    {"number": 8, "title": "A pull request", "state": "open", "pull_request": {}},
]


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestGitHubSource:
    @pytest.mark.asyncio
    async def test_lists_markdown_under_directory(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=TREE)

        async with _client(handler) as client:
            source = GitHubSource("acme/ops", directory="docs", token="secret", client=client)
            documents = await source.list_documents()

        assert [d.path for d in documents] == ["/guide", "/deep/faq"]
        assert documents[0].id == "docs/guide.md"
        assert requests[0].url.params["recursive"] == "1"
        assert requests[0].headers["Authorization"] == "token secret"
        assert source.name == "github:acme/ops@main/docs"

    @pytest.mark.asyncio
    async def test_fetch_raw_content(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.host == "raw.githubusercontent.com"
            assert request.url.path == "/acme/ops/main/docs/guide.md"
            return httpx.Response(200, text="# Guide")

        async with _client(handler) as client:
            content = await GitHubSource("acme/ops", client=client).fetch_content("docs/guide.md")

        assert content.text == "# Guide"
        assert content.metadata["file_name"] == "guide.md"

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        async with _client(lambda request: httpx.Response(403)) as client:
            with pytest.raises(RuntimeError, match="rate limit"):
                await GitHubSource("acme/ops", client=client).list_documents()


class TestGitHubIssuesSource:
    @pytest.mark.asyncio
    async def test_issues_rendered_with_comments(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/comments"):
                return httpx.Response(200, json=[{"user": {"login": "bob"}, "body": "Rotate logs."}])
            if request.url.params.get("page") == "1":
                return httpx.Response(200, json=ISSUES)
            return httpx.Response(200, json=[])

        async with _client(handler) as client:
            source = GitHubIssuesSource("acme/ops", client=client)
            documents = await source.list_documents()
            content = await source.fetch_content(documents[0].id)

        assert [d.path for d in documents] == ["/issues/7"]
        assert documents[0].metadata["labels"] == ["bug"]
        assert content.text.startswith("# Disk fills up")
        assert "**Labels:** bug" in content.text
        assert "**Author:** @ada" in content.text
        assert "**Comment by @bob:**\nRotate logs." in content.text

    @pytest.mark.asyncio
    async def test_unlisted_issue(self):
        source = GitHubIssuesSource("acme/ops", client=_client(lambda r: httpx.Response(200, json=[])))
        with pytest.raises(KeyError):
            await source.fetch_content("99")
