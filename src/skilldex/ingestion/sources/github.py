"""GitHub source adapters: repository markdown files and issues."""

import httpx
import structlog

from skilldex.config import get_settings
from skilldex.ingestion.sources.base import ContentSource
from skilldex.models.resource import RawContent, RawDocument

logger = structlog.get_logger()

GITHUB_API_BASE = "https://api.github.com"
GITHUB_RAW_BASE = "https://raw.githubusercontent.com"


def _github_headers(token: str | None = None) -> dict:
    """Get HTTP headers for the GitHub API."""
    token = token or get_settings().github_token
    headers = {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": "skilldex/0.1.0",
    }
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def _raise_for_github(response: httpx.Response):
    if response.status_code == 403:
        raise RuntimeError("GitHub API rate limit exceeded. Set SKILLDEX_GITHUB_TOKEN.")
    response.raise_for_status()


class GitHubSource(ContentSource):
    """
    Markdown files from a GitHub repository.

    Lists the repository tree once, then fetches raw file content per handle.
    """

    def __init__(
        self,
        repo: str,
        ref: str = "main",
        directory: str = "",
        extensions: list[str] | None = None,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the GitHub source.

        Args:
            repo: GitHub repo in "owner/repo" format
            ref: Branch, tag or commit to read
            directory: Only include files under this directory
            extensions: File extensions to include (default: .md, .markdown)
            token: API token (default: SKILLDEX_GITHUB_TOKEN)
            client: Shared HTTP client, mainly for tests
        """
        self.repo = repo
        self.ref = ref
        self.directory = directory.strip("/")
        self.extensions = extensions or [".md", ".markdown"]
        self.token = token
        self._client = client

    @property
    def name(self) -> str:
        suffix = f"/{self.directory}" if self.directory else ""
        return f"github:{self.repo}@{self.ref}{suffix}"

    def _client_or_new(self) -> httpx.AsyncClient:
        return self._client or httpx.AsyncClient(timeout=30.0)

    async def list_documents(self) -> list[RawDocument]:
        """List matching blobs of the repository tree."""
        url = f"{GITHUB_API_BASE}/repos/{self.repo}/git/trees/{self.ref}"
        client = self._client_or_new()
        try:
            response = await client.get(
                url, headers=_github_headers(self.token), params={"recursive": "1"}
            )
            _raise_for_github(response)
            tree = response.json().get("tree", [])
        finally:
            if self._client is None:
                await client.aclose()

        documents = []
        prefix = f"{self.directory}/" if self.directory else ""
        for entry in tree:
            path = entry.get("path", "")
            if entry.get("type") != "blob" or not path.startswith(prefix):
                continue
            extension = next((e for e in self.extensions if path.lower().endswith(e)), None)
            if extension is None:
                continue

            relative = path[len(prefix):]
            documents.append(
                RawDocument(
                    id=path,
                    path="/" + relative[: -len(extension)],
                    content_type="text/markdown",
                    metadata={"file_name": path.rsplit("/", 1)[-1], "sha": entry.get("sha")},
                )
            )

        logger.info("github_documents_listed", repo=self.repo, count=len(documents))
        return documents

    async def fetch_content(self, doc_id: str) -> RawContent:
        """Fetch one file's raw content."""
        url = f"{GITHUB_RAW_BASE}/{self.repo}/{self.ref}/{doc_id}"
        client = self._client_or_new()
        try:
            response = await client.get(url, headers=_github_headers(self.token))
            _raise_for_github(response)
        finally:
            if self._client is None:
                await client.aclose()

        return RawContent(
            content=response.text,
            content_type="text/markdown",
            metadata={"file_name": doc_id.rsplit("/", 1)[-1]},
        )


class GitHubIssuesSource(ContentSource):
    """
    GitHub issues rendered as markdown documents.

    Includes title, labels, state, author, body, and top comments.
    """

    def __init__(
        self,
        repo: str,
        labels: list[str] | None = None,
        state: str = "all",
        max_issues: int = 100,
        max_comments_per_issue: int = 5,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the GitHub issues source.

        Args:
            repo: GitHub repo in "owner/repo" format
            labels: Filter by issue labels
            state: Issue state filter ("open", "closed", "all")
            max_issues: Maximum number of issues to fetch
            max_comments_per_issue: Maximum comments to include per issue
            token: API token (default: SKILLDEX_GITHUB_TOKEN)
            client: Shared HTTP client, mainly for tests
        """
        self.repo = repo
        self.labels = labels or []
        self.state = state
        self.max_issues = max_issues
        self.max_comments_per_issue = max_comments_per_issue
        self.token = token
        self._client = client
        self._issues: dict[str, dict] = {}

    @property
    def name(self) -> str:
        return f"github-issues:{self.repo}"

    async def list_documents(self) -> list[RawDocument]:
        """List issues (pull requests are skipped) and cache their payloads."""
        client = self._client or httpx.AsyncClient(timeout=30.0)
        self._issues = {}
        documents = []
        try:
            page = 1
            while len(documents) < self.max_issues:
                params = {
                    "state": self.state,
                    "per_page": min(100, self.max_issues - len(documents)),
                    "page": page,
                    "sort": "updated",
                    "direction": "desc",
                }
                if self.labels:
                    params["labels"] = ",".join(self.labels)

                response = await client.get(
                    f"{GITHUB_API_BASE}/repos/{self.repo}/issues",
                    headers=_github_headers(self.token),
                    params=params,
                )
                _raise_for_github(response)

                issues = response.json()
                if not issues:
                    break

                for issue in issues:
                    # Pull requests appear in the issues API
                    if "pull_request" in issue:
                        continue

                    doc_id = str(issue["number"])
                    self._issues[doc_id] = issue
                    documents.append(
                        RawDocument(
                            id=doc_id,
                            path=f"/issues/{issue['number']}",
                            content_type="text/markdown",
                            metadata={
                                "state": issue["state"],
                                "labels": [label["name"] for label in issue.get("labels", [])],
                                "updated_at": issue.get("updated_at"),
                                "url": issue.get("html_url"),
                            },
                        )
                    )
                    if len(documents) >= self.max_issues:
                        break

                page += 1
        finally:
            if self._client is None:
                await client.aclose()

        logger.info("github_issues_listed", repo=self.repo, count=len(documents))
        return documents

    async def fetch_content(self, doc_id: str) -> RawContent:
        """Render one listed issue, with its top comments, as markdown."""
        issue = self._issues.get(doc_id)
        if issue is None:
            raise KeyError(f"Issue not listed: {doc_id}")

        comments_text = ""
        if self.max_comments_per_issue > 0 and issue.get("comments", 0) > 0:
            client = self._client or httpx.AsyncClient(timeout=30.0)
            try:
                comments_text = await self._fetch_comments(client, issue["comments_url"])
            finally:
                if self._client is None:
                    await client.aclose()

        return RawContent(
            content=self._format_issue(issue, comments_text),
            content_type="text/markdown",
            metadata={
                "file_name": f"issue-{doc_id}",
                "last_modified": issue.get("updated_at"),
            },
        )

    async def _fetch_comments(self, client: httpx.AsyncClient, comments_url: str) -> str:
        """Fetch top comments for an issue."""
        response = await client.get(
            comments_url,
            headers=_github_headers(self.token),
            params={"per_page": self.max_comments_per_issue},
        )
        if response.status_code != 200:
            return ""

        formatted = []
        for comment in response.json()[: self.max_comments_per_issue]:
            author = comment.get("user", {}).get("login", "unknown")
            body = (comment.get("body") or "").strip()
            if body:
                formatted.append(f"**Comment by @{author}:**\n{body}")

        return "\n\n---\n\n".join(formatted)

    def _format_issue(self, issue: dict, comments_text: str) -> str:
        """Format issue data into a single markdown document."""
        parts = [f"# {issue['title']}"]

        labels = [label["name"] for label in issue.get("labels", [])]
        if labels:
            parts.append(f"**Labels:** {', '.join(labels)}")
        parts.append(f"**State:** {issue['state']}")
        parts.append(f"**Author:** @{issue.get('user', {}).get('login', 'unknown')}")

        body = issue.get("body") or ""
        if body.strip():
            parts.append(f"## Description\n\n{body.strip()}")

        if comments_text:
            parts.append(f"## Comments\n\n{comments_text}")

        return "\n\n".join(parts)
