"""Shared fixtures: an in-memory index, static sources and a sample skill."""

import asyncio

import pytest
from pydantic import BaseModel, Field

from skilldex.config import Settings, get_settings
from skilldex.hub import KnowledgeHub
from skilldex.index import InMemoryIndex
from skilldex.ingestion.formats import MarkdownFormat
from skilldex.ingestion.pipeline import PipelineConfig
from skilldex.ingestion.sources.base import ContentSource
from skilldex.models.resource import RawContent, RawDocument
from skilldex.models.results import ToolResult
from skilldex.registry import Skill, SkillTool, create_tool


class StaticSource(ContentSource):
    """Remote-looking source serving markdown from a dict of path -> text."""

    def __init__(self, files: dict[str, str], name: str = "static:docs", fail_listing: bool = False):
        self.files = dict(files)
        self._name = name
        self.fail_listing = fail_listing
        self.list_calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def list_documents(self) -> list[RawDocument]:
        self.list_calls += 1
        if self.fail_listing:
            raise RuntimeError("source unavailable")
        return [
            RawDocument(
                id=path,
                path=path,
                content_type="text/markdown",
                metadata={"file_name": path.rsplit("/", 1)[-1] + ".md"},
            )
            for path in self.files
        ]

    async def fetch_content(self, doc_id: str) -> RawContent:
        return RawContent(
            content=self.files[doc_id],
            content_type="text/markdown",
            metadata={"file_name": doc_id.rsplit("/", 1)[-1] + ".md"},
        )


class SlowSource(StaticSource):
    """Tracks how many listings run at the same time."""

    active = 0
    max_active = 0

    async def list_documents(self) -> list[RawDocument]:
        SlowSource.active += 1
        SlowSource.max_active = max(SlowSource.max_active, SlowSource.active)
        try:
            await asyncio.sleep(0.01)
            return await super().list_documents()
        finally:
            SlowSource.active -= 1


class ForecastInput(BaseModel):
    city: str = Field(..., min_length=1, description="City name")
    days: int = Field(default=3, ge=1, le=10)


async def _forecast(params: ForecastInput, ctx) -> ToolResult:
    return ToolResult(
        content=f"Sunny in {params.city}",
        structured={"rows": [{"day": d + 1, "temp": 20 + d} for d in range(params.days)]},
    )


async def _radar(params, ctx) -> str:
    return "radar image"


def make_weather_skill(resources: list[PipelineConfig] | None = None, **overrides) -> Skill:
    fields = dict(
        name="weather",
        description="Weather forecasts",
        instruction="# Weather\n\nUse the forecast tool for upcoming days.",
        tools=[
            create_tool("forecast", "Daily forecast for a city", _forecast, input_schema=ForecastInput),
            SkillTool(
                name="radar",
                description="Live radar",
                execute=_radar,
                required_scopes=["pro"],
                freshness="live",
            ),
        ],
        resources=resources or [],
    )
    fields.update(overrides)
    return Skill(**fields)


def static_pipeline(source: ContentSource, **kwargs) -> PipelineConfig:
    return PipelineConfig(source=source, formats=[MarkdownFormat(split=False)], **kwargs)


@pytest.fixture(autouse=True)
def default_logging(monkeypatch):
    """Keep structlog on its default configuration, which caches no loggers."""
    monkeypatch.setattr("skilldex.api.app.configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr("skilldex.cli.configure_logging", lambda *args, **kwargs: None)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached process-wide; drop them around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def index():
    return InMemoryIndex()


@pytest.fixture
def make_hub(index):
    """Factory building a hub over the shared in-memory index."""

    def factory(skills=(), routes=(), **settings) -> KnowledgeHub:
        return KnowledgeHub(
            skills=skills,
            routes=routes,
            index=index,
            settings=Settings(**settings),
        )

    return factory


@pytest.fixture
def weather_hub(make_hub):
    return make_hub([make_weather_skill()])


def sample_skills() -> list[Skill]:
    """Importable skill configuration for bootstrap and CLI tests."""
    return [make_weather_skill()]
