"""Tests for operator lifecycle actions and hub restarts."""

from unittest.mock import AsyncMock

import pytest

from skilldex.ingestion.sources import LocalSource
from skilldex.registry import Skill
from tests.conftest import StaticSource, make_weather_skill, static_pipeline

FILES = {
    "/storms": "# Storms\n\nStay indoors during storms.",
    "/heat": "# Heat\n\nDrink water in a heat wave.",
}


class TestRefreshSource:
    @pytest.mark.asyncio
    async def test_unknown_source(self, weather_hub):
        result = await weather_hub.lifecycle.refresh_source("nope")
        assert not result.success
        assert result.message == "Source not found: nope"

    @pytest.mark.asyncio
    async def test_refetches_regardless_of_freshness(self, make_hub):
        source = StaticSource(FILES)
        hub = make_hub([make_weather_skill([static_pipeline(source)])])
        await hub.initialize()
        source_id = hub.skills.all_sources()[0].source_id

        result = await hub.lifecycle.refresh_source(source_id)

        assert result.success
        assert result.resource_count == 2
        assert result.message == "Refreshed 2 resources"
        assert source.list_calls == 2

    @pytest.mark.asyncio
    async def test_empty_source(self, make_hub):
        hub = make_hub([make_weather_skill([static_pipeline(StaticSource({}))])])
        source_id = hub.skills.all_sources()[0].source_id

        result = await hub.lifecycle.refresh_source(source_id)

        assert result.success
        assert result.message == "No resources found"

    @pytest.mark.asyncio
    async def test_failure_is_reported(self, make_hub):
        hub = make_hub([make_weather_skill([static_pipeline(StaticSource({}, fail_listing=True))])])
        source_id = hub.skills.all_sources()[0].source_id

        result = await hub.lifecycle.refresh_source(source_id)

        assert not result.success
        assert "ContentPipeline failed" in result.message


class TestRefreshStaleSources:
    @pytest.mark.asyncio
    async def test_only_stale_remote_sources_refresh(self, make_hub, tmp_path):
        """Local sources are skipped; fresh ones are checked but left alone."""
        (tmp_path / "local.md").write_text("# Local\n\nNotes.")
        fresh = StaticSource(FILES, name="static:fresh")
        stale = StaticSource(FILES, name="static:stale")
        hub = make_hub([
            make_weather_skill([
                static_pipeline(LocalSource(tmp_path)),
                static_pipeline(fresh),
                static_pipeline(stale, cache_ttl_seconds=0),
            ])
        ])
        await hub.initialize()

        result = await hub.lifecycle.refresh_stale_sources()

        assert (result.checked, result.refreshed, result.failed) == (2, 1, 0)
        assert fresh.list_calls == 1
        assert stale.list_calls == 2

    @pytest.mark.asyncio
    async def test_failed_refresh_is_counted(self, make_hub):
        source = StaticSource({}, fail_listing=True)
        hub = make_hub([make_weather_skill([static_pipeline(source)])])

        result = await hub.lifecycle.refresh_stale_sources()

        assert (result.checked, result.refreshed, result.failed) == (1, 0, 1)


class TestRestart:
    @pytest.mark.asyncio
    async def test_restart_reloads_configuration(self, make_hub):
        """Callable configuration is re-evaluated and published on restart."""
        skills = [make_weather_skill()]
        hub = make_hub(lambda: list(skills))
        assert hub.routes.get("news") is None

        skills.append(Skill(name="news", description="Headlines", instruction="Read the news."))
        result = await hub.lifecycle.restart()

        assert result.success
        assert hub.routes.get("news") is not None
        assert result.route_count == len(hub.routes)

    @pytest.mark.asyncio
    async def test_restart_failure_is_reported(self, weather_hub):
        weather_hub.sync.initialize = AsyncMock(side_effect=RuntimeError("index down"))

        result = await weather_hub.lifecycle.restart()

        assert not result.success
        assert result.error == "index down"

    @pytest.mark.asyncio
    async def test_wipe_rebuilds_from_sources(self, make_hub):
        source = StaticSource(FILES)
        hub = make_hub([make_weather_skill([static_pipeline(source)])])
        await hub.initialize()

        result = await hub.lifecycle.wipe_index_and_rebuild()

        assert result.success
        # Fresh content was dropped, so the source is fetched again
        assert source.list_calls == 2
        assert (await hub.store.get_stats()).total_documents == 2

    @pytest.mark.asyncio
    async def test_rebuild_reports_routes_by_domain(self, weather_hub):
        result = await weather_hub.lifecycle.rebuild_from_index()

        assert result.success
        assert result.by_domain == {"weather": 3}
        assert result.routes_rebuilt == 3


class TestSourceStats:
    @pytest.mark.asyncio
    async def test_reports_freshness(self, make_hub):
        source = StaticSource(FILES)
        hub = make_hub([make_weather_skill([static_pipeline(source)])])

        before = await hub.lifecycle.source_stats()
        await hub.initialize()
        after = await hub.lifecycle.source_stats()

        assert before[0].document_count == 0
        assert not before[0].fresh
        assert after[0].document_count == 2
        assert after[0].fresh
        assert after[0].domain == "weather"
        assert after[0].source_name == "static:docs"
        assert not after[0].is_local
