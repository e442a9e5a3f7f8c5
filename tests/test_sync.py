"""Tests for freshness-driven synchronization."""

from unittest.mock import AsyncMock

import pytest

from skilldex.exceptions import IndexingError
from skilldex.ingestion.sources import LocalSource
from skilldex.models.index import UpsertResult
from tests.conftest import SlowSource, StaticSource, make_weather_skill, static_pipeline

FILES = {
    "/storms": "# Storms\n\nStay indoors during storms.",
    "/heat": "# Heat\n\nDrink water in a heat wave.",
}


class TestInitialize:
    @pytest.mark.asyncio
    async def test_fresh_source_is_not_refetched(self, make_hub):
        """A remote source younger than its ttl is reused."""
        source = StaticSource(FILES)
        hub = make_hub([make_weather_skill([static_pipeline(source)])])

        first = await hub.initialize()
        second = await hub.initialize()

        assert (first.fetched, first.fresh) == (1, 0)
        assert (second.fetched, second.fresh) == (0, 1)
        assert source.list_calls == 1

    @pytest.mark.asyncio
    async def test_stale_source_is_refetched(self, make_hub):
        """A zero ttl makes every indexed document stale."""
        source = StaticSource(FILES)
        hub = make_hub([make_weather_skill([static_pipeline(source, cache_ttl_seconds=0)])])

        await hub.initialize()
        report = await hub.initialize()

        assert report.fetched == 1
        assert source.list_calls == 2

    @pytest.mark.asyncio
    async def test_local_source_is_always_refetched(self, make_hub, tmp_path):
        (tmp_path / "guide.md").write_text("# Guide\n\nLocal notes.")
        hub = make_hub([make_weather_skill([static_pipeline(LocalSource(tmp_path))])])

        await hub.initialize()
        report = await hub.initialize()

        assert report.fetched == 1
        assert report.fresh == 0

    @pytest.mark.asyncio
    async def test_hub_default_ttl_applies(self, make_hub):
        """Pipelines without their own ttl use the hub's default."""
        source = StaticSource(FILES)
        hub = make_hub(
            [make_weather_skill([static_pipeline(source)])], default_cache_ttl_seconds=0
        )

        await hub.initialize()
        report = await hub.initialize()

        assert (report.fetched, report.fresh) == (1, 0)
        assert source.list_calls == 2

    @pytest.mark.asyncio
    async def test_hub_local_prefix_applies(self, make_hub):
        source = StaticSource(FILES, name="disk:docs")
        hub = make_hub(
            [make_weather_skill([static_pipeline(source)])], local_source_prefix="disk:"
        )

        await hub.initialize()
        report = await hub.initialize()

        assert report.fetched == 1
        assert hub.skills.all_sources()[0].is_local

    @pytest.mark.asyncio
    async def test_hub_document_settings_apply(self, make_hub):
        long_text = "# Storms\n\n" + "Stay indoors and away from windows " * 10
        source = StaticSource({"/storms": long_text})
        hub = make_hub(
            [make_weather_skill([static_pipeline(source)])],
            description_max_chars=60,
            default_quality_score=70,
        )

        await hub.initialize()

        doc = await hub.store.get_document_by_uri("weather://resources/storms")
        assert doc.quality_score == 70
        assert len(doc.description) <= 60 + len("...")

    def test_local_source_prefix_from_settings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SKILLDEX_LOCAL_SOURCE_PREFIX", "disk:")
        assert LocalSource(tmp_path).name == f"disk:{tmp_path}"
        assert LocalSource(tmp_path, prefix="fs:").name == f"fs:{tmp_path}"

    @pytest.mark.asyncio
    async def test_failing_source_is_isolated(self, make_hub):
        """One failing source is reported without affecting the others."""
        good = StaticSource(FILES, name="static:good")
        bad = StaticSource({}, name="static:bad", fail_listing=True)
        hub = make_hub([make_weather_skill([static_pipeline(bad), static_pipeline(good)])])

        report = await hub.initialize()

        assert (report.fetched, report.failed) == (1, 1)
        failed = next(s for s in report.sources if s.outcome == "failed")
        assert "source unavailable" in failed.error
        assert (await hub.store.get_stats()).total_documents == 2

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, make_hub):
        SlowSource.active = 0
        SlowSource.max_active = 0
        pipelines = [
            static_pipeline(SlowSource(FILES, name=f"static:slow{i}")) for i in range(5)
        ]
        hub = make_hub([make_weather_skill(pipelines)], sync_concurrency=2)

        report = await hub.initialize()

        assert report.fetched == 5
        assert SlowSource.max_active <= 2

    @pytest.mark.asyncio
    async def test_disabled_skill_is_not_synced(self, make_hub):
        source = StaticSource(FILES)
        hub = make_hub([make_weather_skill([static_pipeline(source)], enabled=False)])

        report = await hub.initialize()

        assert report.sources == []
        assert source.list_calls == 0


class TestGenerationSwap:
    @pytest.mark.asyncio
    async def test_removed_documents_disappear(self, make_hub):
        """Documents missing from a new fetch are deleted after the upsert."""
        source = StaticSource(FILES)
        hub = make_hub([make_weather_skill([static_pipeline(source, cache_ttl_seconds=0)])])
        await hub.initialize()

        del source.files["/heat"]
        report = await hub.initialize()

        result = report.sources[0]
        assert result.documents_indexed == 1
        assert result.documents_removed == 1
        assert await hub.store.get_document_by_uri("weather://resources/heat") is None
        assert await hub.store.get_document_by_uri("weather://resources/storms") is not None

    @pytest.mark.asyncio
    async def test_total_upsert_failure_keeps_previous_generation(self, make_hub, index):
        source = StaticSource(FILES)
        hub = make_hub([make_weather_skill([static_pipeline(source)])])
        await hub.initialize()

        index.upsert = AsyncMock(return_value=UpsertResult(failed=2, errors=["rejected"]))
        skill = hub.skills.get("weather")
        info = hub.skills.all_sources()[0]

        with pytest.raises(IndexingError):
            await hub.sync.fetch_and_index(skill, info)

        assert (await hub.store.get_stats()).total_documents == 2

    @pytest.mark.asyncio
    async def test_sources_sharing_paths_stay_fresh(self, make_hub):
        """Each source owns its documents even when paths coincide."""
        first = StaticSource(FILES, name="static:first")
        second = StaticSource(FILES, name="static:second")
        hub = make_hub([make_weather_skill([static_pipeline(first), static_pipeline(second)])])

        await hub.initialize()
        report = await hub.initialize()

        assert (report.fresh, report.fetched) == (2, 0)
        for info in hub.skills.all_sources():
            freshness = await hub.store.get_source_freshness(info.source_id)
            assert freshness.document_count == 2

    @pytest.mark.asyncio
    async def test_empty_fetch_changes_nothing(self, make_hub):
        source = StaticSource(FILES)
        hub = make_hub([make_weather_skill([static_pipeline(source, cache_ttl_seconds=0)])])
        await hub.initialize()

        source.files.clear()
        report = await hub.initialize()

        assert report.sources[0].resource_count == 0
        assert (await hub.store.get_stats()).total_documents == 2

    @pytest.mark.asyncio
    async def test_documents_inherit_skill_and_pipeline_scopes(self, make_hub):
        source = StaticSource(FILES)
        skill = make_weather_skill(
            [static_pipeline(source, scopes=["staff"])], required_scopes=["weather"]
        )
        hub = make_hub([skill])
        await hub.initialize()

        doc = await hub.store.get_document_by_uri("weather://resources/storms")
        assert doc.scopes == ["weather", "staff"]
        assert doc.source_id == hub.skills.all_sources()[0].source_id
