"""Tests for the PaperScout engine."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from paperscout.config.settings import Settings
from paperscout.core.engine import PaperScoutEngine
from paperscout.core.exceptions import (
    AdapterNotRegisteredError,
    PluginDisabledError,
    UnsupportedOperationError,
)
from paperscout.core.limits import FIELD_RECOMMENDATIONS
from paperscout.core.scheduler import RequestScheduler
from paperscout.models.query import SearchQuery

BUILTIN_IDS = [
    "pmc",
    "arxiv",
    "pubmed",
    "biorxiv",
    "medrxiv",
    "crossref",
    "google-scholar",
    "semantic",
    "iacr",
    "acm",
    "wos",
    "scopus",
    "jstor",
    "researchgate",
    "core",
    "microsoft-academic",
]


def crossref_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/works":
        return httpx.Response(
            200,
            json={"message": {"items": [{"DOI": "10.1/a", "title": ["A"]}, {"DOI": "10.1/b", "title": ["B"]}]}},
        )
    return httpx.Response(404)


@pytest.fixture
def engine(settings: Settings, scheduler: RequestScheduler) -> PaperScoutEngine:
    return PaperScoutEngine(settings, scheduler=scheduler, transport=httpx.MockTransport(crossref_handler))


# ── Tests: Initialization ──


class TestEngineInitialization:
    @pytest.mark.asyncio
    async def test_registers_builtins_in_order(self, engine: PaperScoutEngine) -> None:
        await engine.initialize()
        assert engine.registry.registered_ids == BUILTIN_IDS

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, engine: PaperScoutEngine) -> None:
        await engine.initialize()
        await engine.initialize()
        assert len(engine.registry) == len(BUILTIN_IDS)

    @pytest.mark.asyncio
    async def test_enabled_plugins_follow_builtins(self, settings: Settings, scheduler: RequestScheduler) -> None:
        configured = settings.model_copy(
            update={"plugins": settings.plugins.model_copy(update={"libgen": True, "unpaywall": True})}
        )
        engine = PaperScoutEngine(configured, scheduler=scheduler)
        await engine.initialize()

        # unpaywall has no contact email configured, so only libgen activates
        assert engine.registry.registered_ids == [*BUILTIN_IDS, "libgen"]

    def test_shares_one_scheduler(self, engine: PaperScoutEngine, scheduler: RequestScheduler) -> None:
        assert engine.scheduler is scheduler
        assert engine.http.scheduler is scheduler
        assert engine.context.http is engine.http

    def test_builds_scheduler_from_settings(self, settings: Settings) -> None:
        engine = PaperScoutEngine(settings)
        assert engine.scheduler.max_concurrent == settings.http.max_concurrent
        assert engine.scheduler.retry_policy.max_attempts == settings.http.retry_count + 1


# ── Tests: Resolution ──


class TestAdapterResolution:
    @pytest.mark.asyncio
    async def test_unknown_platform(self, engine: PaperScoutEngine) -> None:
        await engine.initialize()
        with pytest.raises(AdapterNotRegisteredError, match="nope"):
            engine.get_adapter("nope")

    @pytest.mark.asyncio
    async def test_disabled_plugin(self, engine: PaperScoutEngine) -> None:
        await engine.initialize()
        with pytest.raises(PluginDisabledError) as exc_info:
            engine.get_adapter("sci-hub")
        assert exc_info.value.flag == "sci_hub"

    @pytest.mark.asyncio
    async def test_enabled_plugin_that_failed_to_activate(self, settings: Settings, scheduler: RequestScheduler) -> None:
        configured = settings.model_copy(
            update={"plugins": settings.plugins.model_copy(update={"unpaywall": True})}
        )
        engine = PaperScoutEngine(configured, scheduler=scheduler)
        await engine.initialize()
        with pytest.raises(AdapterNotRegisteredError):
            engine.get_adapter("unpaywall")

    def test_resolve_directory(self, engine: PaperScoutEngine, settings: Settings, tmp_path: Path) -> None:
        assert engine.resolve_directory(None) == settings.download_dir
        assert engine.resolve_directory(str(tmp_path)) == tmp_path


# ── Tests: Boundary operations ──


class TestEngineOperations:
    @pytest.mark.asyncio
    async def test_search(self, engine: PaperScoutEngine) -> None:
        await engine.initialize()
        result = await engine.search("crossref", SearchQuery(text="anything"))
        assert [p.id for p in result.items] == ["10.1/a", "10.1/b"]
        await engine.shutdown()

    @pytest.mark.asyncio
    async def test_lookup_not_found(self, engine: PaperScoutEngine) -> None:
        await engine.initialize()
        assert await engine.lookup("crossref", "10.1/missing") is None

    @pytest.mark.asyncio
    async def test_lookup_unsupported(self, engine: PaperScoutEngine) -> None:
        await engine.initialize()
        with pytest.raises(UnsupportedOperationError, match="lookup"):
            await engine.lookup("arxiv", "2401.00001")

    @pytest.mark.asyncio
    async def test_download_unsupported(self, engine: PaperScoutEngine) -> None:
        await engine.initialize()
        with pytest.raises(UnsupportedOperationError, match="download"):
            await engine.download("pubmed", "38000001")

    @pytest.mark.asyncio
    async def test_download_defaults_to_settings_dir(
        self, settings: Settings, scheduler: RequestScheduler
    ) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(200, content=b"%PDF-1.4 x"))
        engine = PaperScoutEngine(settings, scheduler=scheduler, transport=transport)
        await engine.initialize()

        result = await engine.download("arxiv", "2401.00001")
        assert Path(result.path).parent == settings.download_dir.resolve()


# ── Tests: Recommendations ──


class TestRecommendations:
    def test_field_recommendations_sorted_by_tier(self, engine: PaperScoutEngine) -> None:
        response = engine.recommend("computer-science")
        assert response.field == "computer-science"
        assert [(r.platform, r.tier) for r in response.recommendations] == [
            ("arxiv", 1),
            ("semantic", 1),
            ("acm", 3),
        ]

    def test_biomedical(self, engine: PaperScoutEngine) -> None:
        platforms = [r.platform for r in engine.recommend("biomedical").recommendations]
        assert platforms == ["pmc", "pubmed", "biorxiv", "medrxiv"]

    def test_general_fallback(self, engine: PaperScoutEngine) -> None:
        response = engine.recommend(None)
        assert response.field == "general"
        assert [r.platform for r in response.recommendations] == ["semantic", "crossref", "arxiv", "pmc"]
        assert all(r.reason for r in response.recommendations)

    @pytest.mark.asyncio
    async def test_platforms(self, engine: PaperScoutEngine) -> None:
        await engine.initialize()
        info = {p.platform: p for p in engine.platforms()}

        assert list(info) == BUILTIN_IDS
        assert info["pubmed"].capabilities == ["search"]
        assert info["crossref"].capabilities == ["lookup", "search"]
        assert info["semantic"].capabilities == ["download", "lookup", "read", "search"]
        assert info["core"].tier == 4
        assert info["google-scholar"].capabilities == ["search"]
        assert info["scopus"].tier == 4
        assert not any(p.plugin for p in info.values())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", [*FIELD_RECOMMENDATIONS, None, "unknown-field"])
    async def test_every_recommendation_is_registered(self, engine: PaperScoutEngine, field: str | None) -> None:
        await engine.initialize()
        for recommendation in engine.recommend(field).recommendations:
            adapter = engine.get_adapter(recommendation.platform)
            assert adapter.id == recommendation.platform
