"""PaperScout Engine — Owns the shared collaborators and the adapter registry.

The engine wires, once per process:
  1. One ``RequestScheduler`` (the global outbound budget)
  2. One ``HttpClient`` routed through that scheduler
  3. The ``DownloadCache`` and the PDF text extractor
  4. The ``AdapterRegistry``: built-ins first, then enabled plugins

and exposes the boundary operations (search, download, read, lookup,
recommend, platforms) by resolving a source id to its adapter.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from paperscout.adapters.base.adapter import AdapterContext, Capability, PlatformAdapter
from paperscout.adapters.base.cache import DownloadCache
from paperscout.adapters.base.registry import AdapterRegistry
from paperscout.adapters.builtin import register_builtin_adapters
from paperscout.adapters.plugins import PLUGIN_PLATFORMS, activate_plugins
from paperscout.core.exceptions import PluginDisabledError
from paperscout.core.http import HttpClient
from paperscout.core.limits import describe_tier, get_platform_tier, get_recommended_platforms
from paperscout.core.scheduler import RequestScheduler
from paperscout.extraction.pdf import PdfTextExtractor
from paperscout.models.response import PlatformInfo, PlatformRecommendation, RecommendationResponse

if TYPE_CHECKING:
    import httpx

    from paperscout.config.settings import Settings
    from paperscout.models.paper import Paper
    from paperscout.models.query import SearchQuery
    from paperscout.models.result import DownloadResult, PaperText, SearchResult

logger = logging.getLogger(__name__)


class PaperScoutEngine:
    """Entry point for every boundary operation.

    Attributes:
        settings: Application configuration.
        scheduler: Global request scheduler.
        http: Shared scheduled HTTP client.
        registry: Registry of active adapters.
        context: Collaborators handed to every adapter.

    Args:
        settings: Application configuration.
        scheduler: Optional pre-built scheduler (tests inject one with a fake sleep).
        transport: Optional httpx transport (tests inject ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: Settings,
        scheduler: RequestScheduler | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.scheduler = scheduler or RequestScheduler.from_settings(settings.http)
        self.http = HttpClient.from_settings(settings.http, scheduler=self.scheduler, transport=transport)
        self.registry = AdapterRegistry()
        self.context = AdapterContext(
            http=self.http,
            cache=DownloadCache(),
            extractor=PdfTextExtractor(),
            settings=settings,
        )
        self._initialized = False

    async def initialize(self) -> None:
        """Register built-in adapters, then activate enabled plugins."""
        if self._initialized:
            return
        builtins = register_builtin_adapters(self.registry, self.context)
        plugins = activate_plugins(self.registry, self.context, self.settings.plugins)
        self._initialized = True
        logger.info(
            "PaperScout engine initialized: %d built-in, %d plugin adapters (%s)",
            len(builtins),
            len(plugins),
            ", ".join(plugins) or "no plugins",
        )

    async def shutdown(self) -> None:
        """Close the shared HTTP client."""
        await self.http.aclose()
        logger.info("PaperScout engine shut down")

    # ──────────────────────────────────────────────────────────────────────
    # Resolution
    # ──────────────────────────────────────────────────────────────────────

    def get_adapter(self, platform: str) -> PlatformAdapter:
        """Resolve ``platform`` to its adapter.

        Raises:
            PluginDisabledError: If ``platform`` is a known plugin whose flag is off.
            AdapterNotRegisteredError: For any other unregistered id.
        """
        if platform not in self.registry:
            flag = PLUGIN_PLATFORMS.get(platform)
            if flag is not None and not getattr(self.settings.plugins, flag):
                raise PluginDisabledError(platform, flag)
        return self.registry.get(platform)

    def resolve_directory(self, directory: str | Path | None) -> Path:
        return Path(directory) if directory else self.settings.download_dir

    # ──────────────────────────────────────────────────────────────────────
    # Boundary operations
    # ──────────────────────────────────────────────────────────────────────

    async def search(self, platform: str, query: SearchQuery) -> SearchResult:
        adapter = self.get_adapter(platform)
        start = time.monotonic()
        result = await adapter.search(query)
        logger.info(
            "Search on %s: query=%r, results=%d, took=%dms",
            platform,
            query.text,
            len(result.items),
            int((time.monotonic() - start) * 1000),
        )
        return result

    async def download(self, platform: str, paper_id: str, directory: str | Path | None = None) -> DownloadResult:
        adapter = self.get_adapter(platform)
        result = await adapter.download(paper_id, self.resolve_directory(directory))
        logger.info("Download %s:%s -> %s (cached=%s)", platform, paper_id, result.path, result.cached)
        return result

    async def read(self, platform: str, paper_id: str, directory: str | Path | None = None) -> PaperText:
        adapter = self.get_adapter(platform)
        return await adapter.read(paper_id, self.resolve_directory(directory))

    async def lookup(self, platform: str, paper_id: str) -> Paper | None:
        """Resolve a single record.

        Raises:
            UnsupportedOperationError: If the adapter lacks ``Capability.LOOKUP``.
        """
        adapter = self.get_adapter(platform)
        if not adapter.supports(Capability.LOOKUP):
            raise adapter.unsupported("lookup")
        return await adapter.lookup(paper_id)

    def recommend(self, field: str | None = None) -> RecommendationResponse:
        """Recommend sources for a field of study, best tier first."""
        recommendations = []
        for platform in get_recommended_platforms(field):
            tier = get_platform_tier(platform)
            recommendations.append(
                PlatformRecommendation(platform=platform, tier=tier, reason=describe_tier(tier))
            )
        recommendations.sort(key=lambda r: r.tier)
        return RecommendationResponse(field=field or "general", recommendations=recommendations)

    def platforms(self) -> list[PlatformInfo]:
        """Describe every registered adapter."""
        return [
            PlatformInfo(
                platform=adapter.id,
                tier=get_platform_tier(adapter.id),
                capabilities=sorted(c.value for c in adapter.capabilities),
                plugin=adapter.id in PLUGIN_PLATFORMS,
            )
            for adapter in self.registry.list()
        ]
