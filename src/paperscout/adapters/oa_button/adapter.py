"""Open Access Button plugin — Legal open-access copies by DOI, URL or title."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import FULL_TEXT, Capability, PlatformAdapter
from paperscout.adapters.plugins import PluginModule
from paperscout.core.exceptions import DownloadError
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

MAX_PER_PAGE = 25

_DOI = re.compile(r"10\.\d{4,9}/")


def looks_like_doi(value: str) -> bool:
    return bool(_DOI.search(value))


class OAButtonAdapter(PlatformAdapter):
    """Plugin adapter for the Open Access Button ``find`` API."""

    id = "oa-button"
    capabilities = FULL_TEXT | {Capability.LOOKUP}

    @property
    def api_url(self) -> str:
        return self.context.settings.endpoints.oa_button_api_url

    async def search(self, query: SearchQuery) -> SearchResult:
        text = query.text.strip()
        params: dict[str, Any] = {"page": 1, "per_page": min(query.limit, MAX_PER_PAGE)}
        if looks_like_doi(text):
            params["doi"] = text
        elif text.startswith("http"):
            params["url"] = text
        else:
            params["title"] = text

        data = await self.http.get_json(self.api_url, params=params)
        items = [paper for raw in _records(data) if (paper := self.map_record(raw))][: query.limit]
        return SearchResult(items=items, source=self.id, meta={"count": len(items)})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        async def fetch() -> bytes:
            paper = await self.lookup(paper_id)
            if paper is None or not paper.pdf_url:
                raise DownloadError(f"Open Access Button found no PDF for {paper_id}", self.id)
            return await self.http.get_bytes(paper.pdf_url)

        return await self.context.cache.fetch(self.id, paper_id, directory, fetch)

    async def lookup(self, paper_id: str) -> Paper | None:
        key = "doi" if looks_like_doi(paper_id) else "url"
        data = await self.http.get_json(self.api_url, params={key: paper_id})
        for raw in _records(data):
            paper = self.map_record(raw)
            if paper is not None:
                return paper
        return None

    def map_record(self, item: dict[str, Any]) -> Paper | None:
        best = item.get("best_oa_location") or item.get("best_permission") or {}
        doi = item.get("doi") or None
        paper_id = doi or item.get("url") or item.get("id")
        if not paper_id:
            return None
        return Paper(
            id=str(paper_id),
            title=item.get("title") or item.get("url") or "Open Access Result",
            authors=[a["name"] for a in item.get("authors") or [] if isinstance(a, dict) and a.get("name")],
            abstract=item.get("abstract") or "",
            doi=doi,
            pdf_url=best.get("url_for_pdf") or None,
            url=item.get("url") or best.get("url"),
            source=self.id,
            extra={"api": "openaccessbutton"},
        )


def _records(data: Any) -> list[dict[str, Any]]:
    """The API answers with ``{"data": [...]}`` or a single record object."""
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        return [r for r in data["data"] if isinstance(r, dict)]
    if isinstance(data, dict) and (data.get("doi") or data.get("url")):
        return [data]
    return []


plugin = PluginModule(id=OAButtonAdapter.id, enabled=True, create=OAButtonAdapter)
