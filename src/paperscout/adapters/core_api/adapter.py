"""CORE adapter — Open-access aggregator search via the CORE v3 API.

Every call needs ``credentials.core_api_key``; the adapter registers without
one but fails each operation with a ``PlatformError`` until it is set.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import PlatformAdapter
from paperscout.adapters.base.utils import normalize_doi, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

API_URL = "https://api.core.ac.uk/v3"


class CoreAdapter(PlatformAdapter):
    """Search adapter for CORE (requires an API key)."""

    id = "core"

    def _auth_headers(self) -> dict[str, str]:
        key = self.require_credential("core_api_key")
        return {"Authorization": f"Bearer {key}"}

    async def search(self, query: SearchQuery) -> SearchResult:
        headers = self._auth_headers()
        params: dict[str, Any] = {"q": query.text, "limit": query.limit}
        if query.cursor and query.cursor.isdigit():
            params["offset"] = int(query.cursor)

        data = await self.http.get_json(f"{API_URL}/search/works", params=params, headers=headers)
        items = [paper for raw in data.get("results") or [] if (paper := self.map_work(raw))]
        return SearchResult(
            items=items,
            source=self.id,
            meta={"count": len(items), "total": data.get("totalHits")},
        )

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        headers = self._auth_headers()
        url = f"{API_URL}/works/{paper_id}/download"
        return await self.context.cache.fetch(
            self.id, paper_id, directory, lambda: self.http.get_bytes(url, headers=headers)
        )

    def map_work(self, work: dict[str, Any]) -> Paper | None:
        work_id = work.get("id")
        if work_id is None or work_id == "":
            return None
        source_urls = work.get("sourceFulltextUrls") or []
        return Paper(
            id=str(work_id),
            title=work.get("title") or "",
            authors=[a["name"] for a in work.get("authors") or [] if a.get("name")],
            abstract=work.get("abstract") or "",
            doi=normalize_doi(work.get("doi")),
            published_at=to_iso(work.get("publishedDate")),
            updated_at=to_iso(work.get("updatedDate")),
            pdf_url=work.get("downloadUrl") or None,
            url=source_urls[0] if source_urls else None,
            source=self.id,
            extra={"year_published": work.get("yearPublished")},
        )
