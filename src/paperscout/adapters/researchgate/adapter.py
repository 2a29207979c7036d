"""ResearchGate adapter — Author-uploaded publications on www.researchgate.net."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import PlatformAdapter
from paperscout.adapters.base.utils import clean_text, normalize_doi, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

BASE_URL = "https://www.researchgate.net"


class ResearchGateAdapter(PlatformAdapter):
    """Search and download adapter for ResearchGate."""

    id = "researchgate"

    async def search(self, query: SearchQuery) -> SearchResult:
        data = await self.http.get_json(
            f"{BASE_URL}/api/search/publications", params={"query": query.text, "limit": query.limit}
        )
        publications = (data.get("data") or {}).get("publications") or []
        items = [paper for raw in publications if (paper := self.map_publication(raw))]
        return SearchResult(items=items, source=self.id, meta={"count": len(items)})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        url = f"{BASE_URL}/publication/{paper_id}/download"
        return await self.context.cache.fetch(self.id, paper_id, directory, lambda: self.http.get_bytes(url))

    def map_publication(self, publication: dict[str, Any]) -> Paper | None:
        publication_id = str(publication.get("id") or "")
        if not publication_id:
            return None
        return Paper(
            id=publication_id,
            title=clean_text(publication.get("title")),
            authors=[a["name"] for a in publication.get("authors") or [] if a.get("name")],
            abstract=clean_text(publication.get("abstract")),
            doi=normalize_doi(publication.get("doi")),
            published_at=to_iso(publication.get("publicationDate")),
            pdf_url=f"{BASE_URL}/publication/{publication_id}/download",
            url=f"{BASE_URL}/publication/{publication_id}",
            source=self.id,
            citations=publication.get("citationCount"),
        )
