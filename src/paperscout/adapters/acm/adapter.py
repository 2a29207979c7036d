"""ACM Digital Library adapter — Computing literature from dl.acm.org.

API reference:
  GET https://dl.acm.org/action/doSearch?AllField=<q>&pageSize=<n>
  GET https://dl.acm.org/doi/pdf/<doi>
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import PlatformAdapter
from paperscout.adapters.base.utils import clean_text, normalize_doi, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

BASE_URL = "https://dl.acm.org"


class AcmAdapter(PlatformAdapter):
    """Search and download adapter for the ACM Digital Library."""

    id = "acm"

    async def search(self, query: SearchQuery) -> SearchResult:
        params = {"AllField": query.text, "pageSize": query.limit}
        data = await self.http.get_json(
            f"{BASE_URL}/action/doSearch", params=params, headers={"Accept": "application/json"}
        )
        items = [paper for raw in data.get("hits") or [] if (paper := self.map_hit(raw))]
        return SearchResult(items=items[: query.limit], source=self.id, meta={"count": len(items)})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        url = f"{BASE_URL}/doi/pdf/{paper_id}"
        return await self.context.cache.fetch(self.id, paper_id, directory, lambda: self.http.get_bytes(url))

    def map_hit(self, hit: dict[str, Any]) -> Paper | None:
        doi = normalize_doi(hit.get("doi"))
        paper_id = str(hit.get("id") or doi or "")
        if not paper_id:
            return None
        return Paper(
            id=paper_id,
            title=clean_text(hit.get("title")),
            authors=[a["name"] for a in hit.get("authors") or [] if a.get("name")],
            abstract=clean_text(hit.get("abstract")),
            doi=doi,
            published_at=to_iso(hit.get("publicationDate")),
            pdf_url=f"{BASE_URL}/doi/pdf/{doi}" if doi else None,
            url=f"https://doi.org/{doi}" if doi else None,
            source=self.id,
            keywords=list(hit.get("keywords") or []),
        )
