"""Microsoft Academic adapter — Knowledge API evaluate endpoint.

Queries are expressed in the service's own expression language; the free
text is matched against author names for papers published after 2000.
Requires ``credentials.microsoft_academic_api_key``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import PlatformAdapter
from paperscout.adapters.base.utils import clean_text, normalize_doi, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

API_URL = "https://api.labs.cognitive.microsoft.com/academic/v1.0"
ATTRIBUTES = "Id,Ti,AA.AuN,D,DOI,S,Y,CC"


def build_expression(text: str) -> str:
    escaped = text.replace("'", "\\'")
    return f"And(Composite(AA.AuN=='{escaped}'),Y>2000)"


class MicrosoftAcademicAdapter(PlatformAdapter):
    """Search adapter for Microsoft Academic (requires a subscription key)."""

    id = "microsoft-academic"

    def _auth_headers(self) -> dict[str, str]:
        return {"Ocp-Apim-Subscription-Key": self.require_credential("microsoft_academic_api_key")}

    async def search(self, query: SearchQuery) -> SearchResult:
        headers = self._auth_headers()
        params: dict[str, Any] = {
            "expr": build_expression(query.text),
            "count": query.limit,
            "attributes": ATTRIBUTES,
        }
        data = await self.http.get_json(f"{API_URL}/evaluate", params=params, headers=headers)
        items = [paper for raw in data.get("entities") or [] if (paper := self.map_entity(raw))]
        return SearchResult(items=items, source=self.id, meta={"count": len(items), "expr": params["expr"]})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        headers = self._auth_headers()
        url = f"{API_URL}/paper/{paper_id}/pdf"
        return await self.context.cache.fetch(
            self.id, paper_id, directory, lambda: self.http.get_bytes(url, headers=headers)
        )

    def map_entity(self, entity: dict[str, Any]) -> Paper | None:
        entity_id = entity.get("Id")
        if entity_id is None or entity_id == "":
            return None
        doi = normalize_doi(entity.get("DOI"))
        year = entity.get("Y")
        return Paper(
            id=str(entity_id),
            title=clean_text(entity.get("Ti")),
            authors=[a["AuN"] for a in entity.get("AA") or [] if a.get("AuN")],
            abstract=clean_text(entity.get("D")),
            doi=doi,
            published_at=to_iso(year) if isinstance(year, int) else None,
            url=f"https://doi.org/{doi}" if doi else None,
            source=self.id,
            citations=entity.get("CC"),
        )
