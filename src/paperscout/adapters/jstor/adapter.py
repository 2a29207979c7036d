"""JSTOR adapter — Humanities and social science archive at www.jstor.org.

PDF access depends on the caller's institutional entitlement; an
unentitled download fails upstream and surfaces as a ``DownloadError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import PlatformAdapter
from paperscout.adapters.base.utils import clean_text, normalize_doi, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

BASE_URL = "https://www.jstor.org"


class JstorAdapter(PlatformAdapter):
    """Search and download adapter for JSTOR."""

    id = "jstor"

    async def search(self, query: SearchQuery) -> SearchResult:
        data = await self.http.get_json(
            f"{BASE_URL}/api/search", params={"q": query.text, "limit": query.limit}
        )
        items = [paper for raw in data.get("docs") or [] if (paper := self.map_doc(raw))]
        return SearchResult(items=items, source=self.id, meta={"count": len(items), "total": data.get("numFound")})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        url = f"{BASE_URL}/stable/pdf/{paper_id}.pdf"
        return await self.context.cache.fetch(self.id, paper_id, directory, lambda: self.http.get_bytes(url))

    def map_doc(self, doc: dict[str, Any]) -> Paper | None:
        doc_id = str(doc.get("id") or "")
        if not doc_id:
            return None
        return Paper(
            id=doc_id,
            title=clean_text(doc.get("title")),
            authors=[clean_text(a) for a in doc.get("author") or [] if clean_text(a)],
            abstract=clean_text(doc.get("abstract")),
            doi=normalize_doi(doc.get("doi")),
            published_at=to_iso(doc.get("publicationDate")),
            pdf_url=f"{BASE_URL}/stable/pdf/{doc_id}.pdf",
            url=f"{BASE_URL}/stable/{doc_id}",
            source=self.id,
            categories=list(doc.get("discipline") or []),
            keywords=list(doc.get("keyword") or []),
        )
