"""Crossref adapter — DOI metadata search via the Crossref REST API.

API reference:
  GET https://api.crossref.org/works?query=<q>&rows=<n>&sort=&order=&filter=&mailto=
  GET https://api.crossref.org/works/<doi>

Crossref holds metadata only; downloads are not supported.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from paperscout.adapters.base.adapter import METADATA_ONLY, Capability, PlatformAdapter
from paperscout.adapters.base.utils import clean_text, date_parts_to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

API_URL = "https://api.crossref.org"
CONTACT_EMAIL = "paperscout@example.org"
MAX_ROWS = 1000


def _pick_pdf_url(item: dict[str, Any]) -> str | None:
    primary = ((item.get("resource") or {}).get("primary") or {}).get("URL")
    if isinstance(primary, str) and primary.endswith(".pdf"):
        return primary
    for link in item.get("link") or []:
        if "pdf" in str(link.get("content-type", "")).lower() and link.get("URL"):
            return link["URL"]
    return None


class CrossrefAdapter(PlatformAdapter):
    """Search adapter for Crossref (metadata only, with DOI lookup).

    Supported filters: ``sort`` (default ``relevance``), ``order`` (default
    ``desc``) and ``filter`` (raw Crossref filter expression).
    """

    id = "crossref"
    capabilities = METADATA_ONLY | {Capability.LOOKUP}

    async def search(self, query: SearchQuery) -> SearchResult:
        params: dict[str, Any] = {
            "query": query.text,
            "rows": min(query.limit, MAX_ROWS),
            "sort": query.filter_str("sort") or "relevance",
            "order": query.filter_str("order") or "desc",
            "mailto": CONTACT_EMAIL,
        }
        if query.filter_str("filter"):
            params["filter"] = query.filter_str("filter")
        if query.cursor and query.cursor.isdigit():
            params["offset"] = int(query.cursor)

        data = await self.http.get_json(f"{API_URL}/works", params=params, headers={"Accept": "application/json"})
        message = data.get("message") or {}
        items = [paper for raw in message.get("items") or [] if (paper := self.map_item(raw))]
        return SearchResult(
            items=items,
            source=self.id,
            meta={"count": len(items), "total": message.get("total-results"), "params": params},
        )

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        raise self.unsupported("download", "Crossref provides metadata only; resolve the DOI at the publisher")

    async def lookup(self, paper_id: str) -> Paper | None:
        url = f"{API_URL}/works/{quote(paper_id, safe='')}"
        try:
            data = await self.http.get_json(url, params={"mailto": CONTACT_EMAIL})
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise
        message = data.get("message")
        return self.map_item(message) if isinstance(message, dict) else None

    def map_item(self, item: dict[str, Any]) -> Paper | None:
        doi = item.get("DOI")
        if not doi:
            return None
        titles = item.get("title") or []
        container = item.get("container-title") or []
        published = (
            date_parts_to_iso(item.get("published"))
            or date_parts_to_iso(item.get("issued"))
            or date_parts_to_iso(item.get("created"))
        )
        authors = [
            f"{a.get('given', '')} {a.get('family', '')}".strip() for a in item.get("author") or []
        ]
        return Paper(
            id=doi,
            title=clean_text(titles[0]) if titles else "",
            authors=[a for a in authors if a],
            abstract=clean_text(item.get("abstract")),
            doi=doi,
            published_at=published,
            updated_at=published,
            pdf_url=_pick_pdf_url(item),
            url=item.get("URL") or f"https://doi.org/{doi}",
            source=self.id,
            categories=[item["type"]] if item.get("type") else [],
            keywords=list(item.get("subject") or []),
            citations=item.get("is-referenced-by-count"),
            extra={
                "publisher": item.get("publisher") or "",
                "container_title": container[0] if container else "",
                "volume": item.get("volume") or "",
                "issue": item.get("issue") or "",
                "page": item.get("page") or "",
                "issn": item.get("ISSN") or [],
            },
        )
