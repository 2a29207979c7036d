"""Semantic Scholar adapter — Search via the Academic Graph API.

API reference:
  GET https://api.semanticscholar.org/graph/v1/paper/search?query=&limit=&offset=&fields=
  GET https://api.semanticscholar.org/graph/v1/paper/<id>?fields=

An API key (``credentials.semantic_scholar_api_key``) is optional and only
raises the rate limit.  PDFs come from the ``openAccessPdf`` field.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from paperscout.adapters.base.adapter import FULL_TEXT, Capability, PlatformAdapter
from paperscout.adapters.base.utils import to_iso
from paperscout.core.exceptions import DownloadError
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

API_URL = "https://api.semanticscholar.org/graph/v1"
FIELDS = ",".join(
    [
        "title",
        "abstract",
        "year",
        "citationCount",
        "influentialCitationCount",
        "authors",
        "url",
        "venue",
        "publicationDate",
        "externalIds",
        "fieldsOfStudy",
        "tldr",
        "isOpenAccess",
        "openAccessPdf",
    ]
)

_URL = re.compile(r"https?://[^\s,)]+")


def extract_pdf_url(open_access: dict[str, Any] | None) -> str | None:
    """PDF link from ``openAccessPdf``, falling back to links in its disclaimer."""
    if not open_access:
        return None
    if open_access.get("url"):
        return open_access["url"]
    links = _URL.findall(open_access.get("disclaimer") or "")
    if not links:
        return None
    for link in links:
        if "doi.org" in link:
            return link
    alt = next((link for link in links if "unpaywall.org" not in link), links[0])
    return alt.replace("/abs/", "/pdf/") if "arxiv.org/abs/" in alt else alt


class SemanticScholarAdapter(PlatformAdapter):
    """Search adapter for Semantic Scholar.

    ``cursor`` is the numeric result offset; ``filters.year`` (or
    ``query.year``) restricts by publication year.
    """

    id = "semantic"
    capabilities = FULL_TEXT | {Capability.LOOKUP}

    @property
    def headers(self) -> dict[str, str]:
        key = self.context.settings.credentials.semantic_scholar_api_key
        return {"x-api-key": key} if key else {}

    async def search(self, query: SearchQuery) -> SearchResult:
        params: dict[str, Any] = {"query": query.text, "limit": query.limit, "fields": FIELDS}
        year = query.year or query.filter_str("year") or query.filter_number("year")
        if year:
            params["year"] = str(int(year) if isinstance(year, float) else year)
        if query.cursor:
            params["offset"] = query.cursor
        elif query.filter_number("offset") is not None:
            params["offset"] = int(query.filter_number("offset") or 0)

        data = await self.http.get_json(f"{API_URL}/paper/search", params=params, headers=self.headers)
        items = [self.map_item(raw) for raw in data.get("data") or [] if raw.get("paperId")]
        next_offset = data.get("next")
        return SearchResult(
            items=items,
            next_cursor=str(next_offset) if next_offset is not None else None,
            source=self.id,
            meta={"count": len(items), "total": data.get("total"), "params": params},
        )

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        async def fetch() -> bytes:
            paper = await self.lookup(paper_id)
            if paper is None:
                raise DownloadError(f"Paper {paper_id} not found", self.id)
            if not paper.pdf_url:
                raise DownloadError(f"Paper {paper_id} has no open-access PDF", self.id)
            return await self.http.get_bytes(paper.pdf_url)

        return await self.context.cache.fetch(self.id, paper_id, directory, fetch)

    async def lookup(self, paper_id: str) -> Paper | None:
        url = f"{API_URL}/paper/{quote(paper_id, safe=':')}"
        try:
            data = await self.http.get_json(url, params={"fields": FIELDS}, headers=self.headers)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise
        return self.map_item(data) if data.get("paperId") else None

    def map_item(self, item: dict[str, Any]) -> Paper:
        external_ids = item.get("externalIds") or {}
        published = to_iso(item.get("publicationDate")) or to_iso(item.get("year"))
        return Paper(
            id=item["paperId"],
            title=item.get("title") or "",
            authors=[a["name"] for a in item.get("authors") or [] if a.get("name")],
            abstract=item.get("abstract") or "",
            doi=external_ids.get("DOI"),
            published_at=published,
            updated_at=published,
            pdf_url=extract_pdf_url(item.get("openAccessPdf")),
            url=item.get("url"),
            source=self.id,
            categories=list(item.get("fieldsOfStudy") or []),
            citations=item.get("citationCount"),
            extra={
                "external_ids": external_ids,
                "venue": item.get("venue") or "",
                "is_open_access": item.get("isOpenAccess"),
                "influential_citation_count": item.get("influentialCitationCount"),
                "tldr": (item.get("tldr") or {}).get("text"),
            },
        )
