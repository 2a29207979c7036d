"""Scopus adapter — Elsevier's abstract and citation database.

Every call needs ``credentials.scopus_api_key``, sent as ``X-ELS-APIKey``.
Full text is served only for articles the key's institution subscribes to.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import PlatformAdapter
from paperscout.adapters.base.utils import clean_text, normalize_doi, split_authors, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

API_URL = "https://api.elsevier.com/content"
SCOPUS_ID_PREFIX = "SCOPUS_ID:"


def _int_or_none(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ScopusAdapter(PlatformAdapter):
    """Search adapter for Scopus (requires an API key)."""

    id = "scopus"

    def _auth_headers(self) -> dict[str, str]:
        return {"X-ELS-APIKey": self.require_credential("scopus_api_key"), "Accept": "application/json"}

    async def search(self, query: SearchQuery) -> SearchResult:
        headers = self._auth_headers()
        params: dict[str, Any] = {"query": query.text, "count": query.limit}
        if query.cursor and query.cursor.isdigit():
            params["start"] = int(query.cursor)

        data = await self.http.get_json(f"{API_URL}/search/scopus", params=params, headers=headers)
        results = data.get("search-results") or {}
        items = [paper for raw in results.get("entry") or [] if (paper := self.map_entry(raw))]
        return SearchResult(
            items=items,
            source=self.id,
            meta={"count": len(items), "total": _int_or_none(results.get("opensearch:totalResults"))},
        )

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        headers = {**self._auth_headers(), "Accept": "application/pdf"}
        url = f"{API_URL}/article/scopus_id/{paper_id}"
        return await self.context.cache.fetch(
            self.id, paper_id, directory, lambda: self.http.get_bytes(url, headers=headers)
        )

    def map_entry(self, entry: dict[str, Any]) -> Paper | None:
        # Scopus reports an empty result set as a single entry carrying "error".
        if "error" in entry:
            return None
        identifier = str(entry.get("dc:identifier") or "").removeprefix(SCOPUS_ID_PREFIX)
        if not identifier:
            return None
        doi = normalize_doi(entry.get("prism:doi"))
        return Paper(
            id=identifier,
            title=clean_text(entry.get("dc:title")),
            authors=split_authors(entry.get("dc:creator"), separator=";"),
            abstract=clean_text(entry.get("dc:description")),
            doi=doi,
            published_at=to_iso(entry.get("prism:coverDate")),
            url=f"https://doi.org/{doi}" if doi else entry.get("prism:url"),
            source=self.id,
            citations=_int_or_none(entry.get("citedby-count")),
            extra={"publication_name": entry.get("prism:publicationName") or ""},
        )
