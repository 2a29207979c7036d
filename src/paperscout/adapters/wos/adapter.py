"""Web of Science adapter — Citation index search via the Clarivate WoS API.

API reference:
  GET https://api.clarivate.com/api/wos?databaseId=WOS&usrQuery=<q>&count=<n>&firstRecord=<k>

Every call needs ``credentials.wos_api_key``; the adapter registers without
one and raises ``PlatformError`` when an operation runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import PlatformAdapter
from paperscout.adapters.base.utils import clean_text, normalize_doi, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

API_URL = "https://api.clarivate.com/api/wos"
PDF_URL = "https://www.webofscience.com/api/gateway/wos/pdf"


class WosAdapter(PlatformAdapter):
    """Search adapter for Web of Science (requires an API key)."""

    id = "wos"

    def _auth_headers(self) -> dict[str, str]:
        return {"X-ApiKey": self.require_credential("wos_api_key")}

    async def search(self, query: SearchQuery) -> SearchResult:
        headers = self._auth_headers()
        first = int(query.cursor) if query.cursor and query.cursor.isdigit() else 1
        params: dict[str, Any] = {
            "databaseId": "WOS",
            "usrQuery": query.text,
            "count": query.limit,
            "firstRecord": first,
        }
        data = await self.http.get_json(API_URL, params=params, headers=headers)
        items = [paper for raw in data.get("Data") or [] if (paper := self.map_record(raw))]
        total = (data.get("QueryResult") or {}).get("RecordsFound")
        next_first = first + len(items)
        return SearchResult(
            items=items,
            next_cursor=str(next_first) if isinstance(total, int) and items and next_first <= total else None,
            source=self.id,
            meta={"count": len(items), "total": total},
        )

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        headers = self._auth_headers()
        url = f"{PDF_URL}/{paper_id}"
        return await self.context.cache.fetch(
            self.id, paper_id, directory, lambda: self.http.get_bytes(url, headers=headers)
        )

    def map_record(self, record: dict[str, Any]) -> Paper | None:
        uid = str(record.get("UID") or "")
        if not uid:
            return None
        authors = (record.get("authors") or {}).get("authors") or []
        identifiers = record.get("identifiers") or {}
        published = to_iso((record.get("source") or {}).get("published_biblio_date"))
        return Paper(
            id=uid,
            title=clean_text((record.get("title") or {}).get("title")),
            authors=[a["wos_standard"] for a in authors if a.get("wos_standard")],
            abstract=clean_text(record.get("abstract")),
            doi=normalize_doi(identifiers.get("doi")),
            published_at=published,
            pdf_url=f"{PDF_URL}/{uid}",
            url=f"https://www.webofscience.com/wos/woscc/full-record/{uid}",
            source=self.id,
            categories=list(record.get("categories") or []),
            keywords=list(record.get("keywords") or []),
        )
