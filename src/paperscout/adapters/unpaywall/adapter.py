"""Unpaywall plugin — Open-access locations by DOI.

Unpaywall requires a contact email on every request, so the adapter refuses
to construct without a plausible ``credentials.unpaywall_email``.  Search
treats the query text as a DOI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from paperscout.adapters.base.adapter import FULL_TEXT, AdapterContext, Capability, PlatformAdapter
from paperscout.adapters.base.utils import normalize_doi, to_iso
from paperscout.adapters.plugins import PluginModule
from paperscout.core.exceptions import ConfigurationError, DownloadError
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

API_URL = "https://api.unpaywall.org/v2"


class UnpaywallAdapter(PlatformAdapter):
    """Plugin adapter for Unpaywall.

    Raises:
        ConfigurationError: At construction, if no valid contact email is configured.
    """

    id = "unpaywall"
    capabilities = FULL_TEXT | {Capability.LOOKUP}

    def __init__(self, context: AdapterContext) -> None:
        super().__init__(context)
        email = context.settings.credentials.unpaywall_email
        if not email or "@" not in email:
            raise ConfigurationError(
                "Unpaywall requires a contact email. Set PAPERSCOUT_CREDENTIALS__UNPAYWALL_EMAIL."
            )
        self._email = email

    async def search(self, query: SearchQuery) -> SearchResult:
        doi = normalize_doi(query.text)
        paper = await self.lookup(doi) if doi else None
        return SearchResult(items=[paper] if paper else [], source=self.id, meta={"doi": doi})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        async def fetch() -> bytes:
            paper = await self.lookup(paper_id)
            if paper is None or not paper.pdf_url:
                raise DownloadError(f"Unpaywall has no open-access PDF for {paper_id}", self.id)
            return await self.http.get_bytes(paper.pdf_url)

        return await self.context.cache.fetch(self.id, paper_id, directory, fetch)

    async def lookup(self, paper_id: str) -> Paper | None:
        url = f"{API_URL}/{quote(paper_id, safe='/')}"
        try:
            data = await self.http.get_json(url, params={"email": self._email})
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise
        if data.get("error") or not data.get("doi"):
            return None
        return self.map_record(data)

    def map_record(self, data: dict[str, Any]) -> Paper:
        best = data.get("best_oa_location") or {}
        authors = [
            " ".join(part for part in (a.get("given"), a.get("family")) if part)
            for a in data.get("z_authors") or []
        ]
        return Paper(
            id=data["doi"],
            title=data.get("title") or "",
            authors=[a for a in authors if a],
            doi=data["doi"],
            published_at=to_iso(data.get("published_date")),
            pdf_url=best.get("url_for_pdf"),
            url=data.get("doi_url") or best.get("url"),
            source=self.id,
            extra={
                "oa_status": data.get("oa_status"),
                "is_oa": data.get("is_oa"),
                "journal": data.get("journal_name"),
            },
        )


plugin = PluginModule(id=UnpaywallAdapter.id, enabled=True, create=UnpaywallAdapter)
