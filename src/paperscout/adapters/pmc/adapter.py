"""PMC adapter — Open-access full-text articles from PubMed Central.

Search uses E-utilities ``esearch`` + ``esummary`` in JSON mode; records
without a PMCID are skipped.  Identifiers are normalized to the ``PMC…``
form for downloads and lookups.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import FULL_TEXT, Capability, PlatformAdapter
from paperscout.adapters.base.utils import to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

ESEARCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esearch.fcgi"
ESUMMARY_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esummary.fcgi"
ARTICLE_URL = "https://www.ncbi.nlm.nih.gov/pmc/articles"


def normalize_pmcid(value: str) -> str:
    """``"12345"`` and ``"pmc12345"`` both become ``"PMC12345"``."""
    value = value.strip()
    if value[:3].upper() == "PMC":
        return "PMC" + value[3:]
    return f"PMC{value}"


class PmcAdapter(PlatformAdapter):
    """Search adapter for PubMed Central."""

    id = "pmc"
    capabilities = FULL_TEXT | {Capability.LOOKUP}

    async def search(self, query: SearchQuery) -> SearchResult:
        params = {"db": "pmc", "term": query.text, "retmode": "json", "retmax": query.limit}
        data = await self.http.get_json(ESEARCH_URL, params=params)
        ids: list[str] = (data.get("esearchresult") or {}).get("idlist") or []
        if not ids:
            return SearchResult(items=[], source=self.id, meta={"count": 0})

        summary = await self.http.get_json(ESUMMARY_URL, params={"db": "pmc", "id": ",".join(ids), "retmode": "json"})
        result = summary.get("result") or {}
        items = []
        for uid in result.get("uids") or ids:
            paper = self.map_summary(result.get(uid) or {})
            if paper is not None:
                items.append(paper)
        items = items[: query.limit]
        return SearchResult(items=items, source=self.id, meta={"count": len(items)})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        pmcid = normalize_pmcid(paper_id)
        url = f"{ARTICLE_URL}/{pmcid}/pdf"
        return await self.context.cache.fetch(self.id, pmcid, directory, lambda: self.http.get_bytes(url))

    async def lookup(self, paper_id: str) -> Paper | None:
        numeric = normalize_pmcid(paper_id)[3:]
        summary = await self.http.get_json(ESUMMARY_URL, params={"db": "pmc", "id": numeric, "retmode": "json"})
        result = summary.get("result") or {}
        for value in result.values():
            if isinstance(value, dict) and value.get("articleids"):
                return self.map_summary(value)
        return None

    def map_summary(self, item: dict[str, Any]) -> Paper | None:
        article_ids = {entry.get("idtype"): entry.get("value") for entry in item.get("articleids") or []}
        pmcid = article_ids.get("pmcid")
        if not pmcid:
            return None
        pmcid = normalize_pmcid(pmcid)
        published = to_iso(item.get("pubdate")) or to_iso(item.get("sortdate"))
        return Paper(
            id=pmcid,
            title=item.get("title") or "",
            authors=[a["name"] for a in item.get("authors") or [] if a.get("name")],
            doi=article_ids.get("doi") or None,
            published_at=published,
            updated_at=published,
            pdf_url=f"{ARTICLE_URL}/{pmcid}/pdf",
            url=f"{ARTICLE_URL}/{pmcid}/",
            source=self.id,
            extra={"journal": item.get("source") or ""},
        )
