"""Library Genesis plugin — Scientific articles from the LibGen scimag index."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from bs4 import Tag

from paperscout.adapters.base.adapter import FULL_TEXT, Capability, PlatformAdapter
from paperscout.adapters.base.utils import node_text, parse_html, split_authors, to_iso
from paperscout.adapters.plugins import PluginModule
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult


class LibgenAdapter(PlatformAdapter):
    """Plugin adapter for the LibGen scimag catalog (``endpoints.libgen_base_url``)."""

    id = "libgen"
    capabilities = FULL_TEXT | {Capability.LOOKUP}

    @property
    def base_url(self) -> str:
        return self.context.settings.endpoints.libgen_base_url

    async def search(self, query: SearchQuery) -> SearchResult:
        items = (await self._search_rows(query.text))[: query.limit]
        return SearchResult(items=items, source=self.id, meta={"count": len(items)})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        url = f"{self.base_url}/scimag/get.php"
        return await self.context.cache.fetch(
            self.id, paper_id, directory, lambda: self.http.get_bytes(url, params={"doi": paper_id})
        )

    async def lookup(self, paper_id: str) -> Paper | None:
        rows = await self._search_rows(paper_id)
        return rows[0] if rows else None

    async def _search_rows(self, text: str) -> list[Paper]:
        html = await self.http.get_text(f"{self.base_url}/scimag/", params={"q": text})
        soup = parse_html(html)
        rows = soup.select("table.catalog tr")[1:]
        return [paper for row in rows if (paper := self.map_row(row))]

    def map_row(self, row: Tag) -> Paper | None:
        cells = row.find_all("td")
        if len(cells) < 5:
            return None
        doi = node_text(cells[1])
        title = node_text(cells[2])
        if not (doi or title):
            return None
        year = node_text(cells[4])
        link = cells[5].find("a", href=lambda h: bool(h) and "download" in h) if len(cells) > 5 else None
        pdf_url = None
        if link is not None:
            href = link["href"]
            pdf_url = href if href.startswith("http") else f"{self.base_url}{href}"

        return Paper(
            id=doi or title,
            title=title,
            authors=split_authors(node_text(cells[3])),
            doi=doi or None,
            published_at=to_iso(int(year)) if year.isdigit() else None,
            pdf_url=pdf_url,
            url=f"{self.base_url}/scimag/{quote(doi, safe='/')}" if doi else None,
            source=self.id,
        )


plugin = PluginModule(id=LibgenAdapter.id, enabled=True, create=LibgenAdapter)
