"""PubMed adapter — Biomedical citation search via NCBI E-utilities.

Two-step search: ``esearch`` returns PMIDs, ``efetch`` returns the article
records as XML.  PubMed only carries abstracts, so the adapter is
metadata-only; full text lives in PMC (see the ``pmc`` adapter).
"""

from __future__ import annotations

from pathlib import Path

from bs4 import Tag

from paperscout.adapters.base.adapter import METADATA_ONLY, PlatformAdapter
from paperscout.adapters.base.utils import node_text, parse_xml, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

ESEARCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esearch.fcgi"
EFETCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/efetch.fcgi"

_MONTHS = {
    "jan": "01", "feb": "02", "mar": "03", "apr": "04", "may": "05", "jun": "06",
    "jul": "07", "aug": "08", "sep": "09", "oct": "10", "nov": "11", "dec": "12",
}  # fmt: skip


def _pub_date(node: Tag | None) -> str | None:
    """``<PubDate><Year/><Month/><Day/></PubDate>`` to ISO-8601."""
    if node is None:
        return None
    year = node_text(node.find("Year"))
    if not year.isdigit():
        return None
    month_raw = node_text(node.find("Month"))
    month = month_raw.zfill(2) if month_raw.isdigit() else _MONTHS.get(month_raw[:3].lower(), "01")
    day_raw = node_text(node.find("Day"))
    day = day_raw.zfill(2) if day_raw.isdigit() else "01"
    return to_iso(f"{year}-{month}-{day}") or to_iso(f"{year}-01-01")


class PubmedAdapter(PlatformAdapter):
    """Search adapter for PubMed (metadata only)."""

    id = "pubmed"
    capabilities = METADATA_ONLY

    async def search(self, query: SearchQuery) -> SearchResult:
        params = {"db": "pubmed", "term": query.text, "retmax": query.limit, "retmode": "xml"}
        if query.year:
            params["term"] = f"{query.text} AND {query.year}[dp]"
        ids_doc = parse_xml(await self.http.get_text(ESEARCH_URL, params=params))
        ids = [node_text(node) for node in ids_doc.select("IdList > Id")]
        if not ids:
            return SearchResult(items=[], source=self.id, meta={"count": 0})

        fetch_params = {"db": "pubmed", "id": ",".join(ids), "retmode": "xml"}
        articles = parse_xml(await self.http.get_text(EFETCH_URL, params=fetch_params))
        items = [paper for node in articles.find_all("PubmedArticle") if (paper := self.map_article(node))]
        return SearchResult(items=items, source=self.id, meta={"count": len(items)})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        raise self.unsupported("download", "PubMed provides abstracts only; use the publisher site or PMC")

    def map_article(self, node: Tag) -> Paper | None:
        citation = node.find("MedlineCitation")
        article = citation.find("Article") if citation else None
        pmid = node_text(citation.find("PMID")) if citation else ""
        if article is None or not pmid:
            return None

        authors = []
        for author in article.select("AuthorList > Author"):
            name = f"{node_text(author.find('LastName'))} {node_text(author.find('Initials'))}".strip()
            if name:
                authors.append(name)

        doi = None
        for location in article.find_all("ELocationID"):
            if location.get("EIdType", "").lower() == "doi":
                doi = node_text(location) or None
                break

        published = _pub_date(article.select_one("Journal > JournalIssue > PubDate"))
        keywords = [node_text(k) for k in citation.select("KeywordList > Keyword")]
        return Paper(
            id=pmid,
            title=node_text(article.find("ArticleTitle")),
            authors=authors,
            abstract="\n".join(node_text(a) for a in article.select("Abstract > AbstractText")),
            doi=doi,
            published_at=published,
            updated_at=published,
            url=f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/",
            source=self.id,
            keywords=[k for k in keywords if k],
            extra={"journal": node_text(article.select_one("Journal > Title"))},
        )
