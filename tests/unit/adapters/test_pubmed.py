"""Tests for the PubMed adapter."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from paperscout.adapters.base.adapter import AdapterContext, Capability
from paperscout.adapters.pubmed.adapter import PubmedAdapter
from paperscout.core.exceptions import UnsupportedOperationError
from paperscout.models.query import SearchQuery

ESEARCH_XML = """<?xml version="1.0" ?>
<eSearchResult><Count>1</Count><IdList><Id>38000001</Id></IdList></eSearchResult>
"""

EMPTY_ESEARCH_XML = """<?xml version="1.0" ?>
<eSearchResult><Count>0</Count><IdList/></eSearchResult>
"""

EFETCH_XML = """<?xml version="1.0" ?>
<PubmedArticleSet>
  <PubmedArticle>
    <MedlineCitation Status="MEDLINE">
      <PMID Version="1">38000001</PMID>
      <Article>
        <Journal>
          <JournalIssue>
            <PubDate><Year>2023</Year><Month>Nov</Month><Day>7</Day></PubDate>
          </JournalIssue>
          <Title>Cell Reports</Title>
        </Journal>
        <ArticleTitle>Gut microbiota and immunity.</ArticleTitle>
        <Abstract>
          <AbstractText Label="BACKGROUND">First part.</AbstractText>
          <AbstractText Label="RESULTS">Second part.</AbstractText>
        </Abstract>
        <AuthorList>
          <Author><LastName>Nguyen</LastName><Initials>T</Initials></Author>
          <Author><LastName>Garcia</LastName><Initials>ML</Initials></Author>
        </AuthorList>
        <ELocationID EIdType="pii">S2211-1247(23)01234-5</ELocationID>
        <ELocationID EIdType="doi">10.1016/j.celrep.2023.113456</ELocationID>
      </Article>
      <KeywordList><Keyword>microbiome</Keyword><Keyword>immunity</Keyword></KeywordList>
    </MedlineCitation>
  </PubmedArticle>
</PubmedArticleSet>
"""


class TestPubmedSearch:
    @pytest.mark.asyncio
    async def test_maps_articles(self, make_context: Callable[..., AdapterContext]) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path.endswith("esearch.fcgi"):
                return httpx.Response(200, text=ESEARCH_XML)
            return httpx.Response(200, text=EFETCH_XML)

        result = await PubmedAdapter(make_context(handler)).search(SearchQuery(text="microbiota", limit=3))

        assert requests[1].url.params["id"] == "38000001"
        assert len(result.items) == 1
        paper = result.items[0]
        assert paper.id == "38000001"
        assert paper.title == "Gut microbiota and immunity."
        assert paper.authors == ["Nguyen T", "Garcia ML"]
        assert paper.abstract == "First part.\nSecond part."
        assert paper.doi == "10.1016/j.celrep.2023.113456"
        assert paper.published_at == "2023-11-07T00:00:00+00:00"
        assert paper.keywords == ["microbiome", "immunity"]
        assert paper.url == "https://pubmed.ncbi.nlm.nih.gov/38000001/"
        assert paper.extra["journal"] == "Cell Reports"

    @pytest.mark.asyncio
    async def test_year_is_added_to_term(self, make_context: Callable[..., AdapterContext]) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, text=EMPTY_ESEARCH_XML)

        result = await PubmedAdapter(make_context(handler)).search(SearchQuery(text="asthma", year="2022"))
        assert requests[0].url.params["term"] == "asthma AND 2022[dp]"
        assert result.items == []
        assert len(requests) == 1


class TestPubmedDownload:
    @pytest.mark.asyncio
    async def test_metadata_only(self, make_context: Callable[..., AdapterContext], tmp_path: Path) -> None:
        adapter = PubmedAdapter(make_context(lambda r: httpx.Response(500)))
        assert adapter.capabilities == {Capability.SEARCH}
        with pytest.raises(UnsupportedOperationError):
            await adapter.download("38000001", tmp_path)
        with pytest.raises(UnsupportedOperationError):
            await adapter.read("38000001", tmp_path)
