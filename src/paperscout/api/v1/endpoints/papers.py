"""Paper endpoints — Search, download, read and lookup against one source."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from paperscout.api.deps import get_engine
from paperscout.core.engine import PaperScoutEngine
from paperscout.models.request import LookupRequest, LookupResponse, PaperRequest, PaperSearchRequest
from paperscout.models.response import ErrorPayload
from paperscout.models.result import DownloadResult, PaperText, SearchResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/papers", tags=["papers"])

_ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorPayload, "description": "Operation not supported by this platform"},
    404: {"model": ErrorPayload, "description": "Platform not registered or plugin disabled"},
    422: {"model": ErrorPayload, "description": "Invalid request or malformed upstream payload"},
    502: {"model": ErrorPayload, "description": "Download failed"},
    503: {"model": ErrorPayload, "description": "Upstream unavailable after retries"},
}


@router.post(
    "/search",
    response_model=SearchResult,
    summary="Search Papers",
    description="Search a single platform. Results keep the platform's own ordering.",
    responses=_ERROR_RESPONSES,
)
async def search_papers(
    request: PaperSearchRequest,
    engine: PaperScoutEngine = Depends(get_engine),
) -> SearchResult:
    return await engine.search(request.platform, request.to_query())


@router.post(
    "/download",
    response_model=DownloadResult,
    summary="Download Paper",
    description="Download a paper's PDF. Repeated calls return the cached file without a network request.",
    responses=_ERROR_RESPONSES,
)
async def download_paper(
    request: PaperRequest,
    engine: PaperScoutEngine = Depends(get_engine),
) -> DownloadResult:
    return await engine.download(request.platform, request.id, request.dir)


@router.post(
    "/read",
    response_model=PaperText,
    summary="Read Paper",
    description="Download (or reuse) a paper's PDF and return its extracted text.",
    responses=_ERROR_RESPONSES,
)
async def read_paper(
    request: PaperRequest,
    engine: PaperScoutEngine = Depends(get_engine),
) -> PaperText:
    return await engine.read(request.platform, request.id, request.dir)


@router.post(
    "/lookup",
    response_model=LookupResponse,
    summary="Lookup Paper",
    description="Resolve a single record by identifier on platforms that support lookup.",
    responses=_ERROR_RESPONSES,
)
async def lookup_paper(
    request: LookupRequest,
    engine: PaperScoutEngine = Depends(get_engine),
) -> LookupResponse:
    paper = await engine.lookup(request.platform, request.id)
    return LookupResponse(platform=request.platform, id=request.id, paper=paper)
