"""Platform endpoints — Registered sources and field recommendations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from paperscout.api.deps import get_engine
from paperscout.core.engine import PaperScoutEngine
from paperscout.models.response import PlatformInfo, RecommendationResponse

router = APIRouter(prefix="/platforms", tags=["platforms"])


@router.get(
    "",
    response_model=list[PlatformInfo],
    summary="List Platforms",
    description="Registered platforms with tier and supported operations.",
)
async def list_platforms(engine: PaperScoutEngine = Depends(get_engine)) -> list[PlatformInfo]:
    return engine.platforms()


@router.get(
    "/recommend",
    response_model=RecommendationResponse,
    summary="Recommend Platforms",
    description=(
        "Recommend platforms for a field of study (e.g. `biomedical`, `computer-science`, "
        "`cryptography`), best tier first. Unknown fields get the general defaults."
    ),
)
async def recommend_platforms(
    field: str | None = Query(default=None, description="Field of study"),
    engine: PaperScoutEngine = Depends(get_engine),
) -> RecommendationResponse:
    return engine.recommend(field)
