"""Health check endpoint — Liveness plus scheduler load."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from paperscout import __version__
from paperscout.api.deps import get_engine
from paperscout.core.engine import PaperScoutEngine

router = APIRouter()


class HealthResponse(BaseModel):
    """System health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="PaperScout server version")
    service: str = Field(description="Service name ('paperscout')")
    platforms: list[str] = Field(description="Registered platform identifiers")
    active_requests: int = Field(description="Outbound requests currently in flight")
    pending_requests: int = Field(description="Outbound requests waiting for admission")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="System Health Check",
    description="Returns server version, registered platforms and current scheduler load.",
)
async def health_check(
    engine: PaperScoutEngine = Depends(get_engine),
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="paperscout",
        platforms=engine.registry.registered_ids,
        active_requests=engine.scheduler.active,
        pending_requests=engine.scheduler.pending,
    )
