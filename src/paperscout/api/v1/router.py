"""API v1 Router — Paper, platform, and health endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from paperscout.api.v1.endpoints.health import router as health_router
from paperscout.api.v1.endpoints.papers import router as papers_router
from paperscout.api.v1.endpoints.platforms import router as platforms_router

router = APIRouter(tags=["v1"])
router.include_router(papers_router)
router.include_router(platforms_router)
router.include_router(health_router)
