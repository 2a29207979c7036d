"""Response models for the external boundary."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorPayload(BaseModel):
    """Uniform serialized error returned across the boundary."""

    name: str = Field(description="Error class name (e.g. 'PlatformError')")
    message: str = Field(description="Human-readable message")
    stack: str | None = Field(default=None, description="Formatted traceback, when requested")
    details: dict[str, Any] | None = Field(default=None, description="Structured error details")


class PlatformRecommendation(BaseModel):
    """A recommended platform with its tier and rationale."""

    platform: str = Field(description="Source identifier")
    tier: int = Field(description="Availability tier (1 best, 4 requires credentials)")
    reason: str = Field(description="Tier description")


class RecommendationResponse(BaseModel):
    """Platforms recommended for a field of study."""

    field: str = Field(description="Requested field ('general' when unspecified)")
    recommendations: list[PlatformRecommendation] = Field(default_factory=list)


class PlatformInfo(BaseModel):
    """A registered platform and its declared capabilities."""

    platform: str = Field(description="Source identifier")
    tier: int = Field(description="Availability tier")
    capabilities: list[str] = Field(default_factory=list, description="Supported operations")
    plugin: bool = Field(default=False, description="Whether the platform is an optional plugin")
