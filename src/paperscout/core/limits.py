"""Platform classification table — Descriptive tiers and suggested budgets.

The table is static and immutable.  It is used to rank and recommend
sources; it is **not** consulted by the request scheduler, which applies
one global budget to every source.

Tiers:
  1. High availability, no API key needed
  2. Medium availability, API key raises quotas
  3. Low availability, strictly rate limited
  4. Requires API credentials
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, Field


class PlatformLimit(BaseModel):
    """Suggested request budget and tier for one source."""

    model_config = {"frozen": True}

    concurrent: int = Field(ge=1, description="Suggested max concurrent requests")
    interval_ms: int = Field(ge=0, description="Suggested min interval between requests")
    tier: int = Field(ge=1, le=4, description="Availability tier")


DEFAULT_PLATFORM_LIMIT = PlatformLimit(concurrent=1, interval_ms=2000, tier=3)

PLATFORM_LIMITS: Mapping[str, PlatformLimit] = MappingProxyType(
    {
        # Tier 1
        "semantic": PlatformLimit(concurrent=3, interval_ms=500, tier=1),
        "crossref": PlatformLimit(concurrent=3, interval_ms=500, tier=1),
        "pmc": PlatformLimit(concurrent=3, interval_ms=500, tier=1),
        "arxiv": PlatformLimit(concurrent=2, interval_ms=1000, tier=1),
        # Tier 2
        "pubmed": PlatformLimit(concurrent=2, interval_ms=1000, tier=2),
        "biorxiv": PlatformLimit(concurrent=1, interval_ms=2000, tier=2),
        "medrxiv": PlatformLimit(concurrent=1, interval_ms=2000, tier=2),
        "iacr": PlatformLimit(concurrent=2, interval_ms=1000, tier=2),
        # Tier 3
        "google-scholar": PlatformLimit(concurrent=1, interval_ms=5000, tier=3),
        "researchgate": PlatformLimit(concurrent=1, interval_ms=3000, tier=3),
        "jstor": PlatformLimit(concurrent=1, interval_ms=3000, tier=3),
        "acm": PlatformLimit(concurrent=1, interval_ms=2000, tier=3),
        # Tier 4
        "wos": PlatformLimit(concurrent=2, interval_ms=1000, tier=4),
        "scopus": PlatformLimit(concurrent=2, interval_ms=1000, tier=4),
        "core": PlatformLimit(concurrent=2, interval_ms=1000, tier=4),
        "microsoft-academic": PlatformLimit(concurrent=2, interval_ms=1000, tier=4),
    }
)

FIELD_RECOMMENDATIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "biomedical": ("pmc", "pubmed", "biorxiv", "medrxiv"),
        "computer-science": ("arxiv", "semantic", "acm"),
        "physics": ("arxiv", "semantic"),
        "mathematics": ("arxiv", "semantic"),
        "cryptography": ("iacr", "arxiv"),
        "open-access": ("pmc", "core", "semantic"),
    }
)

DEFAULT_RECOMMENDATIONS: tuple[str, ...] = ("semantic", "crossref", "arxiv", "pmc")

_TIER_DESCRIPTIONS: Mapping[int, str] = MappingProxyType(
    {
        1: "High availability, no API key needed; preferred",
        2: "Medium availability; configure an API key for higher quotas",
        3: "Low availability with strict rate limits; use sparingly",
        4: "Requires API key authentication",
    }
)


def get_platform_limit(platform: str) -> PlatformLimit:
    """Return the configured limit for ``platform``, or the documented default."""
    return PLATFORM_LIMITS.get(platform, DEFAULT_PLATFORM_LIMIT)


def get_platform_tier(platform: str) -> int:
    return get_platform_limit(platform).tier


def get_recommended_platforms(field: str | None = None) -> list[str]:
    """Recommend sources for a field of study.

    Unknown or missing fields fall back to the tier-1 defaults.
    """
    if field and field in FIELD_RECOMMENDATIONS:
        return list(FIELD_RECOMMENDATIONS[field])
    return list(DEFAULT_RECOMMENDATIONS)


def describe_tier(tier: int) -> str:
    return _TIER_DESCRIPTIONS.get(tier, "Unknown")
