"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from paperscout.core.engine import PaperScoutEngine

# Global engine instance (set during application lifespan)
_engine: PaperScoutEngine | None = None


def set_engine(engine: PaperScoutEngine | None) -> None:
    """Set the global engine instance (called during app lifespan)."""
    global _engine
    _engine = engine


def get_engine() -> PaperScoutEngine:
    """Get the global PaperScout engine instance.

    Raises:
        RuntimeError: If the engine is not initialized.
    """
    if _engine is None:
        raise RuntimeError("PaperScout engine not initialized. Is the server running?")
    return _engine
