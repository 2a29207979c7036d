"""Adapter Registry — Maps source identifiers to adapter instances.

The registry is an explicit object owned by the engine; there is no
process-wide instance.  Registration is last-write-wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from paperscout.adapters.base.adapter import PlatformAdapter
from paperscout.core.exceptions import AdapterNotRegisteredError

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Registry of active platform adapters.

    Example:
        >>> registry = AdapterRegistry()
        >>> registry.register(ArxivAdapter(context))
        >>> adapter = registry.get("arxiv")
    """

    def __init__(self) -> None:
        self._adapters: dict[str, PlatformAdapter] = {}

    def register(self, adapter: PlatformAdapter) -> None:
        """Register an adapter under its ``id``, replacing any previous one."""
        if adapter.id in self._adapters:
            logger.warning("Overwriting existing adapter registration: %s", adapter.id)
        self._adapters[adapter.id] = adapter
        logger.info("Registered adapter: %s", adapter.id)

    def get(self, platform: str) -> PlatformAdapter:
        """Get an adapter by source identifier.

        Raises:
            AdapterNotRegisteredError: If no adapter is registered under this id.
        """
        try:
            return self._adapters[platform]
        except KeyError:
            raise AdapterNotRegisteredError(platform, self.registered_ids) from None

    def list(self) -> list[PlatformAdapter]:
        """All registered adapters, in registration order."""
        return list(self._adapters.values())

    def remove(self, platform: str) -> PlatformAdapter | None:
        """Unregister ``platform``; returns the removed adapter, if any."""
        adapter = self._adapters.pop(platform, None)
        if adapter is not None:
            logger.info("Removed adapter: %s", platform)
        return adapter

    def clear(self) -> None:
        self._adapters.clear()

    @property
    def registered_ids(self) -> list[str]:
        """List all registered source identifiers."""
        return list(self._adapters.keys())

    def __contains__(self, platform: object) -> bool:
        return platform in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)

    def __iter__(self) -> Iterator[PlatformAdapter]:
        return iter(self.list())
