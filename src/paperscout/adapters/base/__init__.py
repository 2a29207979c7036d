"""Base adapter interface — Contract, registry and download cache shared by all sources."""

from paperscout.adapters.base.adapter import AdapterContext, Capability, PlatformAdapter
from paperscout.adapters.base.cache import DownloadCache
from paperscout.adapters.base.registry import AdapterRegistry

__all__ = ["AdapterContext", "AdapterRegistry", "Capability", "DownloadCache", "PlatformAdapter"]
