"""Plugin activation — Optional adapters behind enable flags.

``PLUGIN_DEFINITIONS`` is a fixed, ordered list evaluated once at startup.
Each entry pairs a flag on ``Settings.plugins`` with a loader that imports
the plugin module lazily, so disabled plugins are never imported.

Activation isolates failures per entry: a plugin that fails to load or to
construct (e.g. a missing credential) is logged and skipped, and every
other plugin still activates.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from paperscout.adapters.base.adapter import AdapterContext, PlatformAdapter
    from paperscout.adapters.base.registry import AdapterRegistry
    from paperscout.config.settings import PluginSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginModule:
    """What a plugin module exposes once loaded."""

    id: str
    enabled: bool
    create: Callable[[AdapterContext], PlatformAdapter]


@dataclass(frozen=True)
class PluginDefinition:
    """A flag name and the loader for the plugin it enables."""

    flag: str
    platform: str
    load: Callable[[], PluginModule]


def _loader(module_path: str, attribute: str = "plugin") -> Callable[[], PluginModule]:
    def load() -> PluginModule:
        module = importlib.import_module(module_path)
        return getattr(module, attribute)

    return load


PLUGIN_DEFINITIONS: tuple[PluginDefinition, ...] = (
    PluginDefinition("sci_hub", "sci-hub", _loader("paperscout.adapters.sci_hub.adapter")),
    PluginDefinition("libgen", "libgen", _loader("paperscout.adapters.libgen.adapter")),
    PluginDefinition(
        "science_direct",
        "science-direct",
        _loader("paperscout.adapters.publishers.adapter", "science_direct_plugin"),
    ),
    PluginDefinition(
        "springer_link",
        "springer-link",
        _loader("paperscout.adapters.publishers.adapter", "springer_link_plugin"),
    ),
    PluginDefinition(
        "ieee_xplore",
        "ieee-xplore",
        _loader("paperscout.adapters.publishers.adapter", "ieee_xplore_plugin"),
    ),
    PluginDefinition("oa_button", "oa-button", _loader("paperscout.adapters.oa_button.adapter")),
    PluginDefinition("unpaywall", "unpaywall", _loader("paperscout.adapters.unpaywall.adapter")),
)

# Platform id -> enabling flag, for "known but disabled" diagnostics.
PLUGIN_PLATFORMS = MappingProxyType({d.platform: d.flag for d in PLUGIN_DEFINITIONS})


def activate_plugins(
    registry: AdapterRegistry,
    context: AdapterContext,
    flags: PluginSettings,
    definitions: tuple[PluginDefinition, ...] | list[PluginDefinition] = PLUGIN_DEFINITIONS,
) -> list[str]:
    """Register every enabled plugin that loads and constructs successfully.

    Args:
        registry: Registry to add adapters to.
        context: Context passed to each plugin's ``create``.
        flags: Enable flags, looked up by ``definition.flag``.
        definitions: Plugin list; defaults to ``PLUGIN_DEFINITIONS``.

    Returns:
        Ids of the activated plugins, in activation order.
    """
    activated: list[str] = []
    for definition in definitions:
        if not getattr(flags, definition.flag, False):
            continue
        try:
            module = definition.load()
            if not module.enabled:
                logger.warning("Plugin %s is selected but reports itself disabled; skipping", module.id)
                continue
            adapter = module.create(context)
            registry.register(adapter)
        except Exception:
            logger.error("Failed to activate plugin %s", definition.flag, exc_info=True)
            continue
        activated.append(adapter.id)
        logger.info("Activated plugin: %s", adapter.id)
    return activated
