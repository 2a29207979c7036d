"""Built-in adapters — Registered unconditionally at startup, in a fixed order."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial

from paperscout.adapters.acm.adapter import AcmAdapter
from paperscout.adapters.arxiv.adapter import ArxivAdapter
from paperscout.adapters.base.adapter import AdapterContext, PlatformAdapter
from paperscout.adapters.base.registry import AdapterRegistry
from paperscout.adapters.core_api.adapter import CoreAdapter
from paperscout.adapters.crossref.adapter import CrossrefAdapter
from paperscout.adapters.google_scholar.adapter import GoogleScholarAdapter
from paperscout.adapters.iacr.adapter import IacrAdapter
from paperscout.adapters.jstor.adapter import JstorAdapter
from paperscout.adapters.microsoft_academic.adapter import MicrosoftAcademicAdapter
from paperscout.adapters.pmc.adapter import PmcAdapter
from paperscout.adapters.pubmed.adapter import PubmedAdapter
from paperscout.adapters.researchgate.adapter import ResearchGateAdapter
from paperscout.adapters.rxiv.adapter import RxivAdapter
from paperscout.adapters.scopus.adapter import ScopusAdapter
from paperscout.adapters.semantic.adapter import SemanticScholarAdapter
from paperscout.adapters.wos.adapter import WosAdapter

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[AdapterContext], PlatformAdapter]

BUILTIN_FACTORIES: tuple[AdapterFactory, ...] = (
    PmcAdapter,
    ArxivAdapter,
    PubmedAdapter,
    partial(RxivAdapter, server="biorxiv"),
    partial(RxivAdapter, server="medrxiv"),
    CrossrefAdapter,
    GoogleScholarAdapter,
    SemanticScholarAdapter,
    IacrAdapter,
    AcmAdapter,
    WosAdapter,
    ScopusAdapter,
    JstorAdapter,
    ResearchGateAdapter,
    CoreAdapter,
    MicrosoftAcademicAdapter,
)


def register_builtin_adapters(registry: AdapterRegistry, context: AdapterContext) -> list[str]:
    """Construct and register every built-in adapter.

    Returns:
        Registered ids, in registration order.
    """
    ids = []
    for factory in BUILTIN_FACTORIES:
        adapter = factory(context)
        registry.register(adapter)
        ids.append(adapter.id)
    logger.info("Registered %d built-in adapters", len(ids))
    return ids
