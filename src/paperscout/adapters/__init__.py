"""Platform adapter layer — One adapter per external paper source.

Built-in adapters (always registered):
  - pmc, arxiv, pubmed, biorxiv, medrxiv, crossref, google-scholar, semantic, iacr
  - acm, wos, scopus, jstor, researchgate, core, microsoft-academic

Plugin adapters (enabled per flag in ``Settings.plugins``):
  - sci-hub, libgen, science-direct, springer-link, ieee-xplore, oa-button, unpaywall

Subclass ``PlatformAdapter`` to connect another source.
"""
