"""PaperScout — Unified retrieval layer for scholarly sources.

Searches, downloads and reads papers from many heterogeneous academic
sources behind one adapter contract, with a shared throttling and retry
scheduler for every outbound request.
"""

__version__ = "0.1.0"
