"""
Core domain models and business logic.

This package contains data types and helpers that are
independent of any specific pipeline stage.
"""

from .types import FeedRecord, LedgerEntry, PublishedArtifact, RunResult
from .slug import artifact_slug, extract_slug, slugify

__all__ = [
    "FeedRecord",
    "LedgerEntry",
    "PublishedArtifact",
    "RunResult",
    "artifact_slug",
    "extract_slug",
    "slugify",
]
