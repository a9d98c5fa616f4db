"""
Core data types for the autoblog pipeline.

This module defines the fundamental data structures used throughout the pipeline:
- FeedRecord: One entry extracted from the source feed
- LedgerEntry: Durable marker that a guid has been fully processed
- PublishedArtifact: The JSON document written to the content store
- RunResult: Outcome summary of one scheduled run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FeedRecord:
    """Represents one item parsed from the RSS feed.

    Attributes:
        title: The item headline
        canonical_url: The item link
        guid: Source-assigned identifier, stable within one feed
        published_at: Publication timestamp as received (not validated)
        excerpt: Short description text
        full_content: Full body, may contain markup
        tags: Category labels in feed order, duplicates permitted
        contributors: Author names in feed order
    """
    title: str
    canonical_url: str
    guid: str
    published_at: str = ""
    excerpt: str = ""
    full_content: str = ""
    tags: tuple[str, ...] = ()
    contributors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.canonical_url,
            "guid": self.guid,
            "pubDate": self.published_at,
            "description": self.excerpt,
            "content": self.full_content,
            "categories": list(self.tags),
            "authors": list(self.contributors),
        }


@dataclass
class LedgerEntry:
    """Stored value for a processed guid.

    Serialized as ``{processed, timestamp, title, slug, url}``.
    """
    guid: str
    completed_at: str
    title: str
    slug: str
    source_url: str

    def to_json(self) -> dict[str, Any]:
        return {
            "processed": True,
            "timestamp": self.completed_at,
            "title": self.title,
            "slug": self.slug,
            "url": self.source_url,
        }

    @classmethod
    def from_json(cls, guid: str, data: dict[str, Any]) -> "LedgerEntry":
        return cls(
            guid=guid,
            completed_at=str(data.get("timestamp", "")),
            title=str(data.get("title", "")),
            slug=str(data.get("slug", "")),
            source_url=str(data.get("url", "")),
        )


@dataclass(frozen=True)
class PublishedArtifact:
    """The externally visible document for one summarized record.

    Field order here is the key order of the serialized JSON.
    """
    slug: str
    title: str
    url: str
    published_at: str
    summary: str
    authors: tuple[str, ...]
    categories: tuple[str, ...]
    guid: str

    def to_json(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "title": self.title,
            "url": self.url,
            "publishedAt": self.published_at,
            "summary": self.summary,
            "authors": list(self.authors),
            "categories": list(self.categories),
            "guid": self.guid,
        }


@dataclass
class RunResult:
    """Outcome of one pipeline run.

    Attributes:
        started_at: ISO-8601 start timestamp
        fetched: Records returned by the fetch stage
        new: Records left after ledger filtering
        succeeded: Records summarized, published and marked
        failed: Records that failed at the per-item boundary
        skipped: Records filtered out as already processed or duplicated
        duration_seconds: Wall time of the run
        failures: One ``{guid, title, error}`` dict per failed record
    """
    started_at: str
    fetched: int = 0
    new: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    duration_seconds: float = 0.0
    failures: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "startedAt": self.started_at,
            "fetched": self.fetched,
            "new": self.new,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "durationSeconds": round(self.duration_seconds, 3),
            "failures": list(self.failures),
        }
