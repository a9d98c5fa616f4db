"""Deterministic slug helpers for artifact naming."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from .types import FeedRecord


_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

DEFAULT_SLUG_HOST = "blog.cloudflare.com"


def slugify(text: str) -> str:
    """Convert text to URL-safe slug.

    Args:
        text: The text to slugify

    Returns:
        A lowercase slug where each run of non-alphanumeric characters
        becomes one hyphen, with no leading or trailing hyphens
    """
    slug = _NON_ALNUM_RE.sub("-", text.lower())
    return slug.strip("-")


def extract_slug(url: str, host: str = DEFAULT_SLUG_HOST) -> str:
    """Return the first path segment of ``url`` when it lives on ``host``.

    Examples:
        >>> extract_slug("https://blog.cloudflare.com/my-post/")
        'my-post'
        >>> extract_slug("https://other.com/x")
        ''
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return ""
    if (parts.hostname or "").lower() != host.lower():
        return ""
    segment = parts.path.lstrip("/").split("/", 1)[0]
    return segment


def artifact_slug(record: FeedRecord, host: str = DEFAULT_SLUG_HOST) -> str:
    """URL slug first, title slug when the URL yields nothing."""
    return extract_slug(record.canonical_url, host) or slugify(record.title)
