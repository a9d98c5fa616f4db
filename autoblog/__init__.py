"""
Autoblog - scheduled feed-to-JSON summarization pipeline.

This package polls a blog's RSS feed, skips items already recorded in a
dedup ledger, summarizes new items with a language model, and publishes
one JSON artifact per item to a version-controlled content store.

Main entry point is the CLI via the `autoblog run` command.

Example:
    $ autoblog run --config config.yaml
"""

__all__ = ["__version__", "slugify", "extract_slug", "FeedRecord", "PublishedArtifact"]
__version__ = "0.1.0"

from .core.slug import extract_slug, slugify
from .core.types import FeedRecord, PublishedArtifact
