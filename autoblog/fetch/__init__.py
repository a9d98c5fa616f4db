"""Feed retrieval, parsing and text normalization."""

from .feed import FeedFetcher, extract_field, extract_multiple, fetch_feed, parse_feed, parse_item
from .text import clean_text, decode_entities, strip_html, truncate_words

__all__ = [
    "FeedFetcher",
    "fetch_feed",
    "parse_feed",
    "parse_item",
    "extract_field",
    "extract_multiple",
    "clean_text",
    "decode_entities",
    "strip_html",
    "truncate_words",
]
