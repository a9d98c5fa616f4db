"""
RSS feed retrieval and lenient item parsing.

The parser extracts ``<item>`` blocks with non-greedy pattern matching and
parses each one independently, so one malformed item never aborts the
batch. Text fields may be wrapped in CDATA or be plain tag content; both
are unwrapped, entity-decoded and whitespace-normalized.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

import httpx

from ..config import FeedConfig
from ..core.types import FeedRecord
from ..errors import FeedFetchError, FeedItemError
from ..utils.logging import log_event
from .text import clean_text


_ITEM_RE = re.compile(r"<item(?:\s[^>]*)?>(.*?)</item>", re.DOTALL | re.IGNORECASE)
_CDATA_WRAP_RE = re.compile(r"^\s*<!\[CDATA\[(.*?)\]\]>\s*$", re.DOTALL)


@lru_cache(maxsize=None)
def _plain_pattern(tag: str) -> re.Pattern[str]:
    # Attributes allowed; self-closing tags never match.
    return re.compile(
        rf"<{re.escape(tag)}(?:\s[^>]*?)?(?<!/)>(.*?)</{re.escape(tag)}>",
        re.DOTALL,
    )


@lru_cache(maxsize=None)
def _cdata_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(
        rf"<{re.escape(tag)}(?:\s[^>]*?)?>\s*<!\[CDATA\[(.*?)\]\]>\s*</{re.escape(tag)}>",
        re.DOTALL,
    )


def extract_field(xml: str, tag: str) -> str:
    """Return the raw text of the first ``tag`` element, CDATA unwrapped.

    Returns an empty string when the tag is absent.
    """
    match = _plain_pattern(tag).search(xml)
    if not match:
        return ""
    inner = match.group(1)
    wrapped = _CDATA_WRAP_RE.match(inner)
    if wrapped:
        return wrapped.group(1)
    return inner


def extract_multiple(xml: str, tag: str) -> list[str]:
    """Return every ``tag`` value in document order.

    CDATA-wrapped values win; plain values are only used when no CDATA
    value exists, and the two sets are never merged.
    """
    cdata_values = _cdata_pattern(tag).findall(xml)
    if cdata_values:
        return cdata_values
    return _plain_pattern(tag).findall(xml)


def parse_item(item_xml: str) -> FeedRecord:
    """Parse one ``<item>`` body into a FeedRecord.

    Raises:
        FeedItemError: If title, link or guid is missing or empty
    """
    title = clean_text(extract_field(item_xml, "title"))
    link = clean_text(extract_field(item_xml, "link"))
    guid = clean_text(extract_field(item_xml, "guid"))

    if not title or not link or not guid:
        missing = [
            name for name, value in (("title", title), ("link", link), ("guid", guid)) if not value
        ]
        raise FeedItemError(f"Missing required fields in RSS item: {', '.join(missing)}")

    return FeedRecord(
        title=title,
        canonical_url=link,
        guid=guid,
        published_at=clean_text(extract_field(item_xml, "pubDate")),
        excerpt=clean_text(extract_field(item_xml, "description")),
        full_content=clean_text(extract_field(item_xml, "content:encoded")),
        tags=tuple(clean_text(value) for value in extract_multiple(item_xml, "category")),
        contributors=tuple(clean_text(value) for value in extract_multiple(item_xml, "dc:creator")),
    )


def parse_feed(xml_text: str, logger: logging.Logger | None = None) -> list[FeedRecord]:
    """Parse an RSS document into records, skipping items that fail to parse.

    Args:
        xml_text: Full RSS document
        logger: Optional logger receiving ``feed_item_skipped`` events

    Returns:
        Records in document order
    """
    records: list[FeedRecord] = []
    for index, item_xml in enumerate(_ITEM_RE.findall(xml_text)):
        try:
            records.append(parse_item(item_xml))
        except Exception as exc:  # noqa: BLE001
            log_event(
                logger,
                "Feed item skipped",
                level=logging.WARNING,
                event="feed_item_skipped",
                index=index,
                error=f"{type(exc).__name__}: {exc}",
            )
    return records


def fetch_feed(
    url: str,
    max_items: int | None = None,
    *,
    timeout: float = 20.0,
    user_agent: str = "autoblog/1.0",
    trust_env: bool = True,
    client: httpx.Client | None = None,
    logger: logging.Logger | None = None,
) -> list[FeedRecord]:
    """Retrieve and parse the feed.

    The whole document is parsed before ``max_items`` truncation so a bad
    trailing item cannot shift the window.

    Raises:
        FeedFetchError: On transport failure or a non-2xx response
    """
    log_event(logger, "Feed fetch start", event="feed_fetch_start", url=url)
    owns_client = client is None
    if client is None:
        client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            trust_env=trust_env,
        )
    try:
        resp = client.get(url)
    except httpx.HTTPError as exc:
        log_event(
            logger,
            "Feed fetch failed",
            level=logging.ERROR,
            event="feed_fetch_failed",
            url=url,
            error=f"{type(exc).__name__}: {exc}",
        )
        raise FeedFetchError(f"Failed to fetch RSS feed: {type(exc).__name__}: {exc}") from exc
    finally:
        if owns_client:
            client.close()

    if not resp.is_success:
        log_event(
            logger,
            "Feed fetch failed",
            level=logging.ERROR,
            event="feed_fetch_failed",
            url=url,
            status_code=resp.status_code,
        )
        raise FeedFetchError(
            f"Failed to fetch RSS feed: {resp.status_code} {resp.reason_phrase}",
            status_code=resp.status_code,
        )

    records = parse_feed(resp.text, logger)
    if max_items is not None:
        records = records[:max_items]
    log_event(
        logger,
        "Feed fetch complete",
        event="feed_fetch_complete",
        url=url,
        count=len(records),
    )
    return records


class FeedFetcher:
    """Feed retrieval bound to a FeedConfig."""

    def __init__(
        self,
        cfg: FeedConfig,
        logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.cfg = cfg
        self.logger = logger
        self._transport = transport

    def fetch(self, max_items: int | None = None) -> list[FeedRecord]:
        with httpx.Client(
            timeout=self.cfg.timeout_seconds,
            headers={"User-Agent": self.cfg.user_agent},
            follow_redirects=True,
            trust_env=self.cfg.trust_env,
            transport=self._transport,
        ) as client:
            return fetch_feed(self.cfg.url, max_items, client=client, logger=self.logger)
