"""Tests for feed retrieval and lenient item parsing."""

from __future__ import annotations

import logging

import httpx
import pytest

from autoblog.config import FeedConfig
from autoblog.errors import FeedFetchError, FeedItemError
from autoblog.fetch.feed import FeedFetcher, extract_multiple, fetch_feed, parse_feed, parse_item
from conftest import SAMPLE_FEED


def _feed_with(*items: str) -> str:
    return "<rss><channel>" + "".join(f"<item>{body}</item>" for body in items) + "</channel></rss>"


def _item(guid: str, title: str = "Title") -> str:
    return f"<title>{title}</title><link>https://blog.example.com/{guid}/</link><guid>{guid}</guid>"


def test_parse_feed_reads_cdata_and_plain_fields():
    records = parse_feed(SAMPLE_FEED)
    assert [r.guid for r in records] == ["guid-1", "guid-2", "guid-3"]

    first = records[0]
    assert first.title == "First & Foremost"
    assert first.canonical_url == "https://blog.example.com/first-post/"
    assert first.published_at == "Mon, 05 Jan 2026 14:00:00 GMT"
    assert first.excerpt == "A short excerpt"
    assert first.full_content == "<p>Hello <b>world</b> from the café.</p>"
    assert first.tags == ("AI", "Workers")
    assert first.contributors == ("Jane Doe", "John Roe")

    second = records[1]
    assert second.title == "Second post"
    assert second.excerpt == "Plain éxcerpt"
    assert second.tags == ("News", "Cloud")
    assert second.contributors == ("Ana Silva",)


def test_parse_feed_optional_fields_default_empty():
    third = parse_feed(SAMPLE_FEED)[2]
    assert third.excerpt == ""
    assert third.full_content == ""
    assert third.tags == ()
    assert third.contributors == ()


def test_parse_feed_skips_malformed_item(caplog):
    xml = _feed_with(_item("a"), "<title>No link or guid</title>", _item("c"))
    logger = logging.getLogger("tests.feed")
    with caplog.at_level(logging.WARNING, logger="tests.feed"):
        records = parse_feed(xml, logger)
    assert [r.guid for r in records] == ["a", "c"]
    skipped = [r for r in caplog.records if getattr(r, "event", None) == "feed_item_skipped"]
    assert len(skipped) == 1
    assert skipped[0].index == 1


def test_parse_item_requires_title_link_and_guid():
    with pytest.raises(FeedItemError, match="guid"):
        parse_item("<title>T</title><link>https://x/</link>")
    with pytest.raises(FeedItemError, match="title"):
        parse_item("<title>   </title><link>https://x/</link><guid>g</guid>")


def test_extract_multiple_never_merges_cdata_and_plain():
    xml = "<category><![CDATA[A]]></category><category>B</category>"
    assert extract_multiple(xml, "category") == ["A"]
    assert extract_multiple("<category>B</category><category>C</category>", "category") == ["B", "C"]


def test_self_closing_tag_does_not_match():
    record = parse_item(_item("g") + "<description/>")
    assert record.excerpt == ""


def test_fetch_feed_truncates_after_parsing():
    xml = _feed_with("<title>broken</title>", _item("b"), _item("c"), _item("d"))

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=xml)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        records = fetch_feed("https://blog.example.com/rss/", 2, client=client)
    assert [r.guid for r in records] == ["b", "c"]


def test_fetch_feed_raises_on_non_success_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(FeedFetchError) as excinfo:
            fetch_feed("https://blog.example.com/rss/", client=client)
    assert excinfo.value.status_code == 503


def test_fetch_feed_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(FeedFetchError, match="ConnectError"):
            fetch_feed("https://blog.example.com/rss/", client=client)


def test_feed_fetcher_sends_user_agent():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers.get("user-agent")
        seen["url"] = str(request.url)
        return httpx.Response(200, text=SAMPLE_FEED)

    cfg = FeedConfig(url="https://blog.example.com/rss/", user_agent="autoblog-test/1.0")
    records = FeedFetcher(cfg, transport=httpx.MockTransport(handler)).fetch(1)

    assert seen == {"ua": "autoblog-test/1.0", "url": "https://blog.example.com/rss/"}
    assert [r.guid for r in records] == ["guid-1"]
