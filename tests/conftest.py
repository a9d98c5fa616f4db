"""Shared fakes and fixtures."""

from __future__ import annotations

import pytest

from autoblog.config import ProviderConfig, SummaryConfig
from autoblog.core.types import FeedRecord
from autoblog.errors import FeedFetchError
from autoblog.ledger import Ledger, MemoryKVStore
from autoblog.llm.providers.base import TextProvider
from autoblog.publish import LocalContentStore, Publisher
from autoblog.summarize import Summarizer


SAMPLE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:content="http://purl.org/rss/1.0/modules/content/" version="2.0">
<channel>
  <title><![CDATA[The Example Blog]]></title>
  <link>https://blog.example.com/</link>
  <item>
    <title><![CDATA[First &amp; Foremost]]></title>
    <link>https://blog.example.com/first-post/</link>
    <guid isPermaLink="false">guid-1</guid>
    <pubDate>Mon, 05 Jan 2026 14:00:00 GMT</pubDate>
    <description><![CDATA[A short excerpt]]></description>
    <content:encoded><![CDATA[<p>Hello <b>world</b> from the caf&eacute;.</p>]]></content:encoded>
    <category><![CDATA[AI]]></category>
    <category><![CDATA[Workers]]></category>
    <dc:creator><![CDATA[Jane Doe]]></dc:creator>
    <dc:creator><![CDATA[John Roe]]></dc:creator>
  </item>
  <item>
    <title>Second
      post</title>
    <link>https://blog.example.com/second-post</link>
    <guid>guid-2</guid>
    <pubDate>Tue, 06 Jan 2026 09:30:00 GMT</pubDate>
    <description>Plain &#233;xcerpt</description>
    <category>News</category>
    <category>Cloud</category>
    <dc:creator>Ana Silva</dc:creator>
  </item>
  <item>
    <title><![CDATA[Third post]]></title>
    <link>https://blog.example.com/third-post/</link>
    <guid isPermaLink="false">guid-3</guid>
    <pubDate>Wed, 07 Jan 2026 10:00:00 GMT</pubDate>
  </item>
</channel>
</rss>
"""

LONG_SUMMARY = (
    "This post announces a new capability for developers and explains how it "
    "works, what it costs, and when it becomes generally available."
)


def make_record(index: int, **overrides) -> FeedRecord:
    values = {
        "title": f"Post {index}",
        "canonical_url": f"https://blog.example.com/post-{index}/",
        "guid": f"guid-{index}",
        "published_at": "Mon, 05 Jan 2026 14:00:00 GMT",
        "excerpt": f"Excerpt {index}",
        "full_content": f"<p>Body of post {index}</p>",
        "tags": ("AI",),
        "contributors": ("Jane Doe",),
    }
    values.update(overrides)
    return FeedRecord(**values)


class ScriptedProvider(TextProvider):
    """Provider returning canned replies; callables are invoked with the messages."""

    name = "scripted"

    def __init__(self, replies=None, default=LONG_SUMMARY):
        super().__init__(ProviderConfig(name="scripted", model="scripted-model"))
        self.replies = list(replies or [])
        self.default = default
        self.calls: list[list[dict[str, str]]] = []

    def generate(self, messages, max_tokens, temperature):
        self.calls.append(messages)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(messages)
        return reply


class StaticFetcher:
    def __init__(self, records=None, error: Exception | None = None):
        self.records = list(records or [])
        self.error = error
        self.calls: list[int | None] = []

    def fetch(self, max_items=None):
        self.calls.append(max_items)
        if self.error is not None:
            raise self.error
        if max_items is None:
            return list(self.records)
        return self.records[:max_items]


def no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def summarizer(provider):
    return Summarizer(provider, SummaryConfig(), sleep=no_sleep)


@pytest.fixture
def ledger():
    return Ledger(MemoryKVStore())


@pytest.fixture
def content_store(tmp_path):
    return LocalContentStore(tmp_path / "repo")


@pytest.fixture
def publisher(content_store):
    return Publisher(content_store, request_delay=0, sleep=no_sleep)


@pytest.fixture
def failing_fetcher():
    return StaticFetcher(error=FeedFetchError("Failed to fetch RSS feed: 503", status_code=503))
