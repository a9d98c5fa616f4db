"""Tests for Langfuse tracing setup behavior."""

from __future__ import annotations

import sys
import types

import pytest

from autoblog.config import LangfuseConfig
from autoblog.llm import tracing


@pytest.fixture(autouse=True)
def _reset_tracer():
    yield
    tracing.setup_langfuse(LangfuseConfig())


def test_setup_langfuse_passes_keys_and_host(monkeypatch):
    captured: dict = {}

    class DummyLangfuse:
        def __init__(self, **kwargs):
            captured.update(kwargs)

    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=DummyLangfuse))
    monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk-test")
    monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk-test")
    monkeypatch.setenv("LANGFUSE_HOST", "https://us.cloud.langfuse.com")

    tracing.setup_langfuse(LangfuseConfig(enabled=True, environment="ci"))

    assert captured["public_key"] == "pk-test"
    assert captured["secret_key"] == "sk-test"
    assert captured["host"] == "https://us.cloud.langfuse.com"
    assert captured["environment"] == "ci"
    assert isinstance(tracing.get_tracer(), DummyLangfuse)


def test_setup_langfuse_disables_tracer_when_keys_missing(monkeypatch):
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    monkeypatch.delenv("LANGFUSE_SECRET_KEY", raising=False)

    tracing.setup_langfuse(LangfuseConfig(enabled=True))

    assert tracing.get_tracer() is None


def test_spans_are_noops_without_tracer():
    tracing.setup_langfuse(LangfuseConfig())
    with tracing.start_span("autoblog.test", input_value={"a": 1}) as span:
        assert span is None
        tracing.set_span_output(span, "out")
        tracing.record_span_error(span, RuntimeError("boom"))
    tracing.flush()


def test_span_records_output_and_redacts(monkeypatch):
    updates: list[dict] = []

    class DummySpan:
        def update(self, **kwargs):
            updates.append(kwargs)

    class DummyContext:
        def __enter__(self):
            return DummySpan()

        def __exit__(self, *exc):
            return False

    class DummyLangfuse:
        def __init__(self, **kwargs):
            self.started: list[dict] = []

        def start_as_current_span(self, **kwargs):
            self.started.append(kwargs)
            return DummyContext()

    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=DummyLangfuse))
    tracing.setup_langfuse(
        LangfuseConfig(enabled=True, public_key="pk", secret_key="sk", redaction="redact_urls")
    )

    with tracing.start_span("autoblog.publish", input_value="see https://x.example/a") as span:
        tracing.set_span_output(span, {"ok": True})
        tracing.record_span_error(span, ValueError("bad"))

    started = tracing.get_tracer().started[0]
    assert started["name"] == "autoblog.publish"
    assert started["input"] == "see [REDACTED_URL]"
    assert updates[0] == {"output": '{"ok": true}'}
    assert updates[1] == {"level": "ERROR", "status_message": "ValueError: bad"}
