"""Tests for the swappable generative backends."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from autoblog.config import ProviderConfig
from autoblog.errors import ConfigError, ProviderResponseError
from autoblog.llm.providers.factory import available_providers, create_provider
from autoblog.llm.providers.gemini import GeminiProvider, _extract_text
from autoblog.llm.providers.openai_compatible import OpenAICompatibleProvider
from autoblog.llm.providers.workers_ai import WorkersAIProvider


MESSAGES = [
    {"role": "system", "content": "You are a summarizer."},
    {"role": "user", "content": "Summarize this."},
]


def _transport(payload, status_code=200, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen["request"] = request
            seen["body"] = json.loads(request.content)
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler)


def test_available_providers_contains_expected_backends():
    names = available_providers()
    assert "workers_ai" in names
    assert "gemini" in names
    assert "openai_compatible" in names


def test_create_provider_workers_ai():
    provider = create_provider(ProviderConfig(api_key="token", account_id="acct"))
    assert isinstance(provider, WorkersAIProvider)


def test_create_provider_reads_credentials_from_env(monkeypatch):
    monkeypatch.setenv("AUTOBLOG_AI_API_KEY", "env-token")
    monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "env-acct")
    provider = create_provider(ProviderConfig())
    assert provider.api_key == "env-token"
    assert provider.account_id == "env-acct"


def test_create_provider_gemini_and_openai():
    gemini = create_provider(ProviderConfig(name="gemini", model="gemini-2.0-flash", api_key="k"))
    openai = create_provider(ProviderConfig(name="openai", model="gpt-4.1-mini", api_key="k"))
    assert isinstance(gemini, GeminiProvider)
    assert isinstance(openai, OpenAICompatibleProvider)


def test_create_provider_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported provider"):
        create_provider(ProviderConfig(name="unknown-provider", api_key="k"))


def test_create_provider_requires_credentials(monkeypatch):
    monkeypatch.delenv("AUTOBLOG_AI_API_KEY", raising=False)
    monkeypatch.delenv("CLOUDFLARE_ACCOUNT_ID", raising=False)
    with pytest.raises(ConfigError, match="API token"):
        create_provider(ProviderConfig())
    with pytest.raises(ConfigError, match="account id"):
        create_provider(ProviderConfig(api_key="token"))


def test_workers_ai_request_and_response():
    seen: dict = {}
    cfg = ProviderConfig(api_key="token", account_id="acct")
    transport = _transport({"result": {"response": "A summary."}, "success": True}, seen=seen)
    provider = create_provider(cfg, transport=transport)

    text = provider.generate(MESSAGES, max_tokens=512, temperature=0.7)

    assert text == "A summary."
    request = seen["request"]
    assert request.method == "POST"
    assert "/client/v4/accounts/acct/ai/run/" in str(request.url)
    assert request.headers["authorization"] == "Bearer token"
    assert seen["body"] == {"messages": MESSAGES, "max_tokens": 512, "temperature": 0.7}


def test_workers_ai_plain_string_response():
    provider = create_provider(
        ProviderConfig(api_key="token", account_id="acct"), transport=_transport("Just text")
    )
    assert provider.generate(MESSAGES, 10, 0.1) == "Just text"


@pytest.mark.parametrize(
    "payload",
    [
        {"success": False, "errors": [{"message": "quota"}]},
        {"result": {"unexpected": True}, "success": True},
        [1, 2, 3],
    ],
)
def test_workers_ai_rejects_malformed_response(payload):
    provider = create_provider(
        ProviderConfig(api_key="token", account_id="acct"), transport=_transport(payload)
    )
    with pytest.raises(ProviderResponseError):
        provider.generate(MESSAGES, 10, 0.1)


def test_http_error_status_propagates():
    provider = create_provider(
        ProviderConfig(api_key="token", account_id="acct"),
        transport=_transport({"error": "boom"}, status_code=500),
    )
    with pytest.raises(httpx.HTTPStatusError):
        provider.generate(MESSAGES, 10, 0.1)


def test_gemini_maps_system_instruction():
    seen: dict = {}
    payload = {"candidates": [{"content": {"parts": [{"text": "Gemini summary"}]}}]}
    provider = create_provider(
        ProviderConfig(name="gemini", model="gemini-2.0-flash", api_key="gk"),
        transport=_transport(payload, seen=seen),
    )

    assert provider.generate(MESSAGES, 256, 0.2) == "Gemini summary"
    body = seen["body"]
    assert body["systemInstruction"] == {"parts": [{"text": "You are a summarizer."}]}
    assert body["contents"] == [{"role": "user", "parts": [{"text": "Summarize this."}]}]
    assert body["generationConfig"] == {"temperature": 0.2, "maxOutputTokens": 256}
    assert seen["request"].url.params["key"] == "gk"
    assert seen["request"].url.path.endswith("/v1beta/models/gemini-2.0-flash:generateContent")


def test_gemini_extract_text_skips_thought_parts():
    data = {
        "candidates": [
            {"content": {"parts": [{"text": "thinking", "thought": True}, {"text": "final"}]}}
        ]
    }
    assert _extract_text(data) == "final"


def test_gemini_extract_text_rejects_bad_shape():
    with pytest.raises(ProviderResponseError):
        _extract_text({"candidates": []})


def test_openai_compatible_reads_first_choice():
    seen: dict = {}
    payload = {"choices": [{"message": {"role": "assistant", "content": "OpenAI summary"}}]}
    provider = create_provider(
        ProviderConfig(name="openai", model="gpt-4.1-mini", api_key="ok", base_url="https://llm.example.com/v1/"),
        transport=_transport(payload, seen=seen),
    )

    assert provider.generate(MESSAGES, 100, 0.5) == "OpenAI summary"
    assert str(seen["request"].url) == "https://llm.example.com/v1/chat/completions"
    assert seen["body"]["model"] == "gpt-4.1-mini"


def test_openai_compatible_rejects_missing_choices():
    provider = create_provider(
        ProviderConfig(name="openai", api_key="ok"), transport=_transport({"choices": []})
    )
    with pytest.raises(ProviderResponseError):
        provider.generate(MESSAGES, 100, 0.5)


def test_provider_logs_each_response(caplog):
    logger = logging.getLogger("tests.providers")
    cfg = ProviderConfig(api_key="token", account_id="acct", log_redaction="redact_urls", log_max_chars=20)
    reply = "Read more at https://blog.example.com/post-1/ for details."
    provider = create_provider(cfg, logger, transport=_transport({"result": {"response": reply}}))

    with caplog.at_level(logging.INFO, logger="tests.providers"):
        assert provider.generate(MESSAGES, 10, 0.1) == reply

    events = [r for r in caplog.records if getattr(r, "event", None) == "llm_response"]
    assert len(events) == 1
    event = events[0]
    assert event.provider == "workers_ai"
    assert event.model == cfg.model
    assert event.status == 200
    assert event.response_chars == len(reply)
    assert event.raw_response == "Read more at [REDACT...(truncated)"
