"""Google Gemini provider using the ``generateContent`` endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import ProviderConfig
from ...errors import ConfigError, ProviderResponseError
from .base import Message, TextProvider


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"


class GeminiProvider(TextProvider):
    """Gemini-backed text generation."""

    name = "gemini"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        super().__init__(cfg, logger, transport)
        if not api_key:
            raise ConfigError("Missing Google API key")
        self.api_key = api_key

    def generate(self, messages: list[Message], max_tokens: int, temperature: float) -> str:
        system_parts = [m["content"] for m in messages if m.get("role") == "system"]
        contents = [
            {
                "role": "model" if m.get("role") == "assistant" else "user",
                "parts": [{"text": m["content"]}],
            }
            for m in messages
            if m.get("role") != "system"
        ]
        payload: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        if system_parts:
            payload["systemInstruction"] = {"parts": [{"text": "\n\n".join(system_parts)}]}

        base = (self.cfg.base_url or DEFAULT_BASE_URL).rstrip("/")
        url = f"{base}/v1beta/models/{self.cfg.model}:generateContent"
        data = self._post(url, payload, params={"key": self.api_key})
        return self._log_response(_extract_text(data))


def _extract_text(data: dict[str, Any]) -> str:
    """Join the text of non-thought parts, falling back to every part."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ProviderResponseError("Unexpected response format from Gemini") from exc

    texts = [p.get("text", "") for p in parts if isinstance(p, dict) and not p.get("thought")]
    if not any(texts):
        texts = [p.get("text", "") for p in parts if isinstance(p, dict)]
    return "".join(texts)
