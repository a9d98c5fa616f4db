"""OpenAI-compatible provider using ``/chat/completions``."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import ProviderConfig
from ...errors import ConfigError, ProviderResponseError
from .base import Message, TextProvider


DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAICompatibleProvider(TextProvider):
    name = "openai_compatible"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        super().__init__(cfg, logger, transport)
        if not api_key:
            raise ConfigError(f"Missing API key for OpenAI-compatible provider (set {cfg.api_key_env})")
        self.api_key = api_key

    def generate(self, messages: list[Message], max_tokens: int, temperature: float) -> str:
        base = (self.cfg.base_url or DEFAULT_BASE_URL).rstrip("/")
        payload = {
            "model": self.cfg.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        data = self._post(
            f"{base}/chat/completions",
            payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        return self._log_response(_extract_content(data))


def _extract_content(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ProviderResponseError("Unexpected response format from chat completion") from exc
    if not isinstance(content, str):
        raise ProviderResponseError("Chat completion content is not text")
    return content
