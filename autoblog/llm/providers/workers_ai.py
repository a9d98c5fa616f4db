"""Cloudflare Workers AI provider using the REST ``ai/run`` endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import ProviderConfig
from ...errors import ConfigError, ProviderResponseError
from .base import Message, TextProvider


DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"


class WorkersAIProvider(TextProvider):
    """Workers AI text generation (default model: Llama 3.1 8B Instruct)."""

    name = "workers_ai"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        account_id: str | None,
        logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        super().__init__(cfg, logger, transport)
        if not api_key:
            raise ConfigError(f"Missing Workers AI API token (set {cfg.api_key_env})")
        if not account_id:
            raise ConfigError(f"Missing Workers AI account id (set {cfg.account_id_env})")
        self.api_key = api_key
        self.account_id = account_id

    def generate(self, messages: list[Message], max_tokens: int, temperature: float) -> str:
        base = (self.cfg.base_url or DEFAULT_BASE_URL).rstrip("/")
        url = f"{base}/accounts/{self.account_id}/ai/run/{self.cfg.model}"
        payload = {
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        data = self._post(url, payload, headers={"Authorization": f"Bearer {self.api_key}"})
        return self._log_response(_extract_response(data))


def _extract_response(data: Any) -> str:
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        if data.get("success") is False:
            errors = data.get("errors") or []
            raise ProviderResponseError(f"Workers AI reported failure: {errors}")
        result = data.get("result", data)
        if isinstance(result, str):
            return result
        if isinstance(result, dict) and "response" in result and result["response"] is not None:
            return str(result["response"])
    raise ProviderResponseError("Unexpected response format from AI")
