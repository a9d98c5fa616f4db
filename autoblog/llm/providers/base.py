"""Abstract interface for generative-text backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Any

import httpx

from ...config import ProviderConfig
from ...utils.logging import log_event, redact_text, truncate_text


Message = dict[str, str]


class TextProvider(ABC):
    """Chat-style text generation over HTTP.

    Subclasses implement ``generate``; transport errors surface as
    ``httpx.HTTPError`` and unexpected payloads as ProviderResponseError.
    """

    name = "base"

    def __init__(
        self,
        cfg: ProviderConfig,
        logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.cfg = cfg
        self.logger = logger
        self._transport = transport
        self._last_status: int | None = None

    @abstractmethod
    def generate(self, messages: list[Message], max_tokens: int, temperature: float) -> str:
        """Return the generated text for ``messages``."""
        raise NotImplementedError

    def _post(self, url: str, payload: dict[str, Any], **kwargs: Any) -> Any:
        with httpx.Client(
            timeout=self.cfg.timeout_seconds,
            trust_env=self.cfg.trust_env,
            transport=self._transport,
        ) as client:
            resp = client.post(url, json=payload, **kwargs)
            resp.raise_for_status()
            self._last_status = resp.status_code
            return resp.json()

    def _log_response(self, content: str) -> str:
        log_event(
            self.logger,
            "LLM response",
            event="llm_response",
            provider=self.name,
            model=self.cfg.model,
            status=self._last_status,
            response_chars=len(content),
            raw_response=truncate_text(redact_text(content, self.cfg.log_redaction), self.cfg.log_max_chars),
        )
        return content
