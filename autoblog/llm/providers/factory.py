"""Provider factory and registry for swappable generative backends."""

from __future__ import annotations

import logging
from typing import Callable

import httpx

from ...config import ProviderConfig, get_account_id, get_api_key
from .base import TextProvider
from .gemini import GeminiProvider
from .openai_compatible import OpenAICompatibleProvider
from .workers_ai import WorkersAIProvider


ProviderBuilder = Callable[..., TextProvider]


def _build_workers_ai(cfg, logger, transport) -> TextProvider:
    return WorkersAIProvider(cfg, get_api_key(cfg), get_account_id(cfg), logger, transport)


def _build_gemini(cfg, logger, transport) -> TextProvider:
    return GeminiProvider(cfg, get_api_key(cfg), logger, transport)


def _build_openai(cfg, logger, transport) -> TextProvider:
    return OpenAICompatibleProvider(cfg, get_api_key(cfg), logger, transport)


_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "workers_ai": _build_workers_ai,
    "workers-ai": _build_workers_ai,
    "gemini": _build_gemini,
    "openai": _build_openai,
    "openai_compatible": _build_openai,
    "openai-compatible": _build_openai,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    cfg: ProviderConfig,
    logger: logging.Logger | None = None,
    transport: httpx.BaseTransport | None = None,
) -> TextProvider:
    """Build a provider instance from runtime config.

    Raises:
        ValueError: If the provider name is not registered
        ConfigError: If the provider's credentials are missing
    """
    name = cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {cfg.name}. Supported: {supported}")
    return builder(cfg, logger, transport)
