"""Generative backends, prompts and tracing."""

from .prompts import build_messages, build_summary_prompt, system_prompt
from .providers import (
    GeminiProvider,
    OpenAICompatibleProvider,
    TextProvider,
    WorkersAIProvider,
    available_providers,
    create_provider,
)
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "TextProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "WorkersAIProvider",
    "create_provider",
    "available_providers",
    "build_messages",
    "build_summary_prompt",
    "system_prompt",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
