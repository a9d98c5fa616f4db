from .base import Message, TextProvider
from .factory import available_providers, create_provider
from .gemini import GeminiProvider
from .openai_compatible import OpenAICompatibleProvider
from .workers_ai import WorkersAIProvider

__all__ = [
    "Message",
    "TextProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "WorkersAIProvider",
    "available_providers",
    "create_provider",
]
