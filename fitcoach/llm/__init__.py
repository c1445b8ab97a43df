"""LLM adapter package."""
from fitcoach.llm.base import (
    ChatMessage,
    ChatOptions,
    JSON_MIME_TYPE,
    LLMProvider,
)
from fitcoach.llm.gemini_provider import GeminiProvider
from fitcoach.llm.openai_provider import (
    CerebrasProvider,
    GroqProvider,
    MistralProvider,
    OpenAICompatibleProvider,
    OpenRouterProvider,
)
from fitcoach.llm.registry import ProviderRegistry
from fitcoach.llm.router import AiResult, AiRouter

__all__ = [
    "AiResult",
    "AiRouter",
    "CerebrasProvider",
    "ChatMessage",
    "ChatOptions",
    "GeminiProvider",
    "GroqProvider",
    "JSON_MIME_TYPE",
    "LLMProvider",
    "MistralProvider",
    "OpenAICompatibleProvider",
    "OpenRouterProvider",
    "ProviderRegistry",
]
