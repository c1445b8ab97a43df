"""Provider registry: maps a model record's type tag to its adapter."""
import logging

import httpx

from fitcoach.config.settings import Settings, get_settings
from fitcoach.core.exceptions import UnsupportedModelTypeError
from fitcoach.llm.base import LLMProvider
from fitcoach.llm.gemini_provider import GeminiProvider
from fitcoach.llm.openai_provider import (
    CerebrasProvider,
    GroqProvider,
    MistralProvider,
    OpenRouterProvider,
)
from fitcoach.models.enums import ProviderType

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: tuple[type[LLMProvider], ...] = (
    GeminiProvider,
    OpenRouterProvider,
    MistralProvider,
    GroqProvider,
    CerebrasProvider,
)


class ProviderRegistry:
    """Adapters keyed by provider type.

    The router only ever asks the registry for an adapter, so adding a
    backend means registering one more adapter here.
    """

    def __init__(self, providers: dict[ProviderType, LLMProvider] | None = None):
        self._providers: dict[ProviderType, LLMProvider] = dict(providers or {})

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "ProviderRegistry":
        settings = settings or get_settings()
        return cls({
            provider_class.provider_type: provider_class(client=client, settings=settings)
            for provider_class in PROVIDER_CLASSES
        })

    def register(self, provider: LLMProvider) -> None:
        self._providers[provider.provider_type] = provider

    def get(self, model_type: str) -> LLMProvider:
        try:
            provider_type = ProviderType(str(model_type).upper())
        except ValueError:
            raise UnsupportedModelTypeError(model_type)
        provider = self._providers.get(provider_type)
        if provider is None:
            raise UnsupportedModelTypeError(model_type)
        return provider

    @property
    def types(self) -> list[ProviderType]:
        return list(self._providers)

    async def close(self) -> None:
        for provider in self._providers.values():
            try:
                await provider.close()
            except Exception as e:
                logger.warning(f"Failed to close {provider.display_name} client: {e}")
