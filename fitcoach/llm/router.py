"""AI router: the single entry point callers use to talk to a model."""
import logging
from dataclasses import dataclass

from fitcoach.llm.base import ChatMessage, ChatOptions
from fitcoach.llm.registry import ProviderRegistry
from fitcoach.repositories.ai_model_repository import AiModelRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AiResult:
    text: str
    model: str
    type: str


class AiRouter:
    """
    Spreads requests across configured models by least usage.

    Each call picks the least-used enabled model from the registry table,
    dispatches to the adapter for its type, and records the usage only after
    the adapter returned text. Nothing here retries.
    """

    def __init__(self, models: AiModelRepository, providers: ProviderRegistry):
        self._models = models
        self._providers = providers

    async def ask(
        self,
        messages: list[ChatMessage],
        options: ChatOptions | None = None,
    ) -> AiResult:
        options = options or ChatOptions()
        model = await self._models.pick_model()
        provider = self._providers.get(model.type)

        logger.info("Dispatching to %s model %s", model.type, model.name)
        text = await provider.send(messages, options, model.name)

        await self._models.record_usage(model)
        return AiResult(text=text, model=model.name, type=model.type)
