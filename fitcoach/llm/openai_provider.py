"""OpenAI-compatible LLM provider implementations."""
import logging

from fitcoach.core.exceptions import EmptyResponseError
from fitcoach.llm.base import ChatMessage, ChatOptions, LLMProvider
from fitcoach.models.enums import ProviderType

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(LLMProvider):
    """
    Chat-completions provider for OpenAI-style APIs.

    OpenRouter, Mistral, Groq and Cerebras all accept the same request:
    role-tagged messages inline (system included), bearer auth, and
    ``response_format: {"type": "json_object"}`` for JSON output. Subclasses
    only say where to send it and which key to use.
    """

    base_url_setting: str
    api_key_setting: str

    def _default_base_url(self) -> str:
        return getattr(self.settings, self.base_url_setting)

    def _settings_api_key(self) -> str | None:
        return getattr(self.settings, self.api_key_setting)

    def build_payload(
        self,
        messages: list[ChatMessage],
        options: ChatOptions,
        model_name: str,
    ) -> dict:
        payload: dict = {
            "model": model_name,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if options.wants_json:
            payload["response_format"] = {"type": "json_object"}
        if options.temperature is not None:
            payload["temperature"] = options.temperature
        return payload

    async def send(
        self,
        messages: list[ChatMessage],
        options: ChatOptions,
        model_name: str | None,
    ) -> str:
        api_key = self.api_key
        if not model_name:
            raise ValueError(f"{self.display_name} requires a model name")

        response = await self._post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json=self.build_payload(messages, options, model_name),
        )
        self._raise_for_response(response)

        data = self._parse_json(response)
        choices = data.get("choices") if isinstance(data, dict) else None
        choice = choices[0] if isinstance(choices, list) and choices else None
        message = choice.get("message") if isinstance(choice, dict) else None
        output = message.get("content") if isinstance(message, dict) else None
        if not isinstance(output, str) or not output:
            raise EmptyResponseError(self.display_name)

        logger.debug(
            "%s response received (model=%s, finish_reason=%s)",
            self.display_name,
            model_name,
            choice.get("finish_reason"),
        )
        return output


class OpenRouterProvider(OpenAICompatibleProvider):
    provider_type = ProviderType.OPENROUTER
    display_name = "OpenRouter"
    api_key_env = "OPENROUTER_API_KEY"
    api_key_setting = "openrouter_api_key"
    base_url_setting = "openrouter_base_url"


class MistralProvider(OpenAICompatibleProvider):
    provider_type = ProviderType.MISTRAL
    display_name = "Mistral"
    api_key_env = "MISTRAL_API_KEY"
    api_key_setting = "mistral_api_key"
    base_url_setting = "mistral_base_url"


class GroqProvider(OpenAICompatibleProvider):
    provider_type = ProviderType.GROQ
    display_name = "Groq"
    api_key_env = "GROQ_API_KEY"
    api_key_setting = "groq_api_key"
    base_url_setting = "groq_base_url"


class CerebrasProvider(OpenAICompatibleProvider):
    provider_type = ProviderType.CEREBRAS
    display_name = "Cerebras"
    api_key_env = "CEREBRAS_API_KEY"
    api_key_setting = "cerebras_api_key"
    base_url_setting = "cerebras_base_url"
