"""Google Gemini provider implementation."""
import logging

from fitcoach.core.exceptions import EmptyResponseError
from fitcoach.llm.base import ChatMessage, ChatOptions, JSON_MIME_TYPE, LLMProvider
from fitcoach.models.enums import ProviderType

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """
    Gemini ``generateContent`` provider.

    Unlike the OpenAI-compatible APIs, Gemini takes system messages in a
    separate ``systemInstruction`` field and calls the assistant role
    ``model``. JSON output is requested through ``generationConfig``.
    """

    provider_type = ProviderType.GEMINI
    display_name = "Gemini"
    api_key_env = "GEMINI_API_KEY"

    def _default_base_url(self) -> str:
        return self.settings.gemini_base_url

    def _settings_api_key(self) -> str | None:
        return self.settings.gemini_api_key

    def build_payload(self, messages: list[ChatMessage], options: ChatOptions) -> dict:
        system_parts = [{"text": m.content} for m in messages if m.role == "system"]
        contents = [
            {
                "role": "model" if m.role == "assistant" else "user",
                "parts": [{"text": m.content}],
            }
            for m in messages
            if m.role != "system"
        ]

        payload: dict = {"contents": contents}
        if system_parts:
            payload["systemInstruction"] = {"parts": system_parts}

        generation_config: dict = {}
        if options.wants_json:
            generation_config["responseMimeType"] = JSON_MIME_TYPE
        if options.temperature is not None:
            generation_config["temperature"] = options.temperature
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    async def send(
        self,
        messages: list[ChatMessage],
        options: ChatOptions,
        model_name: str | None,
    ) -> str:
        api_key = self.api_key
        model = model_name or self.settings.gemini_model

        response = await self._post(
            f"{self.base_url}/models/{model}:generateContent",
            params={"key": api_key},
            json=self.build_payload(messages, options),
        )
        self._raise_for_response(response)

        output = _candidate_text(self._parse_json(response))
        if not output:
            raise EmptyResponseError(self.display_name)

        logger.debug("Gemini response received (model=%s, chars=%d)", model, len(output))
        return output


def _candidate_text(data) -> str:
    """Concatenated text parts of the first candidate, skipping anything that is not text."""
    candidates = data.get("candidates") if isinstance(data, dict) else None
    candidate = candidates[0] if isinstance(candidates, list) and candidates else None
    content = candidate.get("content") if isinstance(candidate, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(
        part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
