"""Tests for the provider adapters' wire format and error normalization."""
import json

import httpx
import pytest

from fitcoach.config.settings import Settings
from fitcoach.core.exceptions import (
    ConfigurationError,
    EmptyResponseError,
    ProviderError,
    ProviderRateLimitError,
    UnsupportedModelTypeError,
)
from fitcoach.llm.base import JSON_MIME_TYPE, ChatMessage, ChatOptions
from fitcoach.llm.gemini_provider import GeminiProvider
from fitcoach.llm.openai_provider import (
    CerebrasProvider,
    GroqProvider,
    MistralProvider,
    OpenRouterProvider,
)
from fitcoach.llm.registry import ProviderRegistry
from fitcoach.models.enums import ProviderType

MESSAGES = [
    ChatMessage("system", "Be safe."),
    ChatMessage("user", "Plan please."),
    ChatMessage("assistant", "Sure."),
]
JSON_MODE = ChatOptions(response_mime_type=JSON_MIME_TYPE)


def _settings(**overrides) -> Settings:
    values = {
        "gemini_api_key": "g-key",
        "openrouter_api_key": "or-key",
        "mistral_api_key": "m-key",
        "groq_api_key": "gq-key",
        "cerebras_api_key": "c-key",
    }
    values.update(overrides)
    return Settings(**values)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _openai_reply(text: str | None) -> dict:
    return {"choices": [{"message": {"content": text}, "finish_reason": "stop"}]}


class TestGeminiProvider:
    def test_payload_splits_system_and_maps_roles(self):
        provider = GeminiProvider(settings=_settings())
        payload = provider.build_payload(MESSAGES, JSON_MODE)

        assert payload["systemInstruction"] == {"parts": [{"text": "Be safe."}]}
        assert [c["role"] for c in payload["contents"]] == ["user", "model"]
        assert payload["generationConfig"]["responseMimeType"] == "application/json"

    def test_payload_without_json_mode_has_no_generation_config(self):
        provider = GeminiProvider(settings=_settings())
        payload = provider.build_payload([ChatMessage("user", "hi")], ChatOptions())

        assert "generationConfig" not in payload
        assert "systemInstruction" not in payload

    @pytest.mark.asyncio
    async def test_send_uses_model_endpoint_and_key_param(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_reply('{"ok": true}'))

        provider = GeminiProvider(settings=_settings(), client=_client(handler))
        text = await provider.send(MESSAGES, JSON_MODE, "gemini-1.5-pro")

        assert text == '{"ok": true}'
        assert seen["url"].path.endswith("/models/gemini-1.5-pro:generateContent")
        assert seen["url"].params["key"] == "g-key"

    @pytest.mark.asyncio
    async def test_send_falls_back_to_configured_model(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json=_gemini_reply("hello"))

        provider = GeminiProvider(settings=_settings(gemini_model="gemini-test"), client=_client(handler))
        await provider.send([ChatMessage("user", "hi")], ChatOptions(), None)

        assert seen["path"].endswith("/models/gemini-test:generateContent")

    @pytest.mark.asyncio
    async def test_missing_key_names_the_variable(self):
        provider = GeminiProvider(settings=_settings(gemini_api_key=None))
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY is not set"):
            await provider.send(MESSAGES, JSON_MODE, "gemini-2.0-flash")

    @pytest.mark.asyncio
    async def test_rate_limit_surfaces_retry_delay(self):
        def handler(request):
            return httpx.Response(
                429,
                json={
                    "error": {
                        "code": 429,
                        "message": "Resource exhausted",
                        "details": [
                            {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": "17s"}
                        ],
                    }
                },
            )

        provider = GeminiProvider(settings=_settings(), client=_client(handler))
        with pytest.raises(ProviderRateLimitError) as exc_info:
            await provider.send(MESSAGES, JSON_MODE, "gemini-2.0-flash")

        assert "17s" in exc_info.value.message
        assert exc_info.value.retry_after == "17s"

    @pytest.mark.asyncio
    async def test_empty_candidates_raise(self):
        provider = GeminiProvider(
            settings=_settings(),
            client=_client(lambda request: httpx.Response(200, json={"candidates": []})),
        )
        with pytest.raises(EmptyResponseError):
            await provider.send(MESSAGES, JSON_MODE, "gemini-2.0-flash")

    @pytest.mark.asyncio
    async def test_non_json_success_body_is_provider_error(self):
        provider = GeminiProvider(
            settings=_settings(),
            client=_client(lambda request: httpx.Response(200, text="<html>maintenance</html>")),
        )
        with pytest.raises(ProviderError) as exc_info:
            await provider.send(MESSAGES, JSON_MODE, "gemini-2.0-flash")

        assert exc_info.value.message == "Failed to generate content"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"candidates": [None]},
            {"candidates": [{"content": None}]},
            {"candidates": [{"content": {"parts": [{"text": None}]}}]},
            {"candidates": [{"content": {"parts": "text"}}]},
            [],
        ],
    )
    async def test_malformed_candidates_are_empty_responses(self, body):
        provider = GeminiProvider(
            settings=_settings(),
            client=_client(lambda request: httpx.Response(200, json=body)),
        )
        with pytest.raises(EmptyResponseError):
            await provider.send(MESSAGES, JSON_MODE, "gemini-2.0-flash")

    @pytest.mark.asyncio
    async def test_non_text_parts_are_skipped(self):
        body = {"candidates": [{"content": {"parts": [{"text": None}, {"inlineData": {}}, {"text": "ok"}]}}]}
        provider = GeminiProvider(
            settings=_settings(),
            client=_client(lambda request: httpx.Response(200, json=body)),
        )

        assert await provider.send(MESSAGES, JSON_MODE, "gemini-2.0-flash") == "ok"

@pytest.mark.parametrize(
    "provider_class, key",
    [
        (OpenRouterProvider, "or-key"),
        (MistralProvider, "m-key"),
        (GroqProvider, "gq-key"),
        (CerebrasProvider, "c-key"),
    ],
)
class TestOpenAICompatibleProviders:
    @pytest.mark.asyncio
    async def test_send_posts_chat_completion(self, provider_class, key):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_openai_reply("done"))

        provider = provider_class(settings=_settings(), client=_client(handler))
        text = await provider.send(MESSAGES, JSON_MODE, "some-model")

        assert text == "done"
        assert seen["url"].endswith("/chat/completions")
        assert seen["auth"] == f"Bearer {key}"
        assert seen["body"]["model"] == "some-model"
        assert seen["body"]["response_format"] == {"type": "json_object"}
        assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user", "assistant"]

    @pytest.mark.asyncio
    async def test_error_body_message_is_kept(self, provider_class, key):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "model not found"}})

        provider = provider_class(settings=_settings(), client=_client(handler))
        with pytest.raises(ProviderError) as exc_info:
            await provider.send(MESSAGES, ChatOptions(), "missing")

        assert exc_info.value.message == "model not found"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_content_raises(self, provider_class, key):
        provider = provider_class(
            settings=_settings(),
            client=_client(lambda request: httpx.Response(200, json=_openai_reply(None))),
        )
        with pytest.raises(EmptyResponseError):
            await provider.send(MESSAGES, ChatOptions(), "some-model")

    @pytest.mark.asyncio
    async def test_malformed_choices_are_empty_responses(self, provider_class, key):
        bodies = [{"choices": [None]}, {"choices": [{"message": None}]}, {"choices": [{"message": {"content": 42}}]}, {"choices": "x"}]
        for body in bodies:
            provider = provider_class(
                settings=_settings(),
                client=_client(lambda request, body=body: httpx.Response(200, json=body)),
            )
            with pytest.raises(EmptyResponseError):
                await provider.send(MESSAGES, ChatOptions(), "some-model")

    @pytest.mark.asyncio
    async def test_non_json_success_body_is_provider_error(self, provider_class, key):
        provider = provider_class(
            settings=_settings(),
            client=_client(lambda request: httpx.Response(200, text="<html>oops</html>")),
        )
        with pytest.raises(ProviderError):
            await provider.send(MESSAGES, ChatOptions(), "some-model")

class TestOpenAICompatibleErrors:
    @pytest.mark.asyncio
    async def test_retry_after_header_used_for_rate_limit(self):
        def handler(request):
            return httpx.Response(429, headers={"Retry-After": "30"}, text="slow down")

        provider = GroqProvider(settings=_settings(), client=_client(handler))
        with pytest.raises(ProviderRateLimitError) as exc_info:
            await provider.send(MESSAGES, ChatOptions(), "llama")

        assert exc_info.value.message == "Rate limit reached. Please try again in 30s."

    @pytest.mark.asyncio
    async def test_rate_limit_without_hint_is_generic(self):
        provider = MistralProvider(
            settings=_settings(),
            client=_client(lambda request: httpx.Response(429, json={"message": "too many"})),
        )
        with pytest.raises(ProviderRateLimitError) as exc_info:
            await provider.send(MESSAGES, ChatOptions(), "mistral-small")

        assert exc_info.value.message == "Rate limit reached. Please try again later."

    @pytest.mark.asyncio
    async def test_non_json_error_falls_back_to_generic_message(self):
        provider = CerebrasProvider(
            settings=_settings(),
            client=_client(lambda request: httpx.Response(502, text="<html>bad gateway</html>")),
        )
        with pytest.raises(ProviderError) as exc_info:
            await provider.send(MESSAGES, ChatOptions(), "llama")

        assert exc_info.value.message == "Failed to generate content"

    @pytest.mark.asyncio
    async def test_missing_key_names_the_variable(self):
        provider = OpenRouterProvider(settings=_settings(openrouter_api_key=None))
        with pytest.raises(ConfigurationError, match="OPENROUTER_API_KEY is not set"):
            await provider.send(MESSAGES, ChatOptions(), "some-model")


class TestProviderRegistry:
    def test_from_settings_registers_all_five(self):
        registry = ProviderRegistry.from_settings(_settings())
        assert set(registry.types) == set(ProviderType)

    def test_lookup_is_case_insensitive(self):
        registry = ProviderRegistry.from_settings(_settings())
        assert isinstance(registry.get("groq"), GroqProvider)

    def test_unknown_type_raises(self):
        registry = ProviderRegistry.from_settings(_settings())
        with pytest.raises(UnsupportedModelTypeError):
            registry.get("OPENAI")

    def test_known_but_unregistered_type_raises(self):
        registry = ProviderRegistry({ProviderType.GEMINI: GeminiProvider(settings=_settings())})
        with pytest.raises(UnsupportedModelTypeError):
            registry.get("MISTRAL")
