"""Provider adapter contract shared by every chat-completion backend."""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from fitcoach.config.settings import Settings, get_settings
from fitcoach.core.exceptions import (
    ConfigurationError,
    ProviderError,
    ProviderRateLimitError,
)
from fitcoach.models.enums import ProviderType

logger = logging.getLogger(__name__)

JSON_MIME_TYPE = "application/json"
GENERIC_FAILURE = "Failed to generate content"


@dataclass(frozen=True)
class ChatMessage:
    """A role-tagged message: ``system``, ``user`` or ``assistant``."""
    role: str
    content: str


@dataclass(frozen=True)
class ChatOptions:
    response_mime_type: str | None = None
    temperature: float | None = None

    @property
    def wants_json(self) -> bool:
        return self.response_mime_type == JSON_MIME_TYPE


class LLMProvider(ABC):
    """Uniform wrapper around one external chat-completion API.

    Adapters translate messages into the provider's wire format, request
    JSON output when asked, and normalize failures into ``ProviderError``.
    They never retry; that is the caller's decision.
    """

    provider_type: ProviderType
    display_name: str
    api_key_env: str

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self._api_key = api_key
        self.base_url = (base_url or self._default_base_url()).rstrip("/")
        self._client = client
        self._owns_client = client is None

    @abstractmethod
    def _default_base_url(self) -> str:
        ...

    @abstractmethod
    def _settings_api_key(self) -> str | None:
        ...

    @abstractmethod
    async def send(
        self,
        messages: list[ChatMessage],
        options: ChatOptions,
        model_name: str | None,
    ) -> str:
        """Send messages and return the generated text."""

    @property
    def api_key(self) -> str:
        key = self._api_key or self._settings_api_key()
        if not key:
            raise ConfigurationError(f"{self.api_key_env} is not set")
        return key

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.settings.llm_timeout))
            self._owns_client = True
        return self._client

    async def close(self):
        """Close the HTTP client if this adapter created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _post(self, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.post(url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{self.display_name} request failed: {e}")
            raise ProviderError(self.display_name, GENERIC_FAILURE) from e

    def _parse_json(self, response: httpx.Response) -> Any:
        """Decode a successful response body; a non-JSON body fails the call."""
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{self.display_name} returned a non-JSON body: {response.text[:200]}")
            raise ProviderError(self.display_name, GENERIC_FAILURE, status_code=response.status_code) from e

    def _raise_for_response(self, response: httpx.Response) -> None:
        """Turn a non-2xx response into a normalized ``ProviderError``."""
        if response.is_success:
            return

        payload: Any = None
        try:
            payload = response.json()
        except ValueError:
            logger.error(f"{self.display_name} API error {response.status_code}: {response.text}")
        else:
            logger.error(f"{self.display_name} API error {response.status_code}: {payload}")

        message = _error_message(payload)

        if response.status_code == 429:
            retry_after = _retry_delay(payload) or response.headers.get("retry-after")
            if retry_after:
                if retry_after.isdigit():
                    retry_after = f"{retry_after}s"
                user_message = f"Rate limit reached. Please try again in {retry_after}."
            else:
                user_message = "Rate limit reached. Please try again later."
            raise ProviderRateLimitError(self.display_name, user_message, retry_after=retry_after)

        raise ProviderError(
            self.display_name,
            message or GENERIC_FAILURE,
            status_code=response.status_code,
        )


def _error_message(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) and message else None
    if isinstance(error, str) and error:
        return error
    message = payload.get("message")
    return message if isinstance(message, str) and message else None


def _retry_delay(payload: Any) -> str | None:
    """Extract ``retryDelay`` from a Google ``RetryInfo`` error detail."""
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if not isinstance(error, dict):
        return None
    for detail in error.get("details") or []:
        if not isinstance(detail, dict):
            continue
        if str(detail.get("@type", "")).endswith("google.rpc.RetryInfo"):
            delay = detail.get("retryDelay")
            if isinstance(delay, str) and delay:
                return delay
    return None
