from __future__ import annotations

import logging
from typing import Any, ClassVar

import httpx

from genrelay.core.errors import UpstreamError, UpstreamRateLimited
from genrelay.core.logging_setup import truncate
from genrelay.core.types import Capability, ImageRef

LOGGER = logging.getLogger("genrelay.providers")

DEFAULT_TIMEOUT = 120.0


class ProviderAdapter:
    """Translate normalized calls into one provider's wire protocol.

    Subclasses declare the capabilities they implement and override the
    matching coroutine. The base class owns the HTTP client, credential and
    upstream error mapping.
    """

    label: ClassVar[str] = "Provider"
    credential_env: ClassVar[str] = ""
    capabilities: ClassVar[frozenset[Capability]] = frozenset()

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    async def generate_text(
        self,
        system: str,
        user: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        raise NotImplementedError(f"{self.label} does not support text generation")

    async def generate_vision_text(
        self,
        system: str,
        user: str,
        images: list[ImageRef],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        raise NotImplementedError(f"{self.label} does not support image input")

    async def generate_image(
        self,
        prompt: str,
        reference: ImageRef | None = None,
        *,
        model: str | None = None,
    ) -> str:
        raise NotImplementedError(f"{self.label} does not support image generation")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _post(self, url: str, **kwargs: Any) -> dict[str, Any]:
        async with self._client() as client:
            response = await client.post(url, **kwargs)

        payload = _json_or_empty(response)
        if response.status_code >= 400:
            raise self._upstream_error(response.status_code, payload)
        return payload

    def _upstream_error(self, status_code: int, payload: dict[str, Any]) -> UpstreamError:
        message = error_message(payload) or f"{self.label} error ({status_code})"
        LOGGER.error(
            "%s upstream error: status=%s message=%s",
            self.label,
            status_code,
            truncate(message),
        )
        error_cls = UpstreamRateLimited if status_code == 429 else UpstreamError
        return error_cls(
            status_code=status_code or 500,
            message=message,
            provider=self.label,
        )


def error_message(payload: Any) -> str | None:
    """Most specific message found in a provider error body."""
    if not isinstance(payload, dict):
        return None

    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    if isinstance(error, str) and error.strip():
        return error.strip()

    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


def chat_messages(system: str, user: Any) -> list[dict[str, Any]]:
    return [
        {"role": "system", "content": system or ""},
        {"role": "user", "content": user},
    ]


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {"data": payload}
