from __future__ import annotations

from typing import Any

import httpx

from genrelay.core.images import to_data_url
from genrelay.core.types import Capability, ImageRef

from .base import DEFAULT_TIMEOUT, ProviderAdapter, chat_messages


class ChatCompletionsAdapter(ProviderAdapter):
    """OpenAI-compatible ``/chat/completions`` endpoint."""

    capabilities = frozenset({Capability.TEXT_GENERATE, Capability.VISION_GENERATE})

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str,
        model: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(api_key, model=model, timeout=timeout, transport=transport)
        self.base_url = base_url.rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def generate_text(
        self,
        system: str,
        user: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        body = self._body(chat_messages(system, user or ""), model, temperature, max_tokens)
        return completion_text(await self._post_chat(body))

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
        content: list[dict[str, Any]] = [{"type": "text", "text": user or ""}]
        for image in images:
            content.append(
                {"type": "image_url", "image_url": {"url": to_data_url(image)}}
            )

        body = self._body(chat_messages(system, content), model, temperature, max_tokens)
        return completion_text(await self._post_chat(body))

    def _body(
        self,
        messages: list[dict[str, Any]],
        model: str | None,
        temperature: float,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        return body

    async def _post_chat(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self._post(
            self.endpoint,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json=body,
        )


class OpenAIChatAdapter(ChatCompletionsAdapter):
    label = "OpenAI"
    credential_env = "OPENAI_API_KEY"


class GrokChatAdapter(ChatCompletionsAdapter):
    label = "Grok"
    credential_env = "XAI_API_KEY"


def completion_text(payload: dict[str, Any]) -> str:
    """``choices[0].message.content``, or ``""`` when the path is missing."""
    choices = payload.get("choices")
    first = (
        choices[0]
        if isinstance(choices, list) and choices and isinstance(choices[0], dict)
        else {}
    )
    message = first.get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None

    if isinstance(content, list):
        return "".join(
            part.get("text", "")
            for part in content
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
    return content if isinstance(content, str) else ""
