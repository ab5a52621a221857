from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from genrelay.core.images import to_inline
from genrelay.core.types import Capability, ImageRef

from .base import DEFAULT_TIMEOUT, ProviderAdapter


class GeminiAdapter(ProviderAdapter):
    """Google ``models/{model}:generateContent`` endpoint.

    The key travels as a query parameter. System and user text are merged
    into one user turn; reference images follow as ``inlineData`` parts.
    """

    label = "Gemini"
    credential_env = "GOOGLE_API_KEY"
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

    def endpoint(self, model: str | None = None) -> str:
        name = quote(model or self.model, safe="")
        return f"{self.base_url}/models/{name}:generateContent"

    async def generate_text(
        self,
        system: str,
        user: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        return await self.generate_vision_text(
            system,
            user,
            [],
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )

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
        parts: list[dict[str, Any]] = [{"text": f"{system or ''}\n\n{user or ''}"}]
        parts.extend({"inlineData": to_inline(image)} for image in images)

        generation_config: dict[str, Any] = {"temperature": temperature}
        if max_tokens is not None:
            generation_config["maxOutputTokens"] = max_tokens

        payload = await self._post(
            self.endpoint(model),
            params={"key": self.api_key},
            headers={"Content-Type": "application/json"},
            json={
                "contents": [{"role": "user", "parts": parts}],
                "generationConfig": generation_config,
            },
        )
        return candidate_text(payload)


def candidate_text(payload: dict[str, Any]) -> str:
    """Concatenate ``candidates[0].content.parts[].text`` in array order."""
    candidates = payload.get("candidates")
    first = (
        candidates[0]
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict)
        else {}
    )
    content = first.get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None

    return "".join(
        part["text"]
        for part in parts or []
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
