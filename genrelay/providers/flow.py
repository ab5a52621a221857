from __future__ import annotations

from typing import Any

import httpx

from genrelay.core.images import to_data_url
from genrelay.core.types import Capability, ImageRef

from .base import DEFAULT_TIMEOUT, ProviderAdapter

ANSWER_KEYS = ("text", "answer", "result")


class FlowAdapter(ProviderAdapter):
    """Generic webhook ("flow") prediction endpoint.

    The configured URL doubles as the credential; the bearer key is
    optional. Prompt and references go out as ``{question, uploads}``.
    """

    label = "Flow"
    credential_env = "FLOW_URL"
    capabilities = frozenset({Capability.TEXT_GENERATE, Capability.VISION_GENERATE})

    def __init__(
        self,
        url: str | None,
        *,
        api_key: str | None = None,
        model: str = "flow",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(url, model=model, timeout=timeout, transport=transport)
        self.url = url
        self.bearer = api_key

    async def generate_text(
        self,
        system: str,
        user: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        return await self.generate_vision_text(system, user, [])

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
        question = f"{system}\n\n{user}" if system else user
        body: dict[str, Any] = {
            "question": question,
            "uploads": [
                {
                    "name": image.original_name,
                    "type": "file",
                    "mime": image.mime_type,
                    "data": to_data_url(image),
                }
                for image in images
            ],
        }

        headers = {"Content-Type": "application/json"}
        if self.bearer:
            headers["Authorization"] = f"Bearer {self.bearer}"

        payload = await self._post(self.url or "", headers=headers, json=body)
        return answer_text(payload)


def answer_text(payload: dict[str, Any]) -> str:
    """First non-empty of ``text``, ``answer``, ``result``."""
    for key in ANSWER_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return ""
