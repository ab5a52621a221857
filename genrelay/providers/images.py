from __future__ import annotations

from typing import Any

import httpx

from genrelay.core.errors import UpstreamEmptyResult
from genrelay.core.images import to_multipart_part
from genrelay.core.types import Capability, ImageRef

from .base import DEFAULT_TIMEOUT, ProviderAdapter


class OpenAIImageAdapter(ProviderAdapter):
    """``/images/generations`` and, with a reference, ``/images/edits``.

    Output size is fixed per deployment rather than chosen by the caller.
    """

    label = "OpenAI"
    credential_env = "OPENAI_API_KEY"
    capabilities = frozenset({Capability.IMAGE_GENERATE, Capability.IMAGE_EDIT})

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str,
        model: str,
        size: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(api_key, model=model, timeout=timeout, transport=transport)
        self.base_url = base_url.rstrip("/")
        self.size = size

    async def generate_image(
        self,
        prompt: str,
        reference: ImageRef | None = None,
        *,
        model: str | None = None,
    ) -> str:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        fields = {"model": model or self.model, "prompt": prompt, "size": self.size}

        if reference is None:
            payload = await self._post(
                f"{self.base_url}/images/generations",
                headers={**headers, "Content-Type": "application/json"},
                json=fields,
            )
        else:
            payload = await self._post(
                f"{self.base_url}/images/edits",
                headers=headers,
                data=fields,
                files={"image": to_multipart_part(reference)},
            )

        b64 = first_b64(payload)
        if not b64:
            raise UpstreamEmptyResult(
                message="No base64 image returned from image model",
                provider=self.label,
            )
        return b64


def first_b64(payload: dict[str, Any]) -> str | None:
    data = payload.get("data")
    first = data[0] if isinstance(data, list) and data and isinstance(data[0], dict) else {}
    b64 = first.get("b64_json")
    return b64 if isinstance(b64, str) and b64 else None
