from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping

import httpx

from .errors import (
    ClientInputError,
    GatewayError,
    ServerConfigError,
    UpstreamEmptyResult,
    UpstreamError,
)
from .extraction import extract_structured
from .images import require_image
from .logging_setup import truncate
from .prompts import (
    PRODUCT_VISION_SYSTEM_PROMPT,
    PRODUCT_VISION_USER_PROMPT,
    vertical_ad_prompt,
)
from .retry import execute_with_retry
from .types import (
    MAX_REFERENCE_IMAGES,
    Capability,
    ErrorResult,
    GenerationRequest,
    ImageGenerationRequest,
    ImageResult,
    NormalizedResult,
    Provider,
    TextResult,
)

if TYPE_CHECKING:
    from genrelay.config import Settings
    from genrelay.providers.base import ProviderAdapter

LOGGER = logging.getLogger("genrelay.gateway")

IMAGE_STRATEGIES = ("describe", "edit")


class GenerationGateway:
    """Single entry point from normalized requests to provider adapters.

    Requests are validated before any upstream call, dispatched through the
    provider lookup table with rate-limit retries, and every failure is
    converted into an ``ErrorResult`` here.
    """

    def __init__(
        self,
        text_adapters: Mapping[Provider, "ProviderAdapter"],
        image_adapters: Mapping[Provider, "ProviderAdapter"] | None = None,
        *,
        max_retries: int = 2,
        image_strategy: str = "describe",
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if image_strategy not in IMAGE_STRATEGIES:
            raise ValueError(f"Unknown image strategy '{image_strategy}'")

        self.text_adapters = dict(text_adapters)
        self.image_adapters = dict(image_adapters or {})
        self.max_retries = max_retries
        self.image_strategy = image_strategy
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "GenerationGateway":
        from genrelay.providers.registry import build_image_adapters, build_text_adapters

        return cls(
            build_text_adapters(settings, transport),
            build_image_adapters(settings, transport),
            max_retries=settings.max_retries,
            image_strategy=settings.image_strategy,
        )

    async def generate(self, request: GenerationRequest) -> NormalizedResult:
        try:
            return await self._generate_text(request)
        except Exception as exc:
            return self._to_error(exc, request.provider)

    async def generate_image(self, request: ImageGenerationRequest) -> NormalizedResult:
        try:
            return await self._generate_image(request)
        except Exception as exc:
            return self._to_error(exc, request.provider)

    async def _generate_text(self, request: GenerationRequest) -> TextResult:
        provider, adapter = self._resolve(request.provider, self.text_adapters)

        user = (request.user_content or "").strip()
        if not user:
            raise ClientInputError(
                message=f"Missing {request.prompt_field}",
                param=request.prompt_field,
            )

        images = list(request.images)
        if len(images) > MAX_REFERENCE_IMAGES:
            raise ClientInputError(
                message=f"At most {MAX_REFERENCE_IMAGES} reference images are accepted",
                param="images",
            )
        if images and not adapter.supports(Capability.VISION_GENERATE):
            raise ClientInputError(
                message=f"{adapter.label} does not accept reference images",
                param="images",
            )

        self._require_credential(adapter)

        system = request.system_instruction or ""
        options = {
            "model": request.model or None,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }

        if images:
            text = await self._call(
                lambda: adapter.generate_vision_text(system, user, images, **options)
            )
        else:
            text = await self._call(lambda: adapter.generate_text(system, user, **options))

        text = (text or "").strip()
        if not text and not request.allow_empty:
            raise UpstreamEmptyResult(
                message="Empty response from model",
                provider=adapter.label,
            )

        extracted = extract_structured(text)
        return TextResult(
            value=text,
            raw=extracted.raw,
            parsed_json=extracted.parsed,
            provider=provider.value,
            model=request.model or adapter.model,
        )

    async def _generate_image(self, request: ImageGenerationRequest) -> ImageResult:
        provider, image_adapter = self._resolve(
            request.provider or Provider.OPENAI.value,
            self.image_adapters,
            capability="image generation",
        )

        instructions = (request.prompt or "").strip()
        if not instructions:
            raise ClientInputError(message="Missing soraPrompt", param="soraPrompt")

        reference = require_image(request.reference, "img1")
        self._require_credential(image_adapter)

        if self.image_strategy == "edit":
            prompt = vertical_ad_prompt("", instructions)
            b64 = await self._call(
                lambda: image_adapter.generate_image(prompt, reference, model=request.model)
            )
        else:
            vision = self.text_adapters.get(provider)
            if vision is None or not vision.supports(Capability.VISION_GENERATE):
                raise ServerConfigError(
                    message=f"No vision model configured for {provider.value}",
                    code="missing_vision_adapter",
                )
            self._require_credential(vision)

            description = await self._call(
                lambda: vision.generate_vision_text(
                    PRODUCT_VISION_SYSTEM_PROMPT,
                    PRODUCT_VISION_USER_PROMPT,
                    [reference],
                    temperature=0.2,
                    max_tokens=300,
                )
            )
            description = (description or "").strip()
            if not description:
                raise UpstreamEmptyResult(
                    message="Vision analysis returned empty",
                    provider=vision.label,
                )

            prompt = vertical_ad_prompt(description, instructions)
            b64 = await self._call(
                lambda: image_adapter.generate_image(prompt, model=request.model)
            )

        return ImageResult(
            b64=b64,
            mime_type="image/png",
            provider=provider.value,
            model=request.model or image_adapter.model,
        )

    def _resolve(
        self,
        name: str,
        table: Mapping[Provider, "ProviderAdapter"],
        capability: str | None = None,
    ) -> tuple[Provider, "ProviderAdapter"]:
        provider = Provider.parse(name)
        if provider is None:
            known = "/".join(p.value for p in self.text_adapters) or "none"
            raise ClientInputError(
                message=f"Unknown provider '{name}' (use {known})",
                code="unknown_provider",
                param="provider",
            )

        adapter = table.get(provider)
        if adapter is None:
            detail = f" does not support {capability}" if capability else " is not available"
            raise ClientInputError(
                message=f"Provider '{provider.value}'{detail}",
                code="unsupported_provider",
                param="provider",
            )
        return provider, adapter

    @staticmethod
    def _require_credential(adapter: "ProviderAdapter") -> None:
        if not adapter.is_configured:
            raise ServerConfigError(message=f"Missing {adapter.credential_env}")

    async def _call(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        return await execute_with_retry(operation, self.max_retries, sleep=self._sleep)

    def _to_error(self, exc: Exception, provider_name: str | None) -> ErrorResult:
        label = self._label(provider_name)

        if isinstance(exc, GatewayError):
            status = exc.status_code or 500
            message = exc.message
            if isinstance(exc, UpstreamError):
                label = exc.provider or label
                if status == 429:
                    message = (
                        f"{label} rate limit / quota reached (HTTP 429). "
                        "Check billing/limits."
                    )
            log = LOGGER.warning if status < 500 else LOGGER.error
            log(
                "Generation failed: provider=%s status=%s message=%s",
                provider_name,
                status,
                truncate(exc.message),
            )
            return ErrorResult(status_code=status, message=message)

        if isinstance(exc, httpx.RequestError):
            LOGGER.error(
                "Upstream request failed: provider=%s error=%s",
                provider_name,
                exc.__class__.__name__,
            )
            return ErrorResult(status_code=502, message=f"{label} request failed")

        LOGGER.exception("Unhandled generation error: provider=%s", provider_name)
        return ErrorResult(status_code=500, message="Server error")

    def _label(self, provider_name: str | None) -> str:
        provider = Provider.parse(provider_name)
        adapter = self.text_adapters.get(provider) if provider else None
        if adapter is not None:
            return adapter.label
        return (provider_name or "Provider").capitalize()
