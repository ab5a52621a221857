from __future__ import annotations

import httpx

from genrelay.config import Settings
from genrelay.core.types import Provider

from .base import ProviderAdapter
from .chat import GrokChatAdapter, OpenAIChatAdapter
from .flow import FlowAdapter
from .gemini import GeminiAdapter
from .images import OpenAIImageAdapter


def build_text_adapters(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[Provider, ProviderAdapter]:
    timeout = settings.upstream_timeout
    return {
        Provider.OPENAI: OpenAIChatAdapter(
            settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            timeout=timeout,
            transport=transport,
        ),
        Provider.GEMINI: GeminiAdapter(
            settings.google_api_key,
            base_url=settings.gemini_base_url,
            model=settings.gemini_model,
            timeout=timeout,
            transport=transport,
        ),
        Provider.GROK: GrokChatAdapter(
            settings.xai_api_key,
            base_url=settings.xai_base_url,
            model=settings.grok_model,
            timeout=timeout,
            transport=transport,
        ),
        Provider.FLOW: FlowAdapter(
            settings.flow_url,
            api_key=settings.flow_api_key,
            timeout=timeout,
            transport=transport,
        ),
    }


def build_image_adapters(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[Provider, ProviderAdapter]:
    return {
        Provider.OPENAI: OpenAIImageAdapter(
            settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.image_model,
            size=settings.image_size,
            timeout=settings.upstream_timeout,
            transport=transport,
        ),
    }
