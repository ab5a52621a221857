"""Process-wide configuration.

Settings are read once at startup (``.env`` first, then the environment)
and handed to the gateway by reference. Provider adapters receive their
credentials from here and never touch the environment themselves.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

from genrelay.core.types import Provider

CREDENTIAL_ENV = {
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.GEMINI: "GOOGLE_API_KEY",
    Provider.GROK: "XAI_API_KEY",
    Provider.FLOW: "FLOW_URL",
}


@dataclass(frozen=True)
class Settings:
    openai_api_key: str | None = None
    google_api_key: str | None = None
    xai_api_key: str | None = None
    flow_url: str | None = None
    flow_api_key: str | None = None

    openai_base_url: str = "https://api.openai.com/v1"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    xai_base_url: str = "https://api.x.ai/v1"

    openai_model: str = "gpt-4.1-mini"
    gemini_model: str = "gemini-1.5-flash"
    grok_model: str = "grok-2"
    image_model: str = "gpt-image-1"
    image_size: str = "1024x1536"
    image_strategy: str = "describe"

    max_retries: int = 2
    upstream_timeout: float = 120.0
    max_upload_bytes: int = 5 * 1024 * 1024
    rate_limit_max: int = 60
    rate_limit_window_seconds: float = 60.0
    allowed_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 10000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        if environ is None:
            load_dotenv()
            environ = os.environ

        def get(name: str, default: str | None = None) -> str | None:
            value = environ.get(name, "").strip()
            return value or default

        defaults = cls()
        origins = get("ALLOWED_ORIGINS", "*") or "*"

        return cls(
            openai_api_key=get("OPENAI_API_KEY"),
            google_api_key=get("GOOGLE_API_KEY") or get("GEMINI_API_KEY"),
            xai_api_key=get("XAI_API_KEY"),
            flow_url=get("FLOW_URL"),
            flow_api_key=get("FLOW_API_KEY"),
            openai_base_url=get("OPENAI_BASE_URL", defaults.openai_base_url),
            gemini_base_url=get("GEMINI_BASE_URL", defaults.gemini_base_url),
            xai_base_url=get("XAI_BASE_URL", defaults.xai_base_url),
            openai_model=get("OPENAI_MODEL", defaults.openai_model),
            gemini_model=get("GEMINI_MODEL", defaults.gemini_model),
            grok_model=get("GROK_MODEL", defaults.grok_model),
            image_model=get("IMAGE_MODEL", defaults.image_model),
            image_size=get("IMAGE_SIZE", defaults.image_size),
            image_strategy=(get("IMAGE_STRATEGY", defaults.image_strategy) or "").lower(),
            max_retries=int(get("MAX_RETRIES", str(defaults.max_retries))),
            upstream_timeout=float(get("UPSTREAM_TIMEOUT", str(defaults.upstream_timeout))),
            max_upload_bytes=int(get("MAX_UPLOAD_BYTES", str(defaults.max_upload_bytes))),
            rate_limit_max=int(get("RATE_LIMIT_MAX", str(defaults.rate_limit_max))),
            rate_limit_window_seconds=float(
                get("RATE_LIMIT_WINDOW_SECONDS", str(defaults.rate_limit_window_seconds))
            ),
            allowed_origins=tuple(
                origin.strip() for origin in origins.split(",") if origin.strip()
            ),
            log_level=get("LOG_LEVEL", defaults.log_level),
            host=get("HOST", defaults.host),
            port=int(get("PORT", str(defaults.port))),
        )

    def credential_for(self, provider: Provider) -> str | None:
        return {
            Provider.OPENAI: self.openai_api_key,
            Provider.GEMINI: self.google_api_key,
            Provider.GROK: self.xai_api_key,
            Provider.FLOW: self.flow_url,
        }[provider]
