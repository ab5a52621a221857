from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

MAX_REFERENCE_IMAGES = 2


class Provider(str, Enum):
    OPENAI = "openai"
    GEMINI = "gemini"
    GROK = "grok"
    FLOW = "flow"

    @classmethod
    def parse(cls, name: str | None) -> "Provider | None":
        key = (name or "").strip().lower()
        key = PROVIDER_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


PROVIDER_ALIASES = {
    "google": "gemini",
    "xai": "grok",
    "flowise": "flow",
}


class Capability(str, Enum):
    TEXT_GENERATE = "text_generate"
    VISION_GENERATE = "vision_generate"
    IMAGE_GENERATE = "image_generate"
    IMAGE_EDIT = "image_edit"


@dataclass(slots=True)
class ImageRef:
    mime_type: str
    data: bytes
    original_name: str = "image"
    field_name: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(slots=True)
class GenerationRequest:
    provider: str
    user_content: str
    system_instruction: str = ""
    model: str | None = None
    images: list[ImageRef] = field(default_factory=list)
    temperature: float = 0.7
    max_tokens: int | None = None
    # Blank model text is reported as success instead of a 502.
    allow_empty: bool = False
    # Name of the prompt field as the caller sent it, for error messages.
    prompt_field: str = "user"


@dataclass(slots=True)
class ImageGenerationRequest:
    prompt: str
    reference: ImageRef | None
    provider: str = "openai"
    model: str | None = None


@dataclass(slots=True)
class TextResult:
    value: str
    raw: str
    parsed_json: Any = None
    provider: str | None = None
    model: str | None = None


@dataclass(slots=True)
class ImageResult:
    b64: str
    mime_type: str = "image/png"
    provider: str | None = None
    model: str | None = None


@dataclass(slots=True)
class ErrorResult:
    status_code: int
    message: str

    def to_envelope(self) -> dict[str, Any]:
        return {"success": False, "error": self.message}


NormalizedResult = Union[TextResult, ImageResult, ErrorResult]
