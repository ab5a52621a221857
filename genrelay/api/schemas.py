from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ImagePayload(BaseModel):
    name: str = "image"
    mime: str | None = None
    # base64 or a data: URL
    data: str

    model_config = ConfigDict(extra="allow")


class GenerateRequestBody(BaseModel):
    provider: str = "openai"
    model: str | None = None
    system: str = ""
    user: str = ""
    temperature: float = 0.7
    max_tokens: int | None = None
    images: list[ImagePayload] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")
