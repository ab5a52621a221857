from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from genrelay.config import Settings
from genrelay.core.gateway import GenerationGateway
from genrelay.core.types import Capability, ImageRef, Provider
from genrelay.main import create_app
from genrelay.providers.base import ProviderAdapter


class RecordingTextAdapter(ProviderAdapter):
    label = "Fake"
    credential_env = "FAKE_API_KEY"
    capabilities = frozenset({Capability.TEXT_GENERATE, Capability.VISION_GENERATE})

    def __init__(self, reply: str = "stub text", api_key: str | None = "test-key") -> None:
        super().__init__(api_key, model="fake-model")
        self.reply = reply
        self.errors: list[Exception] = []
        self.calls: list[dict[str, Any]] = []

    async def generate_text(self, system: str, user: str, **options: Any) -> str:
        return self._record(system=system, user=user, images=[], **options)

    async def generate_vision_text(
        self,
        system: str,
        user: str,
        images: list[ImageRef],
        **options: Any,
    ) -> str:
        return self._record(system=system, user=user, images=images, **options)

    def _record(self, **call: Any) -> str:
        self.calls.append(call)
        if self.errors:
            raise self.errors.pop(0)
        return self.reply


class RecordingImageAdapter(ProviderAdapter):
    label = "FakeImage"
    credential_env = "FAKE_API_KEY"
    capabilities = frozenset({Capability.IMAGE_GENERATE, Capability.IMAGE_EDIT})

    def __init__(self, b64: str = "aW1hZ2U=", api_key: str | None = "test-key") -> None:
        super().__init__(api_key, model="fake-image-model")
        self.b64 = b64
        self.calls: list[dict[str, Any]] = []

    async def generate_image(
        self,
        prompt: str,
        reference: ImageRef | None = None,
        *,
        model: str | None = None,
    ) -> str:
        self.calls.append({"prompt": prompt, "reference": reference, "model": model})
        return self.b64


@pytest.fixture()
def text_adapter() -> RecordingTextAdapter:
    return RecordingTextAdapter()


@pytest.fixture()
def image_adapter() -> RecordingImageAdapter:
    return RecordingImageAdapter()


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def gateway(text_adapter, image_adapter, sleeps) -> GenerationGateway:
    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    return GenerationGateway(
        {Provider.OPENAI: text_adapter},
        {Provider.OPENAI: image_adapter},
        sleep=fake_sleep,
    )


@pytest.fixture()
def settings() -> Settings:
    return Settings(openai_api_key="test-key", rate_limit_max=0)


@pytest.fixture()
def client(settings, gateway) -> TestClient:
    return TestClient(create_app(settings=settings, gateway=gateway))
