from __future__ import annotations

import base64
import json

from fastapi.testclient import TestClient

from genrelay.config import Settings
from genrelay.core.errors import UpstreamRateLimited
from genrelay.main import create_app

PNG_BYTES = b"\x89PNG\r\n\x1a\nproduct"


def test_health_endpoint(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["service"] == "genrelay"
    assert isinstance(body["uptime_s"], int)
    assert client.get("/").json()["ok"] is True


def test_storyboard_success_includes_parsed_json(client: TestClient, text_adapter):
    text_adapter.reply = 'Here you go: {"scenes": 4} enjoy'

    response = client.post(
        "/api/storyboard",
        json={"provider": "openai", "system": "You plan videos.", "user": "Coffee ad"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["provider"] == "openai"
    assert body["model"] == "fake-model"
    assert body["text"] == 'Here you go: {"scenes": 4} enjoy'
    assert body["parsed_json"] == {"scenes": 4}
    assert text_adapter.calls[0]["system"] == "You plan videos."


def test_storyboard_missing_user_returns_400(client: TestClient, text_adapter):
    response = client.post("/api/storyboard", json={"provider": "openai"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Missing user"}
    assert text_adapter.calls == []


def test_storyboard_unknown_provider_returns_400(client: TestClient, text_adapter):
    response = client.post("/api/storyboard", json={"provider": "claude", "user": "hi"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "Unknown provider" in body["error"]
    assert text_adapter.calls == []


def test_unknown_provider_reported_before_image_decoding(client: TestClient, text_adapter):
    response = client.post(
        "/api/storyboard",
        json={"provider": "mystery", "user": "hi", "images": [{"data": "!!notb64"}]},
    )

    assert response.status_code == 400
    assert "Unknown provider 'mystery'" in response.json()["error"]
    assert text_adapter.calls == []


def test_storyboard_allows_empty_model_text(client: TestClient, text_adapter):
    text_adapter.reply = ""

    response = client.post("/api/storyboard", json={"user": "hi"})

    assert response.status_code == 200
    assert response.json()["text"] == ""
    assert response.json()["parsed_json"] is None


def test_storyboard_decodes_json_images(client: TestClient, text_adapter):
    data_url = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")

    response = client.post(
        "/api/storyboard",
        json={"user": "describe", "images": [{"name": "a.png", "data": data_url}]},
    )

    assert response.status_code == 200
    image = text_adapter.calls[0]["images"][0]
    assert image.mime_type == "image/png"
    assert image.data == PNG_BYTES


def test_storyboard_rejects_bad_image_data(client: TestClient, text_adapter):
    response = client.post(
        "/api/storyboard",
        json={"user": "describe", "images": [{"name": "a.png", "data": "%%%"}]},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert text_adapter.calls == []


def test_generate_returns_parsed_object_directly(client: TestClient, text_adapter):
    original = {"title": "Launch", "scenes": ["intro", "demo"]}
    text_adapter.reply = "```json\n" + json.dumps(original) + "\n```"

    response = client.post("/api/generate", json={"user": "plan it"})

    assert response.status_code == 200
    assert response.json() == original


def test_generate_returns_raw_when_unparseable(client: TestClient, text_adapter):
    text_adapter.reply = "just words"

    response = client.post("/api/generate", json={"user": "plan it"})

    assert response.status_code == 200
    assert response.json() == {"raw": "just words"}


def test_generate_exhausted_rate_limit_passes_429_through(client: TestClient, text_adapter, sleeps):
    text_adapter.errors = [UpstreamRateLimited(message="slow", provider="OpenAI") for _ in range(3)]

    response = client.post("/api/generate", json={"user": "plan it"})

    assert response.status_code == 429
    assert "Check billing/limits" in response.json()["error"]
    assert sleeps == [1.0, 2.0]


def test_generate_body_validation_error_is_400(client: TestClient):
    response = client.post("/api/generate", json={"user": "x", "temperature": "hot"})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_sora_prompt_with_reference_images(client: TestClient, text_adapter):
    text_adapter.reply = "  Scene 1: sunrise over the product  "

    response = client.post(
        "/api/generate-gpt-prompt",
        data={"soraPrompt": "Make a sneaker teaser"},
        files={"img1": ("shoe.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["prompt"] == "Scene 1: sunrise over the product"
    assert body["meta"]["receivedImages"]["img1"] == {
        "fieldname": "img1",
        "originalname": "shoe.png",
        "mimetype": "image/png",
        "size": len(PNG_BYTES),
    }
    assert body["meta"]["receivedImages"]["img2"] is None

    call = text_adapter.calls[0]
    assert "Sora" in call["system"]
    assert "Make a sneaker teaser" in call["user"]
    assert "- img1: shoe.png" in call["user"]
    assert "- img2: none" in call["user"]
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 1200
    assert len(call["images"]) == 1


def test_sora_prompt_missing_prompt(client: TestClient, text_adapter):
    response = client.post("/api/generate-gpt-prompt", data={"soraPrompt": "  "})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Missing soraPrompt"}
    assert text_adapter.calls == []


def test_sora_prompt_empty_model_output_is_502(client: TestClient, text_adapter):
    text_adapter.reply = ""

    response = client.post("/api/generate-gpt-prompt", data={"soraPrompt": "teaser"})

    assert response.status_code == 502
    assert response.json() == {"success": False, "error": "Empty response from model"}


def test_upload_size_limit(gateway):
    settings = Settings(openai_api_key="k", rate_limit_max=0, max_upload_bytes=4)
    client = TestClient(create_app(settings=settings, gateway=gateway))

    response = client.post(
        "/api/generate-gpt-prompt",
        data={"soraPrompt": "teaser"},
        files={"img1": ("big.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_json_image_size_limit(gateway, text_adapter):
    settings = Settings(openai_api_key="k", rate_limit_max=0, max_upload_bytes=4)
    client = TestClient(create_app(settings=settings, gateway=gateway))
    big_image = base64.b64encode(b"x" * 1000).decode("ascii")

    for path in ("/api/storyboard", "/api/generate"):
        response = client.post(
            path,
            json={"user": "describe", "images": [{"name": "big.png", "data": big_image}]},
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "big.png is larger than the 4 byte upload limit",
        }
    assert text_adapter.calls == []


def test_generate_image_success(client: TestClient, image_adapter):
    response = client.post(
        "/api/generate-image",
        data={"soraPrompt": "Songkran sale"},
        files={"img1": ("mug.jpg", PNG_BYTES, "image/jpeg")},
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "mime": "image/png",
        "filename": "generated.png",
        "b64": image_adapter.b64,
    }


def test_generate_image_requires_img1(client: TestClient, image_adapter):
    response = client.post("/api/generate-image", data={"soraPrompt": "Songkran sale"})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Missing img1 (product reference image)",
    }
    assert image_adapter.calls == []


def test_rate_limit_per_caller(gateway):
    settings = Settings(openai_api_key="k", rate_limit_max=2, rate_limit_window_seconds=60)
    client = TestClient(create_app(settings=settings, gateway=gateway))

    statuses = [
        client.post(
            "/api/storyboard",
            json={"user": "hi"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        ).status_code
        for _ in range(3)
    ]
    other_caller = client.post(
        "/api/storyboard",
        json={"user": "hi"},
        headers={"X-Forwarded-For": "198.51.100.2"},
    )

    assert statuses == [200, 200, 429]
    assert other_caller.status_code == 200
    assert client.get("/health").status_code == 200
