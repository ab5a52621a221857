from __future__ import annotations

from typing import Any

from fastapi import UploadFile
from fastapi.responses import JSONResponse

from genrelay.core.images import decode_image_payload, summarize_image, upload_too_large
from genrelay.core.prompts import SORA_SYSTEM_PROMPT, sora_user_prompt
from genrelay.core.types import (
    ErrorResult,
    GenerationRequest,
    ImageRef,
    ImageResult,
    NormalizedResult,
    Provider,
    TextResult,
)

from .schemas import GenerateRequestBody

SORA_TEMPERATURE = 0.3
SORA_MAX_TOKENS = 1200


def generation_request_from_body(
    body: GenerateRequestBody,
    *,
    max_bytes: int,
    allow_empty: bool = False,
) -> GenerationRequest:
    images: list[ImageRef] = []
    # Unknown providers are left for the gateway to reject before any decoding.
    if Provider.parse(body.provider) is not None:
        images = [
            decode_image_payload(
                image.data,
                mime_type=image.mime,
                name=image.name,
                max_bytes=max_bytes,
            )
            for image in body.images
        ]
    return GenerationRequest(
        provider=body.provider,
        model=body.model or None,
        system_instruction=body.system,
        user_content=body.user,
        images=images,
        temperature=body.temperature,
        max_tokens=body.max_tokens,
        allow_empty=allow_empty,
    )


def sora_generation_request(
    sora_prompt: str,
    img1: ImageRef | None,
    img2: ImageRef | None,
    *,
    provider: str,
    model: str | None,
) -> GenerationRequest:
    sora_prompt = (sora_prompt or "").strip()
    return GenerationRequest(
        provider=provider,
        model=model or None,
        system_instruction=SORA_SYSTEM_PROMPT,
        # Left blank when the prompt is missing so the gateway rejects it.
        user_content=sora_user_prompt(sora_prompt, img1, img2) if sora_prompt else "",
        images=[image for image in (img1, img2) if image is not None],
        temperature=SORA_TEMPERATURE,
        max_tokens=SORA_MAX_TOKENS,
        prompt_field="soraPrompt",
    )


async def read_upload(
    upload: UploadFile | None,
    field_name: str,
    max_bytes: int,
) -> ImageRef | None:
    if upload is None:
        return None

    content = await upload.read(max_bytes + 1)
    if not content:
        return None
    if len(content) > max_bytes:
        raise upload_too_large(field_name, max_bytes)

    return ImageRef(
        mime_type=upload.content_type or "application/octet-stream",
        data=content,
        original_name=upload.filename or field_name,
        field_name=field_name,
    )


def error_response(result: ErrorResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.to_envelope())


def storyboard_payload(result: TextResult) -> dict[str, Any]:
    return {
        "success": True,
        "provider": result.provider,
        "model": result.model,
        "text": result.value,
        "parsed_json": result.parsed_json,
    }


def structured_payload(result: TextResult) -> Any:
    if result.parsed_json is not None:
        return result.parsed_json
    return {"raw": result.raw}


def sora_payload(
    result: TextResult,
    img1: ImageRef | None,
    img2: ImageRef | None,
) -> dict[str, Any]:
    return {
        "success": True,
        "prompt": result.value,
        "meta": {
            "provider": result.provider,
            "model": result.model,
            "receivedImages": {
                "img1": summarize_image(img1),
                "img2": summarize_image(img2),
            },
        },
    }


def image_payload(result: ImageResult) -> dict[str, Any]:
    return {
        "success": True,
        "mime": result.mime_type,
        "filename": "generated.png",
        "b64": result.b64,
    }


def to_response(result: NormalizedResult, render) -> Any:
    if isinstance(result, ErrorResult):
        return error_response(result)
    return JSONResponse(content=render(result))
