from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from genrelay.api.adapter import (
    generation_request_from_body,
    image_payload,
    read_upload,
    sora_generation_request,
    sora_payload,
    storyboard_payload,
    structured_payload,
    to_response,
)
from genrelay.api.schemas import GenerateRequestBody
from genrelay.config import Settings
from genrelay.core.gateway import GenerationGateway
from genrelay.core.types import ImageGenerationRequest
from genrelay.dependencies import enforce_rate_limit, get_gateway, get_settings

router = APIRouter(
    prefix="/api",
    tags=["generate"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.post("/storyboard")
async def storyboard(
    payload: GenerateRequestBody,
    gateway: GenerationGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    request = generation_request_from_body(
        payload,
        max_bytes=settings.max_upload_bytes,
        allow_empty=True,
    )
    result = await gateway.generate(request)
    return to_response(result, storyboard_payload)


@router.post("/generate")
async def generate_structured(
    payload: GenerateRequestBody,
    gateway: GenerationGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    request = generation_request_from_body(payload, max_bytes=settings.max_upload_bytes)
    result = await gateway.generate(request)
    return to_response(result, structured_payload)


@router.post("/generate-gpt-prompt")
async def generate_gpt_prompt(
    sora_prompt: str = Form("", alias="soraPrompt"),
    provider: str = Form("openai"),
    model: str | None = Form(None),
    img1: UploadFile | None = File(None),
    img2: UploadFile | None = File(None),
    gateway: GenerationGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    ref1 = await read_upload(img1, "img1", settings.max_upload_bytes)
    ref2 = await read_upload(img2, "img2", settings.max_upload_bytes)

    request = sora_generation_request(
        sora_prompt,
        ref1,
        ref2,
        provider=provider,
        model=model,
    )
    result = await gateway.generate(request)
    return to_response(result, lambda text: sora_payload(text, ref1, ref2))


@router.post("/generate-image")
async def generate_image(
    sora_prompt: str = Form("", alias="soraPrompt"),
    provider: str = Form("openai"),
    model: str | None = Form(None),
    img1: UploadFile | None = File(None),
    gateway: GenerationGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    reference = await read_upload(img1, "img1", settings.max_upload_bytes)

    request = ImageGenerationRequest(
        prompt=sora_prompt,
        reference=reference,
        provider=provider,
        model=model or None,
    )
    result = await gateway.generate_image(request)
    return to_response(result, image_payload)
