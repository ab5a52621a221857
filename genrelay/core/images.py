from __future__ import annotations

import base64
import binascii
import re
from typing import Any

from .errors import ClientInputError
from .types import ImageRef

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<data>.*)$", re.DOTALL)


def encode_b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def to_inline(image: ImageRef) -> dict[str, str]:
    return {"mimeType": image.mime_type, "data": encode_b64(image.data)}


def to_data_url(image: ImageRef) -> str:
    return f"data:{image.mime_type};base64,{encode_b64(image.data)}"


def to_multipart_part(image: ImageRef) -> tuple[str, bytes, str]:
    """Return an httpx-style ``(filename, content, content_type)`` file tuple."""
    return (image.original_name or "image.png", image.data, image.mime_type)


def upload_too_large(field_name: str, max_bytes: int) -> ClientInputError:
    return ClientInputError(
        message=f"{field_name} is larger than the {max_bytes} byte upload limit",
        code="file_too_large",
        param=field_name,
    )


def require_image(image: ImageRef | None, field_name: str = "img1") -> ImageRef:
    if image is None or not image.data:
        raise ClientInputError(
            message=f"Missing {field_name} (product reference image)",
            code="missing_image",
            param=field_name,
        )
    return image


def decode_image_payload(
    data: str,
    *,
    mime_type: str | None = None,
    name: str = "image",
    max_bytes: int | None = None,
) -> ImageRef:
    """Build an ImageRef from a base64 string or a ``data:`` URL."""
    payload = data.strip()
    match = _DATA_URL_RE.match(payload)
    if match:
        mime_type = mime_type or match.group("mime")
        payload = match.group("data")

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ClientInputError(
            message=f"Image '{name}' is not valid base64 data",
            code="invalid_image",
            param="images",
        ) from exc

    if max_bytes is not None and len(raw) > max_bytes:
        raise upload_too_large(name, max_bytes)

    return ImageRef(
        mime_type=mime_type or "application/octet-stream",
        data=raw,
        original_name=name,
    )


def summarize_image(image: ImageRef | None) -> dict[str, Any] | None:
    if image is None:
        return None
    return {
        "fieldname": image.field_name,
        "originalname": image.original_name,
        "mimetype": image.mime_type,
        "size": image.size,
    }
