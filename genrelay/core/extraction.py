from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

_FENCE_RE = re.compile(r"^```(?:json)?[ \t]*\r?\n?(?P<body>.*?)\r?\n?```$", re.DOTALL | re.IGNORECASE)


@dataclass(slots=True)
class ExtractedText:
    raw: str
    parsed: Any = None


def strip_code_fence(text: str) -> str:
    cleaned = (text or "").strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        return match.group("body").strip()
    return cleaned


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return None


def _embedded_object(text: str) -> Any:
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last <= first:
        return None
    return _loads(text[first : last + 1])


def extract_structured(text: str, *, lenient: bool = True) -> ExtractedText:
    """Pull a JSON value out of model output.

    Strict mode parses the fence-stripped text as a whole. When that fails
    and ``lenient`` is set, the slice between the first ``{`` and the last
    ``}`` is tried instead. Unparseable text is still a valid result: it
    comes back as ``raw`` with ``parsed`` left as ``None``.
    """
    cleaned = strip_code_fence(text)
    if not cleaned:
        return ExtractedText(raw="")

    parsed = _loads(cleaned)
    if parsed is None and lenient:
        parsed = _embedded_object(cleaned)

    return ExtractedText(raw=cleaned, parsed=parsed)
