from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(tags=["internal"])


@router.get("/")
@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    app = request.app
    return {
        "ok": True,
        "service": app.title,
        "version": app.version,
        "uptime_s": int(time.monotonic() - app.state.started_at),
    }
