from __future__ import annotations

import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from genrelay.config import Settings
from genrelay.core.gateway import GenerationGateway
from genrelay.core.rate_limit import RollingWindowLimiter
from genrelay.dependencies import register_exception_handlers
from genrelay.internal import admin
from genrelay.routers import generate


def create_app(
    settings: Settings | None = None,
    gateway: GenerationGateway | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="genrelay",
        version="0.1.0",
        docs_url="/docs",
        redoc_url=None,
    )

    app.state.settings = settings
    app.state.gateway = gateway or GenerationGateway.from_settings(settings)
    app.state.rate_limiter = RollingWindowLimiter(
        max_hits=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        max_age=86400,
    )

    register_exception_handlers(app)

    app.include_router(generate.router)
    app.include_router(admin.router)

    return app


app = create_app()
