from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from genrelay.config import Settings
from genrelay.core.errors import GatewayError
from genrelay.core.gateway import GenerationGateway

LOGGER = logging.getLogger("genrelay.http")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GatewayError)
    async def handle_gateway_error(
        request: Request,
        exc: GatewayError,
    ) -> JSONResponse:
        LOGGER.warning(
            "Request to %s rejected: status=%s message=%s",
            request.url.path,
            exc.status_code,
            exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_envelope(),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        first_error = exc.errors()[0]["msg"] if exc.errors() else "Invalid request"
        error = GatewayError(
            status_code=400,
            message=first_error,
            code="invalid_request",
        )
        return JSONResponse(
            status_code=error.status_code,
            content=error.to_envelope(),
        )


def get_gateway(request: Request) -> GenerationGateway:
    return request.app.state.gateway


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def client_identity(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


async def enforce_rate_limit(request: Request) -> None:
    limiter = request.app.state.rate_limiter
    if not limiter.hit(client_identity(request)):
        raise GatewayError(
            status_code=429,
            message="Rate limit exceeded",
            code="rate_limited",
        )
