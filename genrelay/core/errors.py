from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class GatewayError(Exception):
    status_code: int
    message: str
    code: str | None = None
    param: str | None = None

    def __str__(self) -> str:
        return self.message

    def to_envelope(self) -> dict[str, Any]:
        return {"success": False, "error": self.message}


@dataclass
class ClientInputError(GatewayError):
    status_code: int = 400
    message: str = "Invalid request"
    code: str | None = "invalid_request"


@dataclass
class ServerConfigError(GatewayError):
    status_code: int = 500
    message: str = "Server is missing required configuration"
    code: str | None = "missing_credential"


@dataclass
class UpstreamError(GatewayError):
    """Non-2xx (or unusable) answer from a provider."""

    status_code: int = 500
    message: str = "Upstream error"
    code: str | None = "upstream_error"
    provider: str | None = None


@dataclass
class UpstreamRateLimited(UpstreamError):
    status_code: int = 429
    message: str = "Upstream rate limited"
    code: str | None = "rate_limited"


@dataclass
class UpstreamEmptyResult(UpstreamError):
    status_code: int = 502
    message: str = "Empty response from model"
    code: str | None = "empty_result"
