from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")

LOGGER = logging.getLogger("genrelay.retry")

RETRYABLE_STATUS = 429
BASE_DELAY_SECONDS = 1.0


def status_of(exc: BaseException) -> int | None:
    """Return the HTTP-like status carried by ``exc``, if any."""
    status = getattr(exc, "status_code", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 2,
    *,
    base_delay: float = BASE_DELAY_SECONDS,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Run ``operation``, backing off 1s, 2s, 4s... while it is rate limited.

    Only a 429 status is retried. Anything else, including failures with no
    status at all, propagates on the spot. Once ``max_retries`` is spent the
    last error propagates unchanged.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:
            if status_of(exc) != RETRYABLE_STATUS or attempt >= max_retries:
                raise

            delay = base_delay * (2**attempt)
            LOGGER.warning(
                "Rate limited (attempt %s/%s); retrying in %.1fs",
                attempt + 1,
                max_retries + 1,
                delay,
            )
            await sleep(delay)
            attempt += 1
