"""Outbound HTTP with bounded retries, used for email provider calls."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential backoff with up to 50% jitter, capped at ``max_delay``."""
    delay = min(max_delay, base_delay * (2**attempt))
    if delay:
        delay += random.uniform(0, delay / 2)
    return min(delay, max_delay)


def retry_after_seconds(response: httpx.Response) -> float | None:
    """Numeric Retry-After header, if the provider sent one."""
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


async def request_with_retries(
    request_fn: Callable[[], Awaitable[httpx.Response]],
    *,
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 4.0,
    retry_statuses: frozenset[int] | set[int] | None = None,
) -> httpx.Response:
    """
    Call ``request_fn`` until it returns a non-retryable response.

    Transport errors on the final attempt propagate; a retryable status on
    the final attempt is returned to the caller as-is.
    """
    statuses = retry_statuses or DEFAULT_RETRY_STATUSES

    for attempt in range(max_attempts):
        final = attempt == max_attempts - 1
        try:
            response = await request_fn()
        except httpx.RequestError as exc:
            if final:
                raise
            logger.warning("HTTP request failed (attempt %s), retrying", attempt + 1, exc_info=exc)
            await asyncio.sleep(backoff_delay(attempt, base_delay, max_delay))
            continue

        if final or response.status_code not in statuses:
            return response

        hinted = retry_after_seconds(response)
        delay = min(hinted, max_delay) if hinted is not None else backoff_delay(
            attempt, base_delay, max_delay
        )
        logger.warning(
            "HTTP request returned %s (attempt %s), retrying in %.1fs",
            response.status_code,
            attempt + 1,
            delay,
        )
        await asyncio.sleep(delay)

    raise RuntimeError("max_attempts must be at least 1")
