"""Tests for the outbound HTTP retry helper."""

import httpx
import pytest

from creator_program.services.http_service import (
    backoff_delay,
    request_with_retries,
    retry_after_seconds,
)


@pytest.mark.asyncio
async def test_request_with_retries_retries_on_status():
    req = httpx.Request("POST", "https://example.com")
    responses = [
        httpx.Response(503, request=req),
        httpx.Response(200, json={"ok": True}, request=req),
    ]
    calls = {"count": 0}

    async def request_fn():
        calls["count"] += 1
        return responses.pop(0)

    response = await request_with_retries(request_fn, max_attempts=2, base_delay=0, max_delay=0)

    assert calls["count"] == 2
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_request_with_retries_returns_last_retryable_response():
    req = httpx.Request("POST", "https://example.com")
    calls = {"count": 0}

    async def request_fn():
        calls["count"] += 1
        return httpx.Response(429, headers={"Retry-After": "0"}, request=req)

    response = await request_with_retries(request_fn, max_attempts=3, base_delay=0, max_delay=0)

    assert calls["count"] == 3
    assert response.status_code == 429


@pytest.mark.asyncio
async def test_request_with_retries_does_not_retry_client_errors():
    req = httpx.Request("POST", "https://example.com")
    calls = {"count": 0}

    async def request_fn():
        calls["count"] += 1
        return httpx.Response(422, request=req)

    response = await request_with_retries(request_fn, max_attempts=3, base_delay=0, max_delay=0)

    assert calls["count"] == 1
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_request_with_retries_raises_after_max_attempts():
    req = httpx.Request("POST", "https://example.com")
    calls = {"count": 0}

    async def request_fn():
        calls["count"] += 1
        raise httpx.ConnectError("boom", request=req)

    with pytest.raises(httpx.RequestError):
        await request_with_retries(request_fn, max_attempts=2, base_delay=0, max_delay=0)

    assert calls["count"] == 2


def test_backoff_delay_is_capped():
    for attempt in range(6):
        assert 0 <= backoff_delay(attempt, base_delay=0.5, max_delay=4.0) <= 4.0


def test_retry_after_seconds():
    req = httpx.Request("POST", "https://example.com")

    assert retry_after_seconds(httpx.Response(429, headers={"Retry-After": "2"}, request=req)) == 2.0
    assert retry_after_seconds(httpx.Response(429, headers={"Retry-After": "soon"}, request=req)) is None
    assert retry_after_seconds(httpx.Response(429, request=req)) is None
