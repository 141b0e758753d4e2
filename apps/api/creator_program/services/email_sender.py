"""Outbound email delivery via the Resend API.

``send`` is the dispatcher contract used by the worker: it never raises for
provider errors and reports the outcome as an ``EmailSendResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from creator_program.core.config import settings
from creator_program.jobs.utils import mask_email
from creator_program.services.http_service import DEFAULT_RETRY_STATUSES, request_with_retries

logger = logging.getLogger(__name__)

RESEND_SEND_URL = "https://api.resend.com/emails"
RESEND_MAX_ATTEMPTS = 3
RESEND_RETRY_BASE_DELAY = 0.5
RESEND_RETRY_MAX_DELAY = 4.0
RESEND_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True)
class EmailSendResult:
    success: bool
    message_id: str | None = None
    error: str | None = None
    dry_run: bool = False


def _format_address(email: str, name: str | None) -> str:
    if name:
        safe_name = name.replace('"', "").replace("<", "").replace(">", "")
        return f'"{safe_name}" <{email}>'
    return email


async def send(
    to_email: str,
    to_name: str | None,
    subject: str,
    html_body: str,
    text_body: str,
    *,
    idempotency_key: str | None = None,
) -> EmailSendResult:
    """Send one transactional email. Without RESEND_API_KEY this is a dry run."""
    if not settings.RESEND_API_KEY:
        logger.info(
            "[DRY RUN] Email send skipped recipient=%s subject=%s",
            mask_email(to_email),
            subject,
        )
        return EmailSendResult(success=True, dry_run=True)

    payload: dict[str, object] = {
        "from": _format_address(settings.EMAIL_FROM, settings.EMAIL_FROM_NAME),
        "to": [_format_address(to_email, to_name)],
        "subject": subject,
        "html": html_body,
    }
    if text_body:
        payload["text"] = text_body

    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }
    if idempotency_key:
        headers["Idempotency-Key"] = idempotency_key

    try:
        async with httpx.AsyncClient(timeout=RESEND_TIMEOUT_SECONDS) as client:

            async def request_fn() -> httpx.Response:
                return await client.post(RESEND_SEND_URL, headers=headers, json=payload)

            response = await request_with_retries(
                request_fn,
                max_attempts=RESEND_MAX_ATTEMPTS,
                base_delay=RESEND_RETRY_BASE_DELAY,
                max_delay=RESEND_RETRY_MAX_DELAY,
                retry_statuses=DEFAULT_RETRY_STATUSES,
            )
    except httpx.TimeoutException:
        logger.warning("Resend timeout for recipient=%s", mask_email(to_email))
        return EmailSendResult(success=False, error="Connection timeout")
    except httpx.RequestError as exc:
        logger.warning("Resend request error for recipient=%s: %s", mask_email(to_email), exc)
        return EmailSendResult(success=False, error=f"Request error: {type(exc).__name__}")

    if response.status_code in (200, 201):
        message_id = response.json().get("id")
        logger.info(
            "Email sent recipient=%s message_id=%s", mask_email(to_email), message_id
        )
        return EmailSendResult(success=True, message_id=message_id)

    error = f"Resend API error {response.status_code}: {response.text[:200]}"
    logger.warning("Email send failed recipient=%s: %s", mask_email(to_email), error)
    return EmailSendResult(success=False, error=error)
