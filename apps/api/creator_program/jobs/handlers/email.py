"""Email job handlers."""

from __future__ import annotations

import logging
from uuid import UUID

from creator_program.db.enums import EmailStatus
from creator_program.jobs.utils import mask_email
from creator_program.services import email_sender, notification_service

logger = logging.getLogger(__name__)


async def process_send_email(db, job) -> None:
    """Process SEND_EMAIL job."""
    email_log_id = job.payload.get("email_log_id")
    if not email_log_id:
        raise Exception("Missing email_log_id in job payload")

    email_log = notification_service.get_email_log(db, UUID(email_log_id))
    if not email_log:
        raise Exception(f"EmailLog {email_log_id} not found")

    if email_log.status == EmailStatus.SENT.value:
        logger.info("EmailLog %s already sent, skipping", email_log.id)
        return

    result = await email_sender.send(
        email_log.recipient_email,
        email_log.recipient_name,
        email_log.subject,
        email_log.body,
        email_log.text_body or "",
        idempotency_key=f"email-log/{email_log.id}",
    )
    if not result.success:
        notification_service.mark_email_failed(db, email_log, result.error or "send failed")
        # Raise so the worker schedules a retry
        raise Exception(
            f"Email to {mask_email(email_log.recipient_email)} failed: {result.error}"
        )

    notification_service.mark_email_sent(db, email_log, result.message_id)
