"""
Creator program notifications.

Emails are queued (EmailLog + SEND_EMAIL job) only after the triggering
state change has been committed; the worker delivers them. Every notify_*
function is best-effort: failures are logged and never reach the caller.
"""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import Session

from creator_program.db.enums import EmailKind, EmailStatus, JobType
from creator_program.db.models import Creator, CreatorApplication, EmailLog, User
from creator_program.jobs.utils import mask_email
from creator_program.services import admin_directory_service, creator_email_templates, job_service
from creator_program.services.creator_email_templates import RenderedEmail
from creator_program.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)


def queue_email(
    db: Session,
    *,
    kind: EmailKind,
    to_email: str,
    to_name: str | None,
    rendered: RenderedEmail,
) -> EmailLog:
    """Persist an outbound email and schedule its delivery job."""
    email_log = EmailLog(
        kind=kind.value,
        recipient_email=to_email,
        recipient_name=to_name,
        subject=rendered.subject,
        body=rendered.html,
        text_body=rendered.text,
        status=EmailStatus.PENDING.value,
    )
    db.add(email_log)
    db.flush()

    job = job_service.schedule_job(
        db,
        JobType.SEND_EMAIL,
        {"email_log_id": str(email_log.id)},
    )
    email_log.job_id = job.id
    db.commit()
    logger.info(
        "Queued %s email for recipient=%s email_log=%s",
        kind.value,
        mask_email(to_email),
        email_log.id,
    )
    return email_log


def _best_effort(db: Session, kind: EmailKind, send: Callable[[], None]) -> None:
    try:
        send()
    except Exception:
        logger.exception("Failed to queue %s email", kind.value)
        db.rollback()


def _creator_recipient(db: Session, creator: Creator) -> User | None:
    if creator.user_id is None:
        logger.info("Creator %s has no linked user, skipping email", creator.id)
        return None
    user = db.get(User, creator.user_id)
    if user is None or not user.email:
        logger.info("Creator %s user has no email, skipping email", creator.id)
        return None
    return user


# =============================================================================
# Application review
# =============================================================================


def notify_application_submitted(
    db: Session, application: CreatorApplication, applicant: User
) -> None:
    """Confirm receipt to the applicant and alert every active admin."""

    def send_receipt() -> None:
        queue_email(
            db,
            kind=EmailKind.APPLICATION_RECEIVED,
            to_email=applicant.email,
            to_name=application.display_name,
            rendered=creator_email_templates.application_received(application.display_name),
        )

    _best_effort(db, EmailKind.APPLICATION_RECEIVED, send_receipt)

    for admin in admin_directory_service.list_active_admins(db):

        def send_admin_alert(admin=admin) -> None:
            queue_email(
                db,
                kind=EmailKind.ADMIN_NEW_APPLICATION,
                to_email=admin.email,
                to_name=admin.display_name,
                rendered=creator_email_templates.admin_new_application(
                    admin_name=admin.display_name or admin.email,
                    applicant_name=application.display_name,
                    applicant_username=applicant.username,
                    primary_platform=application.primary_platform,
                    platforms=application.platforms or [],
                    application_id=str(application.id),
                ),
            )

        _best_effort(db, EmailKind.ADMIN_NEW_APPLICATION, send_admin_alert)


def notify_application_approved(
    db: Session, creator: Creator, applicant: User, plan_applied: bool
) -> None:
    def send() -> None:
        queue_email(
            db,
            kind=EmailKind.APPLICATION_APPROVED,
            to_email=applicant.email,
            to_name=creator.display_name,
            rendered=creator_email_templates.application_approved(
                display_name=creator.display_name,
                slug=creator.slug,
                plan_applied=plan_applied,
            ),
        )

    _best_effort(db, EmailKind.APPLICATION_APPROVED, send)


def notify_application_rejected(
    db: Session, application: CreatorApplication, applicant: User
) -> None:
    def send() -> None:
        queue_email(
            db,
            kind=EmailKind.APPLICATION_REJECTED,
            to_email=applicant.email,
            to_name=application.display_name,
            rendered=creator_email_templates.application_rejected(
                display_name=application.display_name,
                reason=application.rejection_reason or "",
                feedback=application.feedback,
            ),
        )

    _best_effort(db, EmailKind.APPLICATION_REJECTED, send)


# =============================================================================
# Creator standing
# =============================================================================


def _notify_creator(
    db: Session,
    creator: Creator,
    kind: EmailKind,
    render: Callable[[], RenderedEmail],
) -> None:
    def send() -> None:
        user = _creator_recipient(db, creator)
        if user is None:
            return
        queue_email(
            db,
            kind=kind,
            to_email=user.email,
            to_name=creator.display_name,
            rendered=render(),
        )

    _best_effort(db, kind, send)


def notify_creator_removed(db: Session, creator: Creator, reason: str) -> None:
    _notify_creator(
        db,
        creator,
        EmailKind.CREATOR_REMOVED,
        lambda: creator_email_templates.creator_removed(
            display_name=creator.display_name, reason=reason
        ),
    )


def notify_low_followers(db: Session, creator: Creator, max_followers: int) -> None:
    _notify_creator(
        db,
        creator,
        EmailKind.LOW_FOLLOWER_WARNING,
        lambda: creator_email_templates.low_follower_warning(
            display_name=creator.display_name,
            max_followers=max_followers,
            ends_at=creator.grace_period_ends_at,
        ),
    )


def notify_grace_period_reminder(db: Session, creator: Creator, max_followers: int) -> None:
    _notify_creator(
        db,
        creator,
        EmailKind.GRACE_PERIOD_REMINDER,
        lambda: creator_email_templates.grace_period_reminder(
            display_name=creator.display_name,
            max_followers=max_followers,
            ends_at=creator.grace_period_ends_at,
        ),
    )


def notify_grace_period_recovered(db: Session, creator: Creator, max_followers: int) -> None:
    _notify_creator(
        db,
        creator,
        EmailKind.GRACE_PERIOD_RECOVERED,
        lambda: creator_email_templates.grace_period_recovered(
            display_name=creator.display_name, max_followers=max_followers
        ),
    )


# =============================================================================
# Delivery bookkeeping (worker)
# =============================================================================


def get_email_log(db: Session, email_log_id) -> EmailLog | None:
    return db.get(EmailLog, email_log_id)


def mark_email_sent(db: Session, email_log: EmailLog, external_id: str | None = None) -> EmailLog:
    email_log.status = EmailStatus.SENT.value
    email_log.sent_at = utcnow()
    email_log.external_id = external_id
    email_log.error = None
    db.commit()
    return email_log


def mark_email_failed(db: Session, email_log: EmailLog, error: str) -> EmailLog:
    email_log.status = EmailStatus.FAILED.value
    email_log.error = error[:1000]
    db.commit()
    return email_log
