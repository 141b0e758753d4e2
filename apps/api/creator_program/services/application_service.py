"""
Creator application review.

submitted -> under_review -> approved | rejected, plus applicant-initiated
withdrawal from submitted/under_review. Approval needs two distinct admins
unless a directory-verified owner uses the override flag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from creator_program.core.constants import (
    BIO_MAX_LENGTH,
    BIO_MIN_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    DISPLAY_NAME_MAX_LENGTH,
    DISPLAY_NAME_MIN_LENGTH,
    FOLLOWER_THRESHOLD,
    PRIMARY_PLATFORMS,
)
from creator_program.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from creator_program.core.structured_logging import build_log_context
from creator_program.db.enums import (
    PENDING_APPLICATION_STATUSES,
    ApplicationStatus,
    CreatorStatus,
    EntitlementTargetType,
)
from creator_program.db.models import Creator, CreatorApplication, User
from creator_program.schemas.auth import Caller
from creator_program.schemas.creator_application import ApplicationSubmit
from creator_program.services import (
    admin_directory_service,
    creator_service,
    entitlement_service,
    follower_service,
    notification_service,
    slug_service,
    subscription_projector,
    theme_service,
)
from creator_program.utils.datetime_utils import utcnow
from creator_program.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)

FIRST_APPROVAL_MESSAGE = "First approval recorded. Awaiting second approval from another admin."
APPROVED_MESSAGE = "Application approved"
OVERRIDE_APPROVED_MESSAGE = "Application approved via owner override"


@dataclass
class ApprovalResult:
    application: CreatorApplication
    needs_second_approval: bool
    message: str
    creator: Creator | None = None
    first_approver_name: str | None = None


# =============================================================================
# Validation
# =============================================================================


def _validate_length(value: str, field: str, minimum: int, maximum: int) -> None:
    length = len(value.strip())
    if length < minimum or length > maximum:
        raise ValidationError(
            f"{field} must be between {minimum} and {maximum} characters",
            code=f"invalid_{field.replace(' ', '_')}",
        )


def validate_submission(data: ApplicationSubmit) -> list[dict]:
    """Check content rules; returns the normalized platform list."""
    _validate_length(
        data.display_name, "display name", DISPLAY_NAME_MIN_LENGTH, DISPLAY_NAME_MAX_LENGTH
    )
    slug_service.ensure_sluggable(data.display_name)

    if data.primary_platform.strip().lower() not in PRIMARY_PLATFORMS:
        raise ValidationError(
            "primary platform must be one of: " + ", ".join(sorted(PRIMARY_PLATFORMS)),
            code="invalid_primary_platform",
        )

    platforms = follower_service.normalize_platforms(data.platforms)
    if not follower_service.aggregate(platforms).meets_threshold:
        raise ValidationError(
            f"minimum {FOLLOWER_THRESHOLD} followers required on at least one platform",
            code="insufficient_followers",
        )

    _validate_length(data.description, "description", DESCRIPTION_MIN_LENGTH, DESCRIPTION_MAX_LENGTH)
    _validate_length(data.bio, "bio", BIO_MIN_LENGTH, BIO_MAX_LENGTH)
    return platforms


# =============================================================================
# Queries
# =============================================================================


def get_pending_application(db: Session, user_id: UUID) -> CreatorApplication | None:
    return (
        db.query(CreatorApplication)
        .filter(
            CreatorApplication.user_id == user_id,
            CreatorApplication.status.in_([s.value for s in PENDING_APPLICATION_STATUSES]),
        )
        .first()
    )


def get_latest_application(db: Session, user_id: UUID) -> CreatorApplication | None:
    return (
        db.query(CreatorApplication)
        .filter(CreatorApplication.user_id == user_id)
        .order_by(CreatorApplication.created_at.desc())
        .first()
    )


def get_application(db: Session, application_id: UUID) -> CreatorApplication:
    application = db.get(CreatorApplication, application_id)
    if application is None:
        raise NotFound("application not found", code="application_not_found")
    return application


def list_applications(
    db: Session,
    pagination: PaginationParams,
    status: ApplicationStatus | None = None,
    exclude_status: ApplicationStatus | None = None,
) -> tuple[list[CreatorApplication], int]:
    query = db.query(CreatorApplication)
    if status:
        query = query.filter(CreatorApplication.status == status.value)
    elif exclude_status:
        query = query.filter(CreatorApplication.status != exclude_status.value)
    query = query.order_by(CreatorApplication.created_at.desc())
    return paginate_query(query, pagination)


def creator_statuses_for(
    db: Session, applications: list[CreatorApplication]
) -> dict[UUID, str]:
    """Map application id -> status of the creator it produced."""
    creator_ids = [a.creator_id for a in applications if a.creator_id]
    if not creator_ids:
        return {}
    rows = db.query(Creator.id, Creator.status).filter(Creator.id.in_(creator_ids)).all()
    by_creator = {row.id: row.status for row in rows}
    return {
        a.id: by_creator[a.creator_id]
        for a in applications
        if a.creator_id and a.creator_id in by_creator
    }


# =============================================================================
# Applicant transitions
# =============================================================================


def submit_application(db: Session, user: User, data: ApplicationSubmit) -> CreatorApplication:
    platforms = validate_submission(data)

    if get_pending_application(db, user.id):
        raise Conflict("you already have an active application", code="application_pending")
    if creator_service.get_live_creator_for_user(db, user.id):
        raise Conflict("you are already a content creator", code="already_creator")

    application = CreatorApplication(
        user_id=user.id,
        display_name=data.display_name.strip(),
        primary_platform=data.primary_platform.strip().lower(),
        platforms=platforms,
        description=data.description.strip(),
        bio=data.bio.strip(),
        status=ApplicationStatus.SUBMITTED.value,
    )
    db.add(application)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("you already have an active application", code="application_pending")
    db.refresh(application)

    logger.info(
        "Creator application submitted",
        extra=build_log_context(user_id=user.id, application_id=application.id),
    )
    notification_service.notify_application_submitted(db, application, user)
    return application


def withdraw_my_application(db: Session, user_id: UUID) -> CreatorApplication:
    application = get_pending_application(db, user_id)
    if application is None:
        raise Conflict("no pending application", code="no_pending_application")

    application.status = ApplicationStatus.WITHDRAWN.value
    application.withdrawn_at = utcnow()
    db.commit()
    db.refresh(application)
    return application


# =============================================================================
# Admin transitions
# =============================================================================


def _require_pending(application: CreatorApplication) -> None:
    if not application.is_pending:
        raise Conflict("application already processed", code="application_already_processed")


def approve_application(
    db: Session,
    application_id: UUID,
    caller: Caller,
    owner_override: bool = False,
) -> ApprovalResult:
    """
    Record an approval.

    The first distinct approval moves the application to under_review; the
    second, by a different admin, creates the creator. ``owner_override`` is
    honoured only if the admin directory currently lists the caller as owner.
    """
    application = get_application(db, application_id)
    _require_pending(application)

    if owner_override:
        if not admin_directory_service.is_owner(db, caller.id):
            raise Forbidden("only owners can use the override option", code="owner_override_forbidden")
        return _finalize_approval(db, application, caller, via_override=True)

    if application.first_approval_by is None:
        application.status = ApplicationStatus.UNDER_REVIEW.value
        application.first_approval_by = caller.id
        application.first_approval_at = utcnow()
        db.commit()
        db.refresh(application)
        logger.info(
            "First approval recorded",
            extra=build_log_context(admin_id=caller.id, application_id=application.id),
        )
        return ApprovalResult(
            application=application,
            needs_second_approval=True,
            message=FIRST_APPROVAL_MESSAGE,
            first_approver_name=caller.display_name or caller.email,
        )

    if application.first_approval_by == caller.id:
        raise Conflict(
            "you already approved this application - a different admin must provide "
            "the second approval",
            code="duplicate_approver",
        )

    return _finalize_approval(db, application, caller, via_override=False)


def _finalize_approval(
    db: Session,
    application: CreatorApplication,
    caller: Caller,
    *,
    via_override: bool,
) -> ApprovalResult:
    user = db.get(User, application.user_id)
    if user is None:
        raise NotFound("applicant account not found", code="user_not_found")
    if creator_service.get_live_creator_for_user(db, user.id):
        raise Conflict("applicant is already a content creator", code="already_creator")

    now = utcnow()
    creator = Creator(
        user_id=user.id,
        application_id=application.id,
        display_name=application.display_name,
        slug=slug_service.generate_unique_slug(db, application.display_name),
        bio=application.bio,
        theme_color=theme_service.pick_theme_color(),
        primary_platform=application.primary_platform,
        platforms=[dict(p) for p in application.platforms or []],
        status=CreatorStatus.ACTIVE.value,
        joined_at=now,
    )
    db.add(creator)
    db.flush()

    entitlement_service.grant(
        db,
        creator_id=creator.id,
        target_type=EntitlementTargetType.USER,
        target_id=user.id,
        granted_by=caller.id,
    )
    plan_applied = subscription_projector.apply_personal(user, creator.id, now=now)

    application.status = ApplicationStatus.APPROVED.value
    application.reviewed_by = caller.id
    application.reviewed_at = now
    application.creator_id = creator.id
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("application already processed", code="application_already_processed")
    db.refresh(application)
    db.refresh(creator)

    logger.info(
        "Creator application approved",
        extra=build_log_context(
            admin_id=caller.id, application_id=application.id, creator_id=creator.id
        ),
    )
    notification_service.notify_application_approved(db, creator, user, plan_applied)

    return ApprovalResult(
        application=application,
        needs_second_approval=False,
        message=OVERRIDE_APPROVED_MESSAGE if via_override else APPROVED_MESSAGE,
        creator=creator,
        first_approver_name=admin_directory_service.display_name_for(
            db, application.first_approval_by
        ),
    )


def reject_application(
    db: Session,
    application_id: UUID,
    caller: Caller,
    rejection_reason: str,
    feedback: str | None = None,
    admin_notes: str | None = None,
) -> CreatorApplication:
    if not rejection_reason or not rejection_reason.strip():
        raise ValidationError("rejection reason is required", code="rejection_reason_required")

    application = get_application(db, application_id)
    _require_pending(application)

    application.status = ApplicationStatus.REJECTED.value
    application.reviewed_by = caller.id
    application.reviewed_at = utcnow()
    application.rejection_reason = rejection_reason.strip()
    application.feedback = feedback
    application.admin_notes = admin_notes
    db.commit()
    db.refresh(application)

    logger.info(
        "Creator application rejected",
        extra=build_log_context(admin_id=caller.id, application_id=application.id),
    )
    user = db.get(User, application.user_id)
    if user is not None:
        notification_service.notify_application_rejected(db, application, user)
    return application
