"""Admin operations on creators: listing, edits, grants and reporting."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from creator_program.core.constants import (
    BASE_PLAN_MONTHLY_PRICE,
    BASE_PLAN_YEARLY_PRICE,
    PROGRAM_PLAN,
)
from creator_program.core.exceptions import Conflict, NotFound, ValidationError
from creator_program.core.structured_logging import build_log_context
from creator_program.db.enums import (
    LIVE_CREATOR_STATUSES,
    PENDING_APPLICATION_STATUSES,
    ApplicationStatus,
    CreatorStatus,
    EntitlementTargetType,
    SnapshotSource,
)
from creator_program.db.models import Creator, CreatorApplication, CreatorEntitlement
from creator_program.schemas.auth import Caller
from creator_program.schemas.creator import AdminCreatorUpdate
from creator_program.services import (
    creator_service,
    creator_status_service,
    entitlement_service,
    follower_service,
    subscription_projector,
)
from creator_program.utils.datetime_utils import utcnow
from creator_program.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)

_LIVE_STATUS_VALUES = [s.value for s in LIVE_CREATOR_STATUSES]


@dataclass
class GrantResult:
    entitlement: CreatorEntitlement
    subscription_applied: bool


@dataclass
class GracePeriodEntry:
    creator: Creator
    days_remaining: int
    max_followers: int


def list_creators(
    db: Session,
    pagination: PaginationParams,
    status: CreatorStatus | None = None,
) -> tuple[list[Creator], int]:
    query = db.query(Creator)
    if status:
        query = query.filter(Creator.status == status.value)
    query = query.order_by(Creator.created_at.desc())
    return paginate_query(query, pagination)


def admin_update_creator(
    db: Session, creator_id: UUID, data: AdminCreatorUpdate, caller: Caller
) -> Creator:
    creator = creator_service.get_creator(db, creator_id)
    platforms_changed = creator_service.apply_profile_changes(creator, data)
    if data.featured is not None:
        creator.featured = data.featured
    if platforms_changed:
        creator_status_service.record_snapshot(
            db,
            creator,
            follower_service.aggregate(creator.platforms),
            SnapshotSource.ADMIN,
            caller.id,
            utcnow(),
        )
    db.commit()
    db.refresh(creator)
    logger.info(
        "Creator updated by admin",
        extra=build_log_context(admin_id=caller.id, creator_id=creator.id),
    )
    return creator


def grant_entitlement(
    db: Session,
    creator_id: UUID,
    caller: Caller,
    target_type: EntitlementTargetType,
    target_id: UUID,
    plan: str = PROGRAM_PLAN,
) -> GrantResult:
    """Manually record a grant and project it onto the target's subscription."""
    if plan != PROGRAM_PLAN:
        raise ValidationError(
            f"only the {PROGRAM_PLAN} plan can be granted", code="invalid_plan"
        )

    creator = creator_service.get_creator(db, creator_id)
    if not creator.is_live:
        raise Conflict(
            "cannot grant entitlements to a removed creator", code="creator_removed"
        )

    target = subscription_projector.load_target(db, target_type, target_id)
    if target is None:
        raise NotFound(f"{target_type.value} not found", code="target_not_found")

    if entitlement_service.find_active_for_target(db, creator.id, target_type, target_id):
        raise Conflict(
            "this creator already holds an active entitlement for that target",
            code="entitlement_exists",
        )
    if (
        target_type == EntitlementTargetType.COMMUNITY
        and subscription_projector.has_paid_subscription(target)
    ):
        raise Conflict(
            "community already has a paid subscription", code="community_has_paid_plan"
        )

    entitlement = entitlement_service.grant(
        db,
        creator_id=creator.id,
        target_type=target_type,
        target_id=target_id,
        granted_by=caller.id,
        plan=plan,
    )
    if target_type == EntitlementTargetType.USER:
        applied = subscription_projector.apply_personal(target, creator.id)
    else:
        subscription_projector.apply(target, creator.id)
        applied = True
    db.commit()
    db.refresh(entitlement)

    logger.info(
        "Entitlement granted to %s %s",
        target_type.value,
        target_id,
        extra=build_log_context(admin_id=caller.id, creator_id=creator.id),
    )
    return GrantResult(entitlement=entitlement, subscription_applied=applied)


def get_analytics_summary(db: Session) -> dict:
    creator_counts = dict(
        db.query(Creator.status, func.count(Creator.id)).group_by(Creator.status).all()
    )
    application_counts = dict(
        db.query(CreatorApplication.status, func.count(CreatorApplication.id))
        .group_by(CreatorApplication.status)
        .all()
    )
    in_grace_period = (
        db.query(func.count(Creator.id))
        .filter(
            Creator.status.in_(_LIVE_STATUS_VALUES),
            Creator.grace_period_started_at.isnot(None),
        )
        .scalar()
    ) or 0
    active_entitlements = (
        db.query(func.count(CreatorEntitlement.id))
        .filter(CreatorEntitlement.active.is_(True))
        .scalar()
    ) or 0

    return {
        "total_creators": sum(creator_counts.values()),
        "active_creators": creator_counts.get(CreatorStatus.ACTIVE.value, 0),
        "warned_creators": creator_counts.get(CreatorStatus.WARNED.value, 0),
        "removed_creators": creator_counts.get(CreatorStatus.REMOVED.value, 0),
        "in_grace_period": in_grace_period,
        "total_applications": sum(application_counts.values()),
        "pending_applications": sum(
            application_counts.get(s.value, 0) for s in PENDING_APPLICATION_STATUSES
        ),
        "approved_applications": application_counts.get(ApplicationStatus.APPROVED.value, 0),
        "rejected_applications": application_counts.get(ApplicationStatus.REJECTED.value, 0),
        "active_entitlements": active_entitlements,
        "estimated_monthly_value": round(active_entitlements * BASE_PLAN_MONTHLY_PRICE, 2),
        "estimated_yearly_value": round(active_entitlements * BASE_PLAN_YEARLY_PRICE, 2),
    }


def list_grace_period_creators(
    db: Session, now: datetime | None = None
) -> list[GracePeriodEntry]:
    """Live creators with a running grace period, soonest deadline first."""
    now = now or utcnow()
    creators = (
        db.query(Creator)
        .filter(
            Creator.status.in_(_LIVE_STATUS_VALUES),
            Creator.grace_period_started_at.isnot(None),
        )
        .order_by(Creator.grace_period_ends_at.asc())
        .all()
    )
    entries = []
    for creator in creators:
        grace = creator.grace_period
        if grace is None:
            continue
        entries.append(
            GracePeriodEntry(
                creator=creator,
                days_remaining=grace.days_remaining(now),
                max_followers=follower_service.aggregate(creator.platforms or []).max_followers,
            )
        )
    return entries
