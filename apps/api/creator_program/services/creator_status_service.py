"""
Creator standing: follower threshold, grace period and removal.

active <-> warned (low followers, grace period running) -> removed. The same
threshold evaluation backs the manual sync and the scheduled sweep; the
removal cascade is shared by voluntary, admin and grace-expiry removals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from creator_program.core.constants import (
    FOLLOWER_THRESHOLD,
    GRACE_EXPIRED_REMOVAL_REASON,
    GRACE_PERIOD_DAYS,
    GRACE_PERIOD_LENGTH,
    LOW_FOLLOWER_WARNING_MESSAGE,
    MANUAL_SYNC_INTERVAL,
    REMOVAL_REVOKE_REASON_PREFIX,
    VOLUNTARY_REMOVAL_REASON,
    VOLUNTARY_REVOKE_REASON,
)
from creator_program.core.exceptions import Conflict, RateLimited, ValidationError
from creator_program.core.structured_logging import build_log_context
from creator_program.db.enums import (
    CreatorStatus,
    EntitlementTargetType,
    SnapshotSource,
    WarningReason,
)
from creator_program.db.models import Creator, CreatorEntitlement, FollowerSnapshot
from creator_program.schemas.auth import Caller
from creator_program.services import (
    creator_service,
    entitlement_service,
    follower_service,
    notification_service,
    subscription_projector,
)
from creator_program.services.follower_service import FollowerTotals
from creator_program.utils.datetime_utils import ensure_aware, utcnow

logger = logging.getLogger(__name__)


class ThresholdOutcome(str, Enum):
    GRACE_STARTED = "grace_started"
    STILL_BELOW = "still_below"
    RECOVERED = "recovered"
    IN_GOOD_STANDING = "in_good_standing"


# =============================================================================
# Threshold evaluation
# =============================================================================


def start_low_follower_warning(creator: Creator, now: datetime) -> None:
    creator.start_grace_period(now, GRACE_PERIOD_LENGTH)
    creator.status = CreatorStatus.WARNED.value
    creator.warning_reason = WarningReason.LOW_FOLLOWERS.value
    creator.warning_message = LOW_FOLLOWER_WARNING_MESSAGE
    creator.warned_at = now


def clear_low_follower_warning(creator: Creator) -> None:
    """End the grace period; admin-issued warnings stay in place."""
    creator.clear_grace_period()
    if (
        creator.status == CreatorStatus.WARNED.value
        and creator.warning_reason == WarningReason.LOW_FOLLOWERS.value
    ):
        creator.status = CreatorStatus.ACTIVE.value
        creator.warning_reason = None
        creator.warning_message = None
        creator.warned_at = None


def evaluate_threshold(creator: Creator, totals: FollowerTotals, now: datetime) -> ThresholdOutcome:
    """Start or clear the grace period from fresh totals. Mutates, never commits."""
    grace = creator.grace_period
    if not totals.meets_threshold:
        if grace is None:
            start_low_follower_warning(creator, now)
            return ThresholdOutcome.GRACE_STARTED
        return ThresholdOutcome.STILL_BELOW
    if grace is not None:
        clear_low_follower_warning(creator)
        return ThresholdOutcome.RECOVERED
    return ThresholdOutcome.IN_GOOD_STANDING


def notify_threshold_outcome(
    db: Session, creator: Creator, outcome: ThresholdOutcome, totals: FollowerTotals
) -> None:
    if outcome == ThresholdOutcome.GRACE_STARTED:
        notification_service.notify_low_followers(db, creator, totals.max_followers)
    elif outcome == ThresholdOutcome.RECOVERED:
        notification_service.notify_grace_period_recovered(db, creator, totals.max_followers)


# =============================================================================
# Manual follower sync
# =============================================================================


@dataclass
class SyncResult:
    creator: Creator
    totals: FollowerTotals
    outcome: ThresholdOutcome
    message: str


def _sync_message(outcome: ThresholdOutcome, creator: Creator) -> str:
    deadline = creator.grace_period_ends_at.strftime("%B %d, %Y") if creator.grace_period_ends_at else ""
    if outcome == ThresholdOutcome.GRACE_STARTED:
        return (
            f"Your follower count is below {FOLLOWER_THRESHOLD}. A {GRACE_PERIOD_DAYS}-day grace "
            f"period has started; your creator account will be removed on {deadline} "
            "unless you recover."
        )
    if outcome == ThresholdOutcome.STILL_BELOW:
        return (
            f"Your follower count is still below {FOLLOWER_THRESHOLD}. "
            f"Your grace period ends on {deadline}."
        )
    if outcome == ThresholdOutcome.RECOVERED:
        return "Your follower count is back above the minimum and your grace period has been cleared."
    return "Followers synced successfully"


def _check_sync_cooldown(creator: Creator, now: datetime) -> None:
    if creator.last_synced_at is None:
        return
    next_allowed = ensure_aware(creator.last_synced_at) + MANUAL_SYNC_INTERVAL
    if now < next_allowed:
        retry_after = int((next_allowed - now).total_seconds()) + 1
        raise RateLimited(
            "followers can only be synced once every 24 hours; try again after "
            f"{next_allowed.isoformat()}",
            retry_after_seconds=retry_after,
            code="sync_cooldown",
        )


def record_snapshot(
    db: Session,
    creator: Creator,
    totals: FollowerTotals,
    source: SnapshotSource,
    recorded_by: UUID | None,
    now: datetime,
) -> FollowerSnapshot:
    snapshot = FollowerSnapshot(
        content_creator_id=creator.id,
        platforms=[dict(p) for p in creator.platforms or []],
        total_followers=totals.total_followers,
        max_followers=totals.max_followers,
        source=source.value,
        recorded_at=now,
        recorded_by=recorded_by,
    )
    db.add(snapshot)
    return snapshot


def sync_my_followers(
    db: Session,
    user_id: UUID,
    updates: Iterable,
    now: datetime | None = None,
) -> SyncResult:
    """Self-reported follower counts, at most once per 24 hours."""
    now = now or utcnow()
    creator = creator_service.require_live_creator(db, user_id)
    _check_sync_cooldown(creator, now)

    creator.platforms = follower_service.merge_platform_counts(
        creator.platforms or [],
        [{"type": u.type, "follower_count": u.follower_count} for u in updates],
    )
    creator.last_synced_at = now
    totals = follower_service.aggregate(creator.platforms)
    record_snapshot(db, creator, totals, SnapshotSource.MANUAL, user_id, now)
    outcome = evaluate_threshold(creator, totals, now)
    db.commit()
    db.refresh(creator)

    logger.info(
        "Followers synced: max=%s outcome=%s",
        totals.max_followers,
        outcome.value,
        extra=build_log_context(user_id=user_id, creator_id=creator.id),
    )
    notify_threshold_outcome(db, creator, outcome, totals)
    return SyncResult(
        creator=creator,
        totals=totals,
        outcome=outcome,
        message=_sync_message(outcome, creator),
    )


# =============================================================================
# Admin warning
# =============================================================================


def warn_creator(
    db: Session, creator_id: UUID, caller: Caller, reason: str, message: str
) -> Creator:
    if not reason or not reason.strip():
        raise ValidationError("warning reason is required", code="warning_reason_required")
    if not message or not message.strip():
        raise ValidationError("warning message is required", code="warning_message_required")

    creator = creator_service.get_creator(db, creator_id)
    if not creator.is_live:
        raise Conflict("cannot warn a removed creator", code="creator_removed")

    creator.status = CreatorStatus.WARNED.value
    creator.warning_reason = reason.strip()
    creator.warning_message = message.strip()
    creator.warned_at = utcnow()
    db.commit()
    db.refresh(creator)
    logger.info(
        "Creator warned",
        extra=build_log_context(admin_id=caller.id, creator_id=creator.id),
    )
    return creator


# =============================================================================
# Removal cascade
# =============================================================================


@dataclass(frozen=True)
class RemovalEffect:
    """A subscription to revert because its entitlement was revoked."""

    entitlement_id: UUID
    target_type: EntitlementTargetType
    target_id: UUID


@dataclass
class RemovalPlan:
    effects: list[RemovalEffect] = field(default_factory=list)

    @classmethod
    def from_entitlements(cls, entitlements: list[CreatorEntitlement]) -> "RemovalPlan":
        return cls(
            effects=[
                RemovalEffect(
                    entitlement_id=e.id,
                    target_type=EntitlementTargetType(e.target_type),
                    target_id=e.target_id,
                )
                for e in entitlements
            ]
        )


@dataclass
class RemovalResult:
    creator: Creator
    revoked: int = 0
    reverted: int = 0
    skipped: int = 0
    failed: list[UUID] = field(default_factory=list)


def revert_effect(db: Session, effect: RemovalEffect, reason: str) -> bool:
    """Disable the subscription behind a revoked entitlement. Does not commit."""
    if entitlement_service.has_active_for_target(db, effect.target_type, effect.target_id):
        logger.info(
            "Target %s %s still holds an active entitlement, not reverting",
            effect.target_type.value,
            effect.target_id,
        )
        return False
    target = subscription_projector.load_target(db, effect.target_type, effect.target_id)
    if target is None:
        logger.warning(
            "Entitlement %s target %s %s no longer exists",
            effect.entitlement_id,
            effect.target_type.value,
            effect.target_id,
        )
        return False
    return subscription_projector.revert(target, reason)


def remove_creator(
    db: Session,
    creator: Creator,
    *,
    reason: str,
    revoke_reason: str,
    removed_by: UUID | None,
    notify: bool,
) -> RemovalResult:
    """
    Remove a creator and unwind their plan grants.

    Steps run as separate commits: revoke entitlements, revert each
    subscription, persist the removed status. A failed revert is logged and
    skipped; the sweep's reconciliation repairs it later.
    """
    if creator.status == CreatorStatus.REMOVED.value:
        raise Conflict("creator already removed", code="creator_already_removed")

    creator_id = creator.id
    log_context = build_log_context(creator_id=creator_id, admin_id=removed_by)

    revoked = entitlement_service.revoke_all(
        db, creator_id, reason=revoke_reason, revoked_by=removed_by
    )
    plan = RemovalPlan.from_entitlements(revoked)
    db.commit()
    result = RemovalResult(creator=creator, revoked=len(revoked))

    for effect in plan.effects:
        try:
            if revert_effect(db, effect, revoke_reason):
                result.reverted += 1
            else:
                result.skipped += 1
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "Failed to revert subscription for entitlement=%s",
                effect.entitlement_id,
                extra=log_context,
            )
            result.failed.append(effect.entitlement_id)

    creator = db.get(Creator, creator_id)
    now = utcnow()
    creator.status = CreatorStatus.REMOVED.value
    creator.removal_reason = reason
    creator.removed_at = now
    creator.removed_by = removed_by
    creator.clear_grace_period()
    db.commit()
    db.refresh(creator)
    result.creator = creator

    logger.info(
        "Creator removed: revoked=%s reverted=%s skipped=%s failed=%s",
        result.revoked,
        result.reverted,
        result.skipped,
        len(result.failed),
        extra=log_context,
    )
    if notify:
        notification_service.notify_creator_removed(db, creator, reason)
    return result


def request_my_removal(db: Session, user_id: UUID) -> RemovalResult:
    creator = creator_service.require_live_creator(db, user_id)
    return remove_creator(
        db,
        creator,
        reason=VOLUNTARY_REMOVAL_REASON,
        revoke_reason=VOLUNTARY_REVOKE_REASON,
        removed_by=user_id,
        notify=False,
    )


def admin_remove_creator(
    db: Session, creator_id: UUID, caller: Caller, reason: str
) -> RemovalResult:
    if not reason or not reason.strip():
        raise ValidationError("removal reason is required", code="removal_reason_required")
    creator = creator_service.get_creator(db, creator_id)
    return remove_creator(
        db,
        creator,
        reason=reason.strip(),
        revoke_reason=REMOVAL_REVOKE_REASON_PREFIX + reason.strip(),
        removed_by=caller.id,
        notify=True,
    )


def expire_grace_period(db: Session, creator: Creator) -> RemovalResult:
    return remove_creator(
        db,
        creator,
        reason=GRACE_EXPIRED_REMOVAL_REASON,
        revoke_reason=REMOVAL_REVOKE_REASON_PREFIX + GRACE_EXPIRED_REMOVAL_REASON,
        removed_by=None,
        notify=True,
    )
