"""
Scheduled follower sweep.

Walks every live creator, starts/clears grace periods from stored counts,
sends the final reminder, removes creators whose grace period has expired,
then repairs subscriptions orphaned by an interrupted removal. Single-flight
across replicas via the scheduler lock.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from creator_program.core.config import settings
from creator_program.core.constants import GRACE_REMINDER_WINDOW, SYNC_ALL_LOCK_NAME
from creator_program.core.structured_logging import build_log_context
from creator_program.db.enums import LIVE_CREATOR_STATUSES, EntitlementTargetType
from creator_program.db.models import Creator
from creator_program.services import (
    creator_status_service,
    entitlement_service,
    follower_service,
    notification_service,
    scheduler_lock_service,
    subscription_projector,
)
from creator_program.services.creator_status_service import ThresholdOutcome
from creator_program.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

RECONCILIATION_REASON = "reconciliation: entitlement revoked"


@dataclass
class SweepResult:
    processed: int = 0
    low_followers: int = 0
    recovered: int = 0
    removed: int = 0
    reminded: int = 0
    repaired: int = 0
    failed: int = 0
    timed_out: bool = False


def run_sync_all(
    db: Session,
    *,
    holder: str,
    now: datetime | None = None,
    deadline_seconds: float | None = None,
) -> SweepResult:
    """Run the full sweep under the named scheduler lock. Conflict if held."""
    ttl = timedelta(seconds=settings.SYNC_SWEEP_LOCK_TTL_SECONDS)
    with scheduler_lock_service.single_flight(
        db, SYNC_ALL_LOCK_NAME, holder, ttl, busy_message="sync already in progress"
    ):
        result = sweep_creators(db, now=now, deadline_seconds=deadline_seconds)
        result.repaired = reconcile_orphaned_subscriptions(db)

    logger.info(
        "Creator sweep finished: processed=%s low=%s recovered=%s removed=%s "
        "reminded=%s repaired=%s failed=%s timed_out=%s",
        result.processed,
        result.low_followers,
        result.recovered,
        result.removed,
        result.reminded,
        result.repaired,
        result.failed,
        result.timed_out,
    )
    return result


def sweep_creators(
    db: Session,
    *,
    now: datetime | None = None,
    deadline_seconds: float | None = None,
) -> SweepResult:
    now = now or utcnow()
    if deadline_seconds is None:
        deadline_seconds = settings.SWEEP_TIMEOUT_SECONDS
    started = time.monotonic()
    result = SweepResult()

    creator_ids = [
        row[0]
        for row in db.query(Creator.id)
        .filter(Creator.status.in_([s.value for s in LIVE_CREATOR_STATUSES]))
        .order_by(Creator.created_at)
        .all()
    ]

    for creator_id in creator_ids:
        if time.monotonic() - started > deadline_seconds:
            result.timed_out = True
            logger.warning(
                "Creator sweep stopped at deadline after %s creators", result.processed
            )
            break
        try:
            _sweep_creator(db, creator_id, now, result)
        except SQLAlchemyError:
            db.rollback()
            result.failed += 1
            logger.exception(
                "Creator sweep failed for creator",
                extra=build_log_context(creator_id=creator_id),
            )
    return result


def _sweep_creator(db: Session, creator_id: UUID, now: datetime, result: SweepResult) -> None:
    creator = db.get(Creator, creator_id)
    if creator is None or not creator.is_live:
        return
    result.processed += 1

    totals = follower_service.aggregate(creator.platforms or [])
    grace = creator.grace_period
    if not totals.meets_threshold:
        result.low_followers += 1

    if not totals.meets_threshold and grace is not None:
        if grace.has_ended(now):
            creator_status_service.expire_grace_period(db, creator)
            result.removed += 1
        elif grace.remaining(now) <= GRACE_REMINDER_WINDOW and creator.grace_period_notified_at is None:
            creator.grace_period_notified_at = now
            db.commit()
            notification_service.notify_grace_period_reminder(db, creator, totals.max_followers)
            result.reminded += 1
        return

    outcome = creator_status_service.evaluate_threshold(creator, totals, now)
    if outcome in (ThresholdOutcome.GRACE_STARTED, ThresholdOutcome.RECOVERED):
        db.commit()
        if outcome == ThresholdOutcome.RECOVERED:
            result.recovered += 1
        creator_status_service.notify_threshold_outcome(db, creator, outcome, totals)


def reconcile_orphaned_subscriptions(db: Session) -> int:
    """
    Revert program subscriptions still active behind a revoked entitlement.

    Covers removals whose revert step failed after the revocation committed.
    """
    repaired = 0
    for creator_id, target_type, target_id in entitlement_service.list_revoked_targets(db):
        target_type = EntitlementTargetType(target_type)
        try:
            if entitlement_service.has_active_for_target(db, target_type, target_id):
                continue
            target = subscription_projector.load_target(db, target_type, target_id)
            if target is None:
                continue
            if not subscription_projector.is_orphaned_program_subscription(target, creator_id):
                continue
            if subscription_projector.revert(target, RECONCILIATION_REASON):
                db.commit()
                repaired += 1
                logger.info(
                    "Reverted orphaned program subscription on %s %s",
                    target_type.value,
                    target_id,
                    extra=build_log_context(creator_id=creator_id),
                )
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "Failed to reconcile %s %s", target_type.value, target_id
            )
    return repaired
