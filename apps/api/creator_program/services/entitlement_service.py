"""Entitlement ledger - plan grants per creator per target."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from creator_program.core.constants import ENTITLEMENT_SOURCE, PROGRAM_PLAN
from creator_program.core.exceptions import Conflict
from creator_program.db.enums import EntitlementTargetType
from creator_program.db.models import CreatorEntitlement
from creator_program.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

COMMUNITY_PROMOTION_EXISTS = "you have already applied your community promotion"


def find_active(
    db: Session, creator_id: UUID, target_type: EntitlementTargetType
) -> CreatorEntitlement | None:
    return (
        db.query(CreatorEntitlement)
        .filter(
            CreatorEntitlement.content_creator_id == creator_id,
            CreatorEntitlement.target_type == target_type.value,
            CreatorEntitlement.active.is_(True),
        )
        .order_by(CreatorEntitlement.granted_at.desc())
        .first()
    )


def list_active(db: Session, creator_id: UUID) -> list[CreatorEntitlement]:
    return (
        db.query(CreatorEntitlement)
        .filter(
            CreatorEntitlement.content_creator_id == creator_id,
            CreatorEntitlement.active.is_(True),
        )
        .order_by(CreatorEntitlement.granted_at)
        .all()
    )


def has_active_for_target(
    db: Session, target_type: EntitlementTargetType, target_id: UUID
) -> bool:
    return (
        db.query(CreatorEntitlement.id)
        .filter(
            CreatorEntitlement.target_type == target_type.value,
            CreatorEntitlement.target_id == target_id,
            CreatorEntitlement.active.is_(True),
        )
        .first()
        is not None
    )


def grant(
    db: Session,
    *,
    creator_id: UUID,
    target_type: EntitlementTargetType,
    target_id: UUID,
    granted_by: UUID | None,
    plan: str = PROGRAM_PLAN,
) -> CreatorEntitlement:
    """
    Record a new active entitlement (flushed, caller commits).

    A creator holds at most one active community entitlement.
    """
    if target_type == EntitlementTargetType.COMMUNITY and find_active(db, creator_id, target_type):
        raise Conflict(COMMUNITY_PROMOTION_EXISTS, code="community_promotion_exists")

    entitlement = CreatorEntitlement(
        content_creator_id=creator_id,
        target_type=target_type.value,
        target_id=target_id,
        plan=plan,
        source=ENTITLEMENT_SOURCE,
        granted_at=utcnow(),
        granted_by=granted_by,
        active=True,
    )
    db.add(entitlement)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise Conflict(COMMUNITY_PROMOTION_EXISTS, code="community_promotion_exists")
    return entitlement


def revoke(
    entitlement: CreatorEntitlement,
    *,
    reason: str,
    revoked_by: UUID | None,
    now=None,
) -> bool:
    """Deactivate one entitlement. Returns False if it was already inactive."""
    if not entitlement.active:
        return False
    entitlement.active = False
    entitlement.revoked_at = now or utcnow()
    entitlement.revoked_by = revoked_by
    entitlement.revoke_reason = reason
    return True


def revoke_all(
    db: Session,
    creator_id: UUID,
    *,
    reason: str,
    revoked_by: UUID | None,
) -> list[CreatorEntitlement]:
    """
    Deactivate every active entitlement of a creator (flushed, caller commits).

    Returns the entitlements that were active immediately before the call.
    """
    active = list_active(db, creator_id)
    now = utcnow()
    for entitlement in active:
        revoke(entitlement, reason=reason, revoked_by=revoked_by, now=now)
    db.flush()
    if active:
        logger.info(
            "Revoked %s entitlements for creator=%s", len(active), creator_id
        )
    return active


def find_active_for_target(
    db: Session,
    creator_id: UUID,
    target_type: EntitlementTargetType,
    target_id: UUID,
) -> CreatorEntitlement | None:
    return (
        db.query(CreatorEntitlement)
        .filter(
            CreatorEntitlement.content_creator_id == creator_id,
            CreatorEntitlement.target_type == target_type.value,
            CreatorEntitlement.target_id == target_id,
            CreatorEntitlement.active.is_(True),
        )
        .first()
    )


def list_revoked_targets(db: Session) -> list[tuple[UUID, str, UUID]]:
    """Distinct (creator, target_type, target_id) with at least one revoked entitlement."""
    rows = (
        db.query(
            CreatorEntitlement.content_creator_id,
            CreatorEntitlement.target_type,
            CreatorEntitlement.target_id,
        )
        .filter(CreatorEntitlement.active.is_(False))
        .distinct()
        .all()
    )
    return [(row[0], row[1], row[2]) for row in rows]
