"""Community promotion: a creator applies the Base Plan to one community they own."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from creator_program.core.exceptions import Conflict, Forbidden, NotFound
from creator_program.core.structured_logging import build_log_context
from creator_program.db.enums import EntitlementTargetType
from creator_program.db.models import Community, CreatorEntitlement
from creator_program.services import creator_service, entitlement_service, subscription_projector

logger = logging.getLogger(__name__)


@dataclass
class PromotionResult:
    entitlement: CreatorEntitlement
    community: Community
    message: str


def list_owned_communities(db: Session, user_id: UUID) -> dict:
    """Every community the user owns, with promotion eligibility."""
    creator = creator_service.get_live_creator_for_user(db, user_id)
    applied = (
        entitlement_service.find_active(db, creator.id, EntitlementTargetType.COMMUNITY)
        if creator is not None
        else None
    )
    communities = (
        db.query(Community)
        .filter(Community.owner_user_id == user_id)
        .order_by(Community.name)
        .all()
    )

    items = []
    for community in communities:
        items.append(
            {
                "id": community.id,
                "name": community.name,
                "current_plan": community.subscription_plan or "",
                "has_active_subscription": bool(community.subscription_active),
                "is_promotion_applied": applied is not None and applied.target_id == community.id,
                "eligible": creator is not None
                and applied is None
                and not subscription_projector.has_paid_subscription(community),
            }
        )

    return {
        "items": items,
        "has_applied_promotion": applied is not None,
        "applied_community_id": applied.target_id if applied else None,
        "creator_status": creator.status if creator else None,
    }


def apply_promotion(db: Session, user_id: UUID, community_id: UUID) -> PromotionResult:
    creator = creator_service.require_live_creator(db, user_id)

    community = db.get(Community, community_id)
    if community is None:
        raise NotFound("community not found", code="community_not_found")
    if community.owner_user_id != user_id:
        raise Forbidden("you do not own this community", code="not_community_owner")

    if entitlement_service.find_active(db, creator.id, EntitlementTargetType.COMMUNITY):
        raise Conflict(
            entitlement_service.COMMUNITY_PROMOTION_EXISTS, code="community_promotion_exists"
        )
    if subscription_projector.has_paid_subscription(community):
        raise Conflict(
            "this community already has an active paid subscription",
            code="community_has_paid_plan",
        )

    entitlement = entitlement_service.grant(
        db,
        creator_id=creator.id,
        target_type=EntitlementTargetType.COMMUNITY,
        target_id=community.id,
        granted_by=user_id,
    )
    subscription_projector.apply(community, creator.id)
    db.commit()
    db.refresh(entitlement)
    db.refresh(community)

    logger.info(
        "Community promotion applied to community=%s",
        community.id,
        extra=build_log_context(user_id=user_id, creator_id=creator.id),
    )
    return PromotionResult(
        entitlement=entitlement,
        community=community,
        message=f"Base Plan promotion applied to {community.name}",
    )
