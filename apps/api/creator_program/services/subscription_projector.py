"""
Subscription projector.

Writes the effect of an entitlement onto the subscription columns of a user
or community. Functions mutate the target in the session; callers commit.

apply() is unconditional. apply_personal() adds the non-downgrade check
used for personal grants on approval. revert() refuses to touch any
subscription that has moved to a paid tier.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from creator_program.core.constants import (
    HIGHER_TIER_PLANS,
    PROGRAM_PLAN,
    REVERTABLE_PLANS,
    SUBSCRIPTION_ID_PREFIX,
)
from creator_program.db.enums import EntitlementTargetType
from creator_program.db.models import Community, SubscriptionMixin, User
from creator_program.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)


def program_subscription_id(creator_id: UUID) -> str:
    return f"{SUBSCRIPTION_ID_PREFIX}{creator_id}"


def load_target(
    db: Session, target_type: EntitlementTargetType | str, target_id: UUID
) -> User | Community | None:
    target_type = EntitlementTargetType(target_type)
    if target_type == EntitlementTargetType.USER:
        return db.get(User, target_id)
    return db.get(Community, target_id)


def is_higher_tier(target: SubscriptionMixin) -> bool:
    return (target.subscription_plan or "") in HIGHER_TIER_PLANS


def is_revertable(target: SubscriptionMixin) -> bool:
    return (target.subscription_plan or "") in REVERTABLE_PLANS


def apply(target: SubscriptionMixin, creator_id: UUID, *, now: datetime | None = None) -> None:
    now = now or utcnow()
    target.subscription_plan = PROGRAM_PLAN
    target.subscription_active = True
    target.subscription_id = program_subscription_id(creator_id)
    target.subscription_created_at = now
    target.subscription_updated_at = now


def apply_personal(user: User, creator_id: UUID, *, now: datetime | None = None) -> bool:
    """Apply a personal grant unless the user already pays for a higher tier."""
    if is_higher_tier(user):
        logger.info(
            "Skipping program subscription for user=%s on plan=%s",
            user.id,
            user.subscription_plan,
        )
        return False
    apply(user, creator_id, now=now)
    return True


def revert(target: SubscriptionMixin, reason: str, *, now: datetime | None = None) -> bool:
    """Disable a program subscription. No-op for targets upgraded to a paid plan."""
    if not is_revertable(target):
        logger.info(
            "Leaving subscription on plan=%s active despite revocation (%s)",
            target.subscription_plan,
            reason,
        )
        return False
    target.subscription_active = False
    target.subscription_updated_at = now or utcnow()
    return True


def is_orphaned_program_subscription(target: SubscriptionMixin, creator_id: UUID) -> bool:
    """Still-active subscription stamped by this creator's program grant."""
    return (
        bool(target.subscription_active)
        and target.subscription_id == program_subscription_id(creator_id)
        and is_revertable(target)
    )


def has_paid_subscription(target: SubscriptionMixin) -> bool:
    """Active subscription on a plan the program must not overwrite."""
    return bool(target.subscription_active) and not is_revertable(target)
