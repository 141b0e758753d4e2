"""Creator profiles: self-service reads/updates and the public directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from creator_program.core.constants import (
    BIO_MAX_LENGTH,
    DISPLAY_NAME_MAX_LENGTH,
    DISPLAY_NAME_MIN_LENGTH,
    REVERTABLE_PLANS,
)
from creator_program.core.exceptions import Conflict, NotFound, ValidationError
from creator_program.db.enums import LIVE_CREATOR_STATUSES, CreatorStatus, EntitlementTargetType
from creator_program.db.models import Community, Creator, CreatorApplication, User
from creator_program.schemas.creator import CreatorProfileUpdate
from creator_program.services import entitlement_service, follower_service, theme_service
from creator_program.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)

_LIVE_STATUS_VALUES = [s.value for s in LIVE_CREATOR_STATUSES]


@dataclass
class ProgramState:
    """What a user sees on their creator page, resolved by priority."""

    state: str
    creator: Creator | None = None
    application: CreatorApplication | None = None
    entitlements: dict | None = None


# =============================================================================
# Lookups
# =============================================================================


def get_live_creator_for_user(db: Session, user_id: UUID) -> Creator | None:
    return (
        db.query(Creator)
        .filter(Creator.user_id == user_id, Creator.status.in_(_LIVE_STATUS_VALUES))
        .first()
    )


def get_latest_creator_for_user(db: Session, user_id: UUID) -> Creator | None:
    return (
        db.query(Creator)
        .filter(Creator.user_id == user_id)
        .order_by(Creator.created_at.desc())
        .first()
    )


def require_live_creator(db: Session, user_id: UUID) -> Creator:
    creator = get_live_creator_for_user(db, user_id)
    if creator is None:
        raise NotFound("content creator not found", code="creator_not_found")
    return creator


def get_creator(db: Session, creator_id: UUID) -> Creator:
    creator = db.get(Creator, creator_id)
    if creator is None:
        raise NotFound("content creator not found", code="creator_not_found")
    return creator


# =============================================================================
# Get-mine
# =============================================================================


def build_entitlement_summary(db: Session, creator: Creator, user: User) -> dict:
    personal = entitlement_service.find_active(db, creator.id, EntitlementTargetType.USER)
    community_entitlement = entitlement_service.find_active(
        db, creator.id, EntitlementTargetType.COMMUNITY
    )
    community_plan = {"active": False, "community_id": None, "community_name": None}
    if community_entitlement is not None:
        community = db.get(Community, community_entitlement.target_id)
        community_plan = {
            "active": True,
            "community_id": community_entitlement.target_id,
            "community_name": community.name if community else None,
        }

    current_plan = user.subscription_plan or ""
    return {
        "personal_plan": personal.plan if personal else None,
        # User keeps a plan of their own above the program plan
        "personal_plan_fallback": current_plan not in REVERTABLE_PLANS,
        "current_user_plan": current_plan,
        "community_plan": community_plan,
    }


def get_my_program_state(db: Session, user: User) -> ProgramState:
    """
    Resolve the caller's program view.

    Priority: live creator, pending application, removed creator, latest
    application of any status, nothing.
    """
    from creator_program.services import application_service

    creator = get_live_creator_for_user(db, user.id)
    if creator is not None:
        return ProgramState(
            state="creator",
            creator=creator,
            entitlements=build_entitlement_summary(db, creator, user),
        )

    pending = application_service.get_pending_application(db, user.id)
    if pending is not None:
        return ProgramState(state="application", application=pending)

    removed = get_latest_creator_for_user(db, user.id)
    if removed is not None:
        return ProgramState(
            state="removed",
            creator=removed,
            application=application_service.get_latest_application(db, user.id),
        )

    latest = application_service.get_latest_application(db, user.id)
    if latest is not None:
        return ProgramState(state="application", application=latest)
    return ProgramState(state="none")


# =============================================================================
# Profile updates
# =============================================================================


def apply_profile_changes(creator: Creator, data: CreatorProfileUpdate) -> bool:
    """Validate and copy profile fields. Returns True if platforms changed."""
    if data.display_name is not None:
        name = data.display_name.strip()
        if not DISPLAY_NAME_MIN_LENGTH <= len(name) <= DISPLAY_NAME_MAX_LENGTH:
            raise ValidationError(
                f"display name must be between {DISPLAY_NAME_MIN_LENGTH} and "
                f"{DISPLAY_NAME_MAX_LENGTH} characters",
                code="invalid_display_name",
            )
        creator.display_name = name

    if data.bio is not None:
        if len(data.bio.strip()) > BIO_MAX_LENGTH:
            raise ValidationError(
                f"bio must be at most {BIO_MAX_LENGTH} characters", code="invalid_bio"
            )
        creator.bio = data.bio.strip()

    if data.theme_color is not None:
        if not theme_service.is_valid_theme_color(data.theme_color):
            raise ValidationError(
                "theme color must be a hex color that is neither too dark nor too light",
                code="invalid_theme_color",
            )
        creator.theme_color = data.theme_color.lower()

    if data.profile_image is not None:
        creator.profile_image = data.profile_image.strip() or None

    if data.platforms:
        creator.platforms = follower_service.normalize_platforms(data.platforms)
        return True
    return False


def update_my_profile(db: Session, user_id: UUID, data: CreatorProfileUpdate) -> Creator:
    creator = get_live_creator_for_user(db, user_id)
    if creator is None:
        latest = get_latest_creator_for_user(db, user_id)
        if latest is not None and latest.status == CreatorStatus.REMOVED.value:
            raise Conflict("removed creators cannot update their profile", code="creator_removed")
        raise NotFound("content creator not found", code="creator_not_found")

    apply_profile_changes(creator, data)
    db.commit()
    db.refresh(creator)
    return creator


# =============================================================================
# Public directory
# =============================================================================


def list_public_creators(
    db: Session, pagination: PaginationParams, featured: bool | None = None
) -> tuple[list[Creator], int]:
    query = db.query(Creator).filter(Creator.status == CreatorStatus.ACTIVE.value)
    if featured is not None:
        query = query.filter(Creator.featured == featured)
    query = query.order_by(Creator.featured.desc(), Creator.joined_at.desc())
    return paginate_query(query, pagination)


def get_public_creator(db: Session, slug: str) -> Creator:
    creator = (
        db.query(Creator)
        .filter(Creator.slug == slug.lower(), Creator.status == CreatorStatus.ACTIVE.value)
        .first()
    )
    if creator is None:
        raise NotFound("content creator not found", code="creator_not_found")
    return creator
