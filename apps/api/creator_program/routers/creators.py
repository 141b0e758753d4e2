"""Creators router - self-service, community promotion and the public directory."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from creator_program.core.deps import get_current_user, get_db, require_csrf_header
from creator_program.core.rate_limit import FOLLOWER_SYNC_LIMIT, limiter
from creator_program.schemas.community_promotion import (
    ApplyPromotionResponse,
    OwnedCommunitiesResponse,
)
from creator_program.schemas.creator import (
    CreatorActionResponse,
    CreatorProfileUpdate,
    CreatorPublicRead,
    CreatorRead,
    EntitlementRead,
    MyCreatorStateResponse,
    PublicCreatorListResponse,
    SyncFollowersRequest,
    SyncFollowersResponse,
)
from creator_program.schemas.creator_application import ApplicationRead
from creator_program.services import (
    community_promotion_service,
    creator_service,
    creator_status_service,
)
from creator_program.utils.pagination import (
    PaginationParams,
    build_page_meta,
    get_public_pagination,
)

router = APIRouter(prefix="/creators", tags=["creators"])


# =============================================================================
# Self-service (declared before /{slug})
# =============================================================================


@router.get("/me", response_model=MyCreatorStateResponse)
def get_my_creator(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    The caller's program view.

    Live creator first, then a pending application, then a removed creator
    record, then the latest application.
    """
    state = creator_service.get_my_program_state(db, user)
    return MyCreatorStateResponse(
        state=state.state,
        creator=CreatorRead.model_validate(state.creator) if state.creator else None,
        application=ApplicationRead.model_validate(state.application)
        if state.application
        else None,
        entitlements=state.entitlements,
    )


@router.patch(
    "/me",
    response_model=CreatorActionResponse,
    dependencies=[Depends(require_csrf_header)],
)
def update_my_creator(
    data: CreatorProfileUpdate,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    creator = creator_service.update_my_profile(db, user.id, data)
    return CreatorActionResponse(
        message="Profile updated", creator=CreatorRead.model_validate(creator)
    )


@router.post(
    "/me/remove",
    response_model=CreatorActionResponse,
    dependencies=[Depends(require_csrf_header)],
)
def remove_me(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Leave the program. Program plans granted by this creator are revoked."""
    result = creator_status_service.request_my_removal(db, user.id)
    return CreatorActionResponse(
        message="You have left the creator program",
        creator=CreatorRead.model_validate(result.creator),
    )


@router.post(
    "/me/sync-followers",
    response_model=SyncFollowersResponse,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(FOLLOWER_SYNC_LIMIT)
def sync_my_followers(
    request: Request,
    data: SyncFollowersRequest,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Report fresh follower counts. Allowed once every 24 hours."""
    result = creator_status_service.sync_my_followers(db, user.id, data.platforms)
    return SyncFollowersResponse(
        message=result.message,
        max_followers=result.totals.max_followers,
        total_followers=result.totals.total_followers,
        status=result.creator.status,
        grace_period_ends_at=result.creator.grace_period_ends_at,
    )


@router.get("/me/communities", response_model=OwnedCommunitiesResponse)
def list_my_communities(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return community_promotion_service.list_owned_communities(db, user.id)


@router.post(
    "/me/communities/{community_id}/promotion",
    response_model=ApplyPromotionResponse,
    dependencies=[Depends(require_csrf_header)],
)
def apply_community_promotion(
    community_id: UUID,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Apply the one-per-creator Base Plan promotion to an owned community."""
    result = community_promotion_service.apply_promotion(db, user.id, community_id)
    return ApplyPromotionResponse(
        message=result.message,
        entitlement=EntitlementRead.model_validate(result.entitlement),
    )


# =============================================================================
# Public directory
# =============================================================================


@router.get("", response_model=PublicCreatorListResponse)
def list_creators(
    featured: bool | None = Query(None),
    pagination: PaginationParams = Depends(get_public_pagination),
    db: Session = Depends(get_db),
):
    creators, total = creator_service.list_public_creators(db, pagination, featured=featured)
    return PublicCreatorListResponse(
        items=[CreatorPublicRead.model_validate(c) for c in creators],
        pagination=build_page_meta(total, pagination),
    )


@router.get("/{slug}", response_model=CreatorPublicRead)
def get_creator_by_slug(slug: str, db: Session = Depends(get_db)):
    return creator_service.get_public_creator(db, slug)
