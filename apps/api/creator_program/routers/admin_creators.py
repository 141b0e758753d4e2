"""Admin management of creators: edits, warnings, removal, grants, reporting."""

import socket
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from creator_program.core.deps import get_current_admin, get_db, get_sweep_db, require_csrf_header
from creator_program.db.enums import CreatorStatus
from creator_program.schemas.auth import Caller
from creator_program.schemas.creator import (
    AdminCreatorUpdate,
    AnalyticsSummary,
    CreatorActionResponse,
    CreatorListResponse,
    CreatorRead,
    EntitlementRead,
    GracePeriodCreatorRead,
    GracePeriodListResponse,
    GrantEntitlementRequest,
    GrantEntitlementResponse,
    RemoveRequest,
    SweepResultRead,
    WarnRequest,
)
from creator_program.services import creator_admin_service, creator_status_service, sweep_service
from creator_program.utils.pagination import (
    PaginationParams,
    build_page_meta,
    get_admin_pagination,
)

router = APIRouter(prefix="/admin/creators", tags=["admin-creators"])


@router.get("", response_model=CreatorListResponse)
def list_creators(
    status: CreatorStatus | None = Query(None),
    pagination: PaginationParams = Depends(get_admin_pagination),
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    creators, total = creator_admin_service.list_creators(db, pagination, status=status)
    return CreatorListResponse(
        items=[CreatorRead.model_validate(c) for c in creators],
        pagination=build_page_meta(total, pagination),
    )


@router.get("/analytics", response_model=AnalyticsSummary)
def get_analytics(
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return creator_admin_service.get_analytics_summary(db)


@router.get("/grace-period", response_model=GracePeriodListResponse)
def list_grace_period(
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Creators whose grace period is running, soonest deadline first."""
    entries = creator_admin_service.list_grace_period_creators(db)
    items = [
        GracePeriodCreatorRead(
            **CreatorRead.model_validate(e.creator).model_dump(),
            days_remaining=e.days_remaining,
            max_followers=e.max_followers,
        )
        for e in entries
    ]
    return GracePeriodListResponse(items=items, total=len(items))


@router.post(
    "/sync-all",
    response_model=SweepResultRead,
    dependencies=[Depends(require_csrf_header)],
)
def trigger_sync_all(
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_sweep_db),
):
    """Run the follower sweep now. Conflict if a sweep is already running."""
    result = sweep_service.run_sync_all(db, holder=f"admin:{caller.id}@{socket.gethostname()}")
    return SweepResultRead.model_validate(result, from_attributes=True)


@router.patch(
    "/{creator_id}",
    response_model=CreatorActionResponse,
    dependencies=[Depends(require_csrf_header)],
)
def update_creator(
    creator_id: UUID,
    data: AdminCreatorUpdate,
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    creator = creator_admin_service.admin_update_creator(db, creator_id, data, caller)
    return CreatorActionResponse(
        message="Creator updated", creator=CreatorRead.model_validate(creator)
    )


@router.post(
    "/{creator_id}/warn",
    response_model=CreatorActionResponse,
    dependencies=[Depends(require_csrf_header)],
)
def warn_creator(
    creator_id: UUID,
    data: WarnRequest,
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    creator = creator_status_service.warn_creator(
        db, creator_id, caller, reason=data.reason, message=data.message
    )
    return CreatorActionResponse(
        message="Warning issued", creator=CreatorRead.model_validate(creator)
    )


@router.post(
    "/{creator_id}/remove",
    response_model=CreatorActionResponse,
    dependencies=[Depends(require_csrf_header)],
)
def remove_creator(
    creator_id: UUID,
    data: RemoveRequest,
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    result = creator_status_service.admin_remove_creator(db, creator_id, caller, data.reason)
    return CreatorActionResponse(
        message="Creator removed", creator=CreatorRead.model_validate(result.creator)
    )


@router.post(
    "/{creator_id}/entitlements",
    response_model=GrantEntitlementResponse,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def grant_entitlement(
    creator_id: UUID,
    data: GrantEntitlementRequest,
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    result = creator_admin_service.grant_entitlement(
        db,
        creator_id,
        caller,
        target_type=data.target_type,
        target_id=data.target_id,
        plan=data.plan,
    )
    return GrantEntitlementResponse(
        message="Entitlement granted",
        subscription_applied=result.subscription_applied,
        entitlement=EntitlementRead.model_validate(result.entitlement),
    )
