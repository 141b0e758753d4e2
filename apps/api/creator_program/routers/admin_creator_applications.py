"""Admin review of creator applications."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from creator_program.core.deps import get_current_admin, get_db, require_csrf_header
from creator_program.db.enums import ApplicationStatus
from creator_program.db.models import CreatorApplication
from creator_program.schemas.auth import Caller
from creator_program.schemas.creator_application import (
    AdminApplicationRead,
    ApplicationListResponse,
    ApproveRequest,
    ApproveResponse,
    RejectRequest,
    SubmitApplicationResponse,
)
from creator_program.services import admin_directory_service, application_service
from creator_program.utils.pagination import (
    PaginationParams,
    build_page_meta,
    get_admin_pagination,
)

router = APIRouter(prefix="/admin/creator-applications", tags=["admin-creator-applications"])


def _admin_read(
    db: Session,
    application: CreatorApplication,
    creator_status: str | None = None,
) -> AdminApplicationRead:
    read = AdminApplicationRead.model_validate(application)
    read.first_approver_name = admin_directory_service.display_name_for(
        db, application.first_approval_by
    )
    read.creator_status = creator_status
    return read


@router.get("", response_model=ApplicationListResponse)
def list_applications(
    status: ApplicationStatus | None = Query(None),
    exclude_status: ApplicationStatus | None = Query(None),
    pagination: PaginationParams = Depends(get_admin_pagination),
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """
    List applications, newest first.

    - status: only this status
    - exclude_status: everything except this status (ignored with status)
    """
    applications, total = application_service.list_applications(
        db, pagination, status=status, exclude_status=exclude_status
    )
    statuses = application_service.creator_statuses_for(db, applications)
    return ApplicationListResponse(
        items=[_admin_read(db, a, statuses.get(a.id)) for a in applications],
        pagination=build_page_meta(total, pagination),
    )


@router.get("/{application_id}", response_model=AdminApplicationRead)
def get_application(
    application_id: UUID,
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    application = application_service.get_application(db, application_id)
    statuses = application_service.creator_statuses_for(db, [application])
    return _admin_read(db, application, statuses.get(application.id))


@router.post(
    "/{application_id}/approve",
    response_model=ApproveResponse,
    dependencies=[Depends(require_csrf_header)],
)
def approve_application(
    application_id: UUID,
    data: ApproveRequest | None = None,
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """
    Record an approval.

    The first approval moves the application to under_review; a second
    approval from a different admin (or an owner override) approves it.
    """
    result = application_service.approve_application(
        db,
        application_id,
        caller,
        owner_override=data.owner_override if data else False,
    )
    statuses = application_service.creator_statuses_for(db, [result.application])
    return ApproveResponse(
        message=result.message,
        needs_second_approval=result.needs_second_approval,
        first_approver=result.first_approver_name,
        creator_id=result.creator.id if result.creator else None,
        application=_admin_read(db, result.application, statuses.get(result.application.id)),
    )


@router.post(
    "/{application_id}/reject",
    response_model=SubmitApplicationResponse,
    dependencies=[Depends(require_csrf_header)],
)
def reject_application(
    application_id: UUID,
    data: RejectRequest,
    caller: Caller = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    application = application_service.reject_application(
        db,
        application_id,
        caller,
        rejection_reason=data.rejection_reason,
        feedback=data.feedback,
        admin_notes=data.admin_notes,
    )
    return SubmitApplicationResponse(
        message="Application rejected",
        application=_admin_read(db, application),
    )
