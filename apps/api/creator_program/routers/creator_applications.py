"""Creator applications router - applicant self-service."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from creator_program.core.deps import get_current_user, get_db, require_csrf_header
from creator_program.core.rate_limit import APPLICATION_SUBMIT_LIMIT, limiter
from creator_program.schemas.creator_application import (
    ApplicationRead,
    ApplicationSubmit,
    MyApplicationResponse,
    SubmitApplicationResponse,
)
from creator_program.services import application_service

router = APIRouter(prefix="/creator-applications", tags=["creator-applications"])


@router.post(
    "",
    response_model=SubmitApplicationResponse,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(APPLICATION_SUBMIT_LIMIT)
def submit_application(
    request: Request,
    data: ApplicationSubmit,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Apply to the creator program. One pending application per user."""
    application = application_service.submit_application(db, user, data)
    return SubmitApplicationResponse(
        message="Application submitted",
        application=ApplicationRead.model_validate(application),
    )


@router.get("/me", response_model=MyApplicationResponse)
def get_my_application(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Pending application if any, otherwise the most recent one."""
    application = application_service.get_pending_application(
        db, user.id
    ) or application_service.get_latest_application(db, user.id)
    return MyApplicationResponse(
        application=ApplicationRead.model_validate(application) if application else None
    )


@router.post(
    "/me/withdraw",
    response_model=SubmitApplicationResponse,
    dependencies=[Depends(require_csrf_header)],
)
def withdraw_my_application(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    application = application_service.withdraw_my_application(db, user.id)
    return SubmitApplicationResponse(
        message="Application withdrawn",
        application=ApplicationRead.model_validate(application),
    )
