"""Pydantic schemas for creator applications."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from creator_program.schemas.common import PageMeta


class PlatformIn(BaseModel):
    type: str = Field(..., max_length=20)
    url: str = Field("", max_length=500)
    handle: str = Field("", max_length=100)
    follower_count: int = 0


class ApplicationSubmit(BaseModel):
    """Length and threshold rules are enforced by application_service."""

    display_name: str
    primary_platform: str
    platforms: list[PlatformIn]
    description: str
    bio: str


class ApplicationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    display_name: str
    primary_platform: str
    platforms: list[dict]
    description: str
    bio: str
    status: str
    first_approval_at: datetime | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    feedback: str | None = None
    creator_id: UUID | None = None
    withdrawn_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class AdminApplicationRead(ApplicationRead):
    first_approval_by: UUID | None = None
    first_approver_name: str | None = None
    reviewed_by: UUID | None = None
    admin_notes: str | None = None
    creator_status: str | None = None


class ApplicationListResponse(BaseModel):
    items: list[AdminApplicationRead]
    pagination: PageMeta


class SubmitApplicationResponse(BaseModel):
    success: bool = True
    message: str
    application: ApplicationRead


class MyApplicationResponse(BaseModel):
    application: ApplicationRead | None = None


class ApproveRequest(BaseModel):
    owner_override: bool = False


class ApproveResponse(BaseModel):
    success: bool = True
    message: str
    needs_second_approval: bool
    first_approver: str | None = None
    creator_id: UUID | None = None
    application: AdminApplicationRead


class RejectRequest(BaseModel):
    rejection_reason: str = ""
    feedback: str | None = Field(None, max_length=2000)
    admin_notes: str | None = Field(None, max_length=2000)
