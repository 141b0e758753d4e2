"""Pydantic schemas for creators, entitlements and the monitor."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from creator_program.core.constants import PROGRAM_PLAN
from creator_program.db.enums import EntitlementTargetType
from creator_program.schemas.common import PageMeta
from creator_program.schemas.creator_application import ApplicationRead, PlatformIn


class CreatorPublicRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    display_name: str
    slug: str
    bio: str
    theme_color: str
    profile_image: str | None = None
    primary_platform: str
    platforms: list[dict]
    featured: bool
    joined_at: datetime


class CreatorRead(CreatorPublicRead):
    user_id: UUID | None = None
    application_id: UUID | None = None
    status: str
    grace_period_started_at: datetime | None = None
    grace_period_ends_at: datetime | None = None
    warning_reason: str | None = None
    warning_message: str | None = None
    warned_at: datetime | None = None
    removal_reason: str | None = None
    removed_at: datetime | None = None
    last_synced_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class CommunityPlanSummary(BaseModel):
    active: bool = False
    community_id: UUID | None = None
    community_name: str | None = None


class EntitlementSummary(BaseModel):
    personal_plan: str | None = None
    personal_plan_fallback: bool = False
    current_user_plan: str = ""
    community_plan: CommunityPlanSummary


class MyCreatorStateResponse(BaseModel):
    state: Literal["creator", "application", "removed", "none"]
    creator: CreatorRead | None = None
    application: ApplicationRead | None = None
    entitlements: EntitlementSummary | None = None


class CreatorProfileUpdate(BaseModel):
    display_name: str | None = None
    bio: str | None = None
    theme_color: str | None = None
    profile_image: str | None = Field(None, max_length=500)
    platforms: list[PlatformIn] | None = None


class AdminCreatorUpdate(CreatorProfileUpdate):
    featured: bool | None = None


class FollowerCountIn(BaseModel):
    type: str = Field(..., max_length=20)
    follower_count: int


class SyncFollowersRequest(BaseModel):
    platforms: list[FollowerCountIn] = Field(..., min_length=1)


class SyncFollowersResponse(BaseModel):
    success: bool = True
    message: str
    max_followers: int
    total_followers: int
    status: str
    grace_period_ends_at: datetime | None = None


class CreatorListResponse(BaseModel):
    items: list[CreatorRead]
    pagination: PageMeta


class PublicCreatorListResponse(BaseModel):
    items: list[CreatorPublicRead]
    pagination: PageMeta


class CreatorActionResponse(BaseModel):
    success: bool = True
    message: str
    creator: CreatorRead


class WarnRequest(BaseModel):
    reason: str = ""
    message: str = ""


class RemoveRequest(BaseModel):
    reason: str = ""


class GrantEntitlementRequest(BaseModel):
    target_type: EntitlementTargetType
    target_id: UUID
    plan: str = PROGRAM_PLAN


class EntitlementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content_creator_id: UUID
    target_type: str
    target_id: UUID
    plan: str
    source: str
    granted_at: datetime
    granted_by: UUID | None = None
    active: bool
    revoked_at: datetime | None = None
    revoke_reason: str | None = None


class GrantEntitlementResponse(BaseModel):
    success: bool = True
    message: str
    subscription_applied: bool
    entitlement: EntitlementRead


class AnalyticsSummary(BaseModel):
    total_creators: int
    active_creators: int
    warned_creators: int
    removed_creators: int
    in_grace_period: int
    total_applications: int
    pending_applications: int
    approved_applications: int
    rejected_applications: int
    active_entitlements: int
    estimated_monthly_value: float
    estimated_yearly_value: float


class GracePeriodCreatorRead(CreatorRead):
    days_remaining: int
    max_followers: int


class GracePeriodListResponse(BaseModel):
    items: list[GracePeriodCreatorRead]
    total: int


class SweepResultRead(BaseModel):
    processed: int
    low_followers: int
    recovered: int
    removed: int
    reminded: int
    repaired: int
    failed: int = 0
    timed_out: bool
