"""Pydantic schemas for community promotion self-service."""

from uuid import UUID

from pydantic import BaseModel

from creator_program.schemas.creator import EntitlementRead


class OwnedCommunityRead(BaseModel):
    id: UUID
    name: str
    current_plan: str
    has_active_subscription: bool
    is_promotion_applied: bool
    eligible: bool


class OwnedCommunitiesResponse(BaseModel):
    items: list[OwnedCommunityRead]
    has_applied_promotion: bool
    applied_community_id: UUID | None = None
    creator_status: str | None = None


class ApplyPromotionResponse(BaseModel):
    success: bool = True
    message: str
    entitlement: EntitlementRead
