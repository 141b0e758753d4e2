"""Creator program models: applications, creators, entitlements, snapshots."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from creator_program.db.base import Base
from creator_program.db.enums import (
    DEFAULT_APPLICATION_STATUS,
    DEFAULT_CREATOR_STATUS,
    ApplicationStatus,
    CreatorStatus,
    EntitlementTargetType,
)
from creator_program.utils.datetime_utils import utcnow


_PENDING_APPLICATION_FILTER = (
    f"status IN ('{ApplicationStatus.SUBMITTED.value}', '{ApplicationStatus.UNDER_REVIEW.value}')"
)
_LIVE_CREATOR_FILTER = (
    f"status IN ('{CreatorStatus.ACTIVE.value}', '{CreatorStatus.WARNED.value}')"
)
_ACTIVE_COMMUNITY_ENTITLEMENT_FILTER = (
    f"target_type = '{EntitlementTargetType.COMMUNITY.value}' AND active = true"
)


class CreatorApplication(Base):
    """
    An application to join the creator program.

    Mutated only by application_service; immutable once approved, rejected
    or withdrawn, apart from the creator_id backfill on approval.
    """

    __tablename__ = "creator_applications"
    __table_args__ = (
        Index("idx_creator_applications_status", "status", "created_at"),
        Index(
            "uq_creator_applications_pending_user",
            "user_id",
            unique=True,
            postgresql_where=text(_PENDING_APPLICATION_FILTER),
            sqlite_where=text(_PENDING_APPLICATION_FILTER),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    primary_platform: Mapped[str] = mapped_column(String(20), nullable=False)
    platforms: Mapped[list] = mapped_column(default=list, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    bio: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_APPLICATION_STATUS.value, nullable=False
    )
    first_approval_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    first_approval_at: Mapped[datetime | None] = mapped_column(nullable=True)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    creator_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    withdrawn_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
    )

    @property
    def is_pending(self) -> bool:
        return self.status in (
            ApplicationStatus.SUBMITTED.value,
            ApplicationStatus.UNDER_REVIEW.value,
        )


@dataclass(frozen=True)
class GracePeriod:
    """An active grace period. Absence of a grace period is ``None``."""

    started_at: datetime
    ends_at: datetime

    def has_ended(self, now: datetime) -> bool:
        return self.ends_at <= now

    def remaining(self, now: datetime) -> timedelta:
        return max(self.ends_at - now, timedelta(0))

    def days_remaining(self, now: datetime) -> int:
        return math.ceil(self.remaining(now).total_seconds() / 86400)


class Creator(Base):
    """
    An approved program participant.

    Never hard-deleted: REMOVED is terminal but the record is retained so a
    user may re-apply while their history stays intact.
    """

    __tablename__ = "creators"
    __table_args__ = (
        Index("idx_creators_status", "status", "joined_at"),
        Index("idx_creators_grace_period", "grace_period_ends_at"),
        Index(
            "uq_creators_live_user",
            "user_id",
            unique=True,
            postgresql_where=text(_LIVE_CREATOR_FILTER),
            sqlite_where=text(_LIVE_CREATOR_FILTER),
        ),
        CheckConstraint(
            "(grace_period_started_at IS NULL) = (grace_period_ends_at IS NULL)",
            name="ck_creators_grace_period_pair",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    application_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("creator_applications.id", ondelete="SET NULL"), nullable=True
    )

    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    theme_color: Mapped[str] = mapped_column(String(7), nullable=False)
    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    primary_platform: Mapped[str] = mapped_column(String(20), nullable=False)
    platforms: Mapped[list] = mapped_column(default=list, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_CREATOR_STATUS.value, nullable=False
    )
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Only touched through start_grace_period / clear_grace_period
    grace_period_started_at: Mapped[datetime | None] = mapped_column(nullable=True)
    grace_period_ends_at: Mapped[datetime | None] = mapped_column(nullable=True)
    grace_period_notified_at: Mapped[datetime | None] = mapped_column(nullable=True)

    warning_reason: Mapped[str | None] = mapped_column(String(100), nullable=True)
    warning_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    warned_at: Mapped[datetime | None] = mapped_column(nullable=True)

    removal_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    removed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    removed_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)

    last_synced_at: Mapped[datetime | None] = mapped_column(nullable=True)

    joined_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
    )

    @property
    def grace_period(self) -> GracePeriod | None:
        if self.grace_period_started_at is None or self.grace_period_ends_at is None:
            return None
        return GracePeriod(
            started_at=self.grace_period_started_at,
            ends_at=self.grace_period_ends_at,
        )

    def start_grace_period(self, now: datetime, length: timedelta) -> GracePeriod:
        period = GracePeriod(started_at=now, ends_at=now + length)
        self.grace_period_started_at = period.started_at
        self.grace_period_ends_at = period.ends_at
        self.grace_period_notified_at = None
        return period

    def clear_grace_period(self) -> None:
        self.grace_period_started_at = None
        self.grace_period_ends_at = None
        self.grace_period_notified_at = None

    @property
    def is_live(self) -> bool:
        return self.status in (CreatorStatus.ACTIVE.value, CreatorStatus.WARNED.value)


class CreatorEntitlement(Base):
    """
    A plan grant to a user or community attributable to a creator.

    Never deleted; revocation flips ``active`` and stamps the revoked_*
    columns together.
    """

    __tablename__ = "creator_entitlements"
    __table_args__ = (
        Index("idx_creator_entitlements_creator", "content_creator_id", "active"),
        Index("idx_creator_entitlements_target", "target_type", "target_id"),
        Index(
            "uq_creator_entitlements_active_community",
            "content_creator_id",
            unique=True,
            postgresql_where=text(_ACTIVE_COMMUNITY_ENTITLEMENT_FILTER),
            sqlite_where=text(_ACTIVE_COMMUNITY_ENTITLEMENT_FILTER.replace("true", "1")),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    content_creator_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("creators.id", ondelete="CASCADE"), nullable=False
    )
    target_type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    plan: Mapped[str] = mapped_column(String(50), nullable=False)
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    granted_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    granted_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(nullable=True)
    revoked_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    revoke_reason: Mapped[str | None] = mapped_column(Text, nullable=True)


class FollowerSnapshot(Base):
    """Append-only follower history. Written, never read back by the program."""

    __tablename__ = "follower_snapshots"
    __table_args__ = (Index("idx_follower_snapshots_creator", "content_creator_id", "recorded_at"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    content_creator_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("creators.id", ondelete="CASCADE"), nullable=False
    )
    platforms: Mapped[list] = mapped_column(default=list, nullable=False)
    total_followers: Mapped[int] = mapped_column(Integer, nullable=False)
    max_followers: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    recorded_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
