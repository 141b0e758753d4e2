"""SQLAlchemy ORM models."""

from creator_program.db.models.auth import AdminUser, Community, SubscriptionMixin, User
from creator_program.db.models.creators import (
    Creator,
    CreatorApplication,
    CreatorEntitlement,
    FollowerSnapshot,
    GracePeriod,
)
from creator_program.db.models.scheduling import EmailLog, Job, SchedulerLock

__all__ = [
    "AdminUser",
    "Community",
    "Creator",
    "CreatorApplication",
    "CreatorEntitlement",
    "EmailLog",
    "FollowerSnapshot",
    "GracePeriod",
    "Job",
    "SchedulerLock",
    "SubscriptionMixin",
    "User",
]
