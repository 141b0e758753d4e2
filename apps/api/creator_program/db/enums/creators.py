"""Creator program enums."""

from enum import Enum


class ApplicationStatus(str, Enum):
    """Review workflow states of a creator application."""

    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class CreatorStatus(str, Enum):
    """
    Standing of an approved creator.

    - ACTIVE: in good standing
    - WARNED: follower-driven grace period or admin-issued warning
    - REMOVED: terminal, record retained
    """

    ACTIVE = "active"
    WARNED = "warned"
    REMOVED = "removed"


class WarningReason(str, Enum):
    LOW_FOLLOWERS = "low_followers"


class PlatformType(str, Enum):
    TWITCH = "twitch"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    OTHER = "other"


class SnapshotSource(str, Enum):
    MANUAL = "manual"
    ADMIN = "admin"


# Statuses that count as "pending review"
PENDING_APPLICATION_STATUSES = (ApplicationStatus.SUBMITTED, ApplicationStatus.UNDER_REVIEW)

# Statuses that count as "in the program"
LIVE_CREATOR_STATUSES = (CreatorStatus.ACTIVE, CreatorStatus.WARNED)
