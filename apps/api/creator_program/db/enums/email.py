"""Email-related enums."""

from enum import Enum


class EmailStatus(str, Enum):
    """Status of outbound emails."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class EmailKind(str, Enum):
    """Creator program transactional emails."""

    APPLICATION_RECEIVED = "application_received"
    ADMIN_NEW_APPLICATION = "admin_new_application"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    CREATOR_REMOVED = "creator_removed"
    LOW_FOLLOWER_WARNING = "low_follower_warning"
    GRACE_PERIOD_REMINDER = "grace_period_reminder"
    GRACE_PERIOD_RECOVERED = "grace_period_recovered"
