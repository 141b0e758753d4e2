"""Enum definitions for application constants."""

from creator_program.db.enums.admins import AdminRole
from creator_program.db.enums.creators import (
    LIVE_CREATOR_STATUSES,
    PENDING_APPLICATION_STATUSES,
    ApplicationStatus,
    CreatorStatus,
    PlatformType,
    SnapshotSource,
    WarningReason,
)
from creator_program.db.enums.defaults import (
    DEFAULT_APPLICATION_STATUS,
    DEFAULT_CREATOR_STATUS,
    DEFAULT_EMAIL_STATUS,
    DEFAULT_JOB_STATUS,
)
from creator_program.db.enums.email import EmailKind, EmailStatus
from creator_program.db.enums.entitlements import EntitlementTargetType
from creator_program.db.enums.jobs import JobStatus, JobType

__all__ = [
    "AdminRole",
    "ApplicationStatus",
    "CreatorStatus",
    "DEFAULT_APPLICATION_STATUS",
    "DEFAULT_CREATOR_STATUS",
    "DEFAULT_EMAIL_STATUS",
    "DEFAULT_JOB_STATUS",
    "EmailKind",
    "EmailStatus",
    "EntitlementTargetType",
    "JobStatus",
    "JobType",
    "LIVE_CREATOR_STATUSES",
    "PENDING_APPLICATION_STATUSES",
    "PlatformType",
    "SnapshotSource",
    "WarningReason",
]
