"""Default enum values used by models."""

from creator_program.db.enums.creators import ApplicationStatus, CreatorStatus
from creator_program.db.enums.email import EmailStatus
from creator_program.db.enums.jobs import JobStatus

DEFAULT_APPLICATION_STATUS = ApplicationStatus.SUBMITTED
DEFAULT_CREATOR_STATUS = CreatorStatus.ACTIVE
DEFAULT_EMAIL_STATUS = EmailStatus.PENDING
DEFAULT_JOB_STATUS = JobStatus.PENDING
