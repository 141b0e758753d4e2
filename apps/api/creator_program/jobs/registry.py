"""Job handler registry."""

from __future__ import annotations

from typing import Awaitable, Callable, Mapping

from creator_program.db.enums import JobType
from creator_program.jobs.handlers import email

JobHandler = Callable[[object, object], Awaitable[None]]

JOB_HANDLERS: Mapping[str, JobHandler] = {
    JobType.SEND_EMAIL.value: email.process_send_email,
}


def resolve_job_handler(job_type: str) -> JobHandler:
    handler = JOB_HANDLERS.get(job_type)
    if not handler:
        raise ValueError(f"Unknown job type: {job_type}")
    return handler
