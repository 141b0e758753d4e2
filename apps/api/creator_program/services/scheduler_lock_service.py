"""Distributed single-flight locks for scheduled sweeps."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import timedelta
from typing import Iterator

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from creator_program.core.exceptions import Conflict
from creator_program.db.models import SchedulerLock
from creator_program.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)


def try_acquire(db: Session, name: str, holder: str, ttl: timedelta) -> bool:
    """
    Take the named lock if it is free, expired, or already ours.

    Returns True when the caller now holds the lock.
    """
    now = utcnow()
    result = db.execute(
        update(SchedulerLock)
        .where(
            SchedulerLock.name == name,
            or_(SchedulerLock.expires_at <= now, SchedulerLock.holder == holder),
        )
        .values(holder=holder, acquired_at=now, expires_at=now + ttl)
    )
    if result.rowcount:
        db.commit()
        return True

    db.add(SchedulerLock(name=name, holder=holder, acquired_at=now, expires_at=now + ttl))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    return True


def release(db: Session, name: str, holder: str) -> None:
    db.query(SchedulerLock).filter(
        SchedulerLock.name == name,
        SchedulerLock.holder == holder,
    ).delete(synchronize_session=False)
    db.commit()


@contextmanager
def single_flight(
    db: Session,
    name: str,
    holder: str,
    ttl: timedelta,
    busy_message: str | None = None,
) -> Iterator[None]:
    if not try_acquire(db, name, holder, ttl):
        raise Conflict(busy_message or f"{name} already in progress", code="sweep_in_progress")
    logger.info("Acquired scheduler lock %s (holder=%s)", name, holder)
    try:
        yield
    finally:
        db.rollback()
        release(db, name, holder)
