"""
Internal endpoints for scheduled/cron operations.

Protected by X-Internal-Secret header.
Call from external cron (Render/Railway/GH Actions).
"""

import hmac
import socket

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from creator_program.core.config import settings
from creator_program.core.deps import get_sweep_db
from creator_program.schemas.creator import SweepResultRead
from creator_program.services import sweep_service


router = APIRouter(prefix="/internal/scheduled", tags=["internal"])


def verify_internal_secret(x_internal_secret: str = Header(...)):
    """Verify the internal secret header."""
    expected = settings.INTERNAL_SECRET
    if not expected:
        raise HTTPException(status_code=501, detail="INTERNAL_SECRET not configured")
    if not hmac.compare_digest(x_internal_secret, expected):
        raise HTTPException(status_code=403, detail="Invalid internal secret")


@router.post(
    "/creator-sweep",
    response_model=SweepResultRead,
    dependencies=[Depends(verify_internal_secret)],
)
def run_creator_sweep(db: Session = Depends(get_sweep_db)):
    """
    Daily follower sweep.

    Starts and clears grace periods, sends final reminders, removes creators
    whose grace period has expired and repairs orphaned subscriptions.
    Returns 409 if another sweep holds the lock.
    """
    result = sweep_service.run_sync_all(db, holder=f"cron@{socket.gethostname()}")
    return SweepResultRead.model_validate(result, from_attributes=True)
