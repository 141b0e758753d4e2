"""Rate limiting for the creator program API.

Counters live in Redis when it answers a ping so that every worker shares
them; otherwise they stay in process memory. Under TESTING the limiter is
built disabled.
"""

import logging
import os

import redis
from slowapi import Limiter
from slowapi.util import get_remote_address

from creator_program.core.config import settings

logger = logging.getLogger(__name__)

IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")
DEFAULT_LIMITS = (
    []
    if IS_TESTING or settings.RATE_LIMIT_API <= 0
    else [f"{settings.RATE_LIMIT_API}/minute"]
)

# Self-service write endpoints
APPLICATION_SUBMIT_LIMIT = "10/minute"
FOLLOWER_SYNC_LIMIT = "10/minute"

MEMORY_STORAGE = "memory://"


def _shared_storage_uri() -> str:
    """Redis URI when reachable, in-memory storage otherwise."""
    try:
        redis.from_url(settings.REDIS_URL, socket_connect_timeout=1).ping()
    except (redis.RedisError, ValueError) as e:
        logger.warning("Redis unavailable for rate limiting, using in-memory: %s", e)
        return MEMORY_STORAGE
    return settings.REDIS_URL


def build_limiter() -> Limiter:
    if IS_TESTING:
        return Limiter(
            key_func=get_remote_address,
            storage_uri=MEMORY_STORAGE,
            enabled=False,
            default_limits=DEFAULT_LIMITS,
        )
    return Limiter(
        key_func=get_remote_address,
        storage_uri=_shared_storage_uri(),
        default_limits=DEFAULT_LIMITS,
    )


limiter = build_limiter()
