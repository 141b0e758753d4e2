"""JWT session tokens for creators and admins."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from creator_program.core.config import settings

USER_SCOPE = "user"
ADMIN_SCOPE = "admin"


def create_session_token(subject_id: UUID, token_version: int = 1, scope: str = USER_SCOPE) -> str:
    """
    Create signed session JWT.

    Always signs with current secret (JWT_SECRET). ``scope`` says whether the
    subject is a platform user or an admin directory record.
    """
    payload = {
        "sub": str(subject_id),
        "scope": scope,
        "token_version": token_version,
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_session_token(token: str) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore
