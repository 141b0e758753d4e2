"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator
from uuid import UUID

import jwt
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from creator_program.core.exceptions import Forbidden, Unauthorized
from creator_program.core.security import ADMIN_SCOPE, USER_SCOPE, decode_session_token
from creator_program.db.session import SessionLocal, sweep_session


# Cookie and header names
COOKIE_NAME = "cp_session"
ADMIN_COOKIE_NAME = "cp_admin_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_sweep_db() -> Generator[Session, None, None]:
    """Session for the sweep endpoints, running under the sweep deadline."""
    with sweep_session() as db:
        yield db


def _read_token(request: Request, cookie_name: str) -> str:
    token = request.cookies.get(cookie_name)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    raise Unauthorized("not authenticated")


def _decode(token: str, scope: str) -> dict:
    try:
        payload = decode_session_token(token)
        payload["sub"] = UUID(str(payload["sub"]))
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise Unauthorized("invalid session", code="invalid_session")
    if payload.get("scope") != scope:
        raise Unauthorized("invalid session", code="invalid_session")
    return payload


def get_current_user(request: Request, db: Session = Depends(get_db)):
    """
    Get authenticated platform user from session cookie or bearer token.

    Validates:
    - Token exists and is a user session
    - JWT is valid and not expired
    - User exists and is active
    - Token version matches (for revocation support)

    Raises:
        Unauthorized: Authentication failed
    """
    # Import here to avoid circular imports
    from creator_program.db.models import User

    payload = _decode(_read_token(request, COOKIE_NAME), USER_SCOPE)

    user = db.get(User, payload["sub"])
    if not user:
        raise Unauthorized("user not found")
    if not user.is_active:
        raise Unauthorized("account disabled", code="account_disabled")

    # Token version check (revocation support)
    if user.token_version != payload.get("token_version"):
        raise Unauthorized("session revoked", code="session_revoked")

    request.state.user_id = user.id
    return user


def get_current_admin(request: Request, db: Session = Depends(get_db)):
    """
    Resolve the calling admin as a typed Caller.

    Roles are read from the admin directory on every request; the token only
    carries the directory id.

    Raises:
        Unauthorized: Missing or invalid token
        Forbidden: Unknown, disabled or role-less admin
    """
    from creator_program.db.enums import AdminRole
    from creator_program.schemas.auth import Caller
    from creator_program.services import admin_directory_service

    payload = _decode(_read_token(request, ADMIN_COOKIE_NAME), ADMIN_SCOPE)

    admin = admin_directory_service.get_active_admin(db, payload["sub"])
    if admin is None:
        raise Forbidden("admin access required", code="admin_required")
    if admin.token_version != payload.get("token_version"):
        raise Unauthorized("session revoked", code="session_revoked")

    roles = frozenset(r for r in admin.role_set if AdminRole.has_value(r))
    if not roles:
        raise Forbidden(f"unknown role '{admin.role}'", code="admin_required")

    request.state.admin_id = admin.id
    return Caller(
        id=admin.id,
        roles=roles,
        email=admin.email,
        display_name=admin.display_name or admin.email,
    )


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PATCH, DELETE).

    Raises:
        Forbidden: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise Forbidden(
            f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'",
            code="csrf_required",
        )
