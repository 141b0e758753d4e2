"""
Test configuration and fixtures.

Provides:
- Fresh SQLite schema per test (create_all / drop_all)
- Users, communities and admin directory records
- JWT helpers for user and admin sessions
- HTTPX AsyncClient wired to the test session
"""
import os
import uuid
from typing import AsyncGenerator, Generator

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["TESTING"] = "1"
os.environ.setdefault("INTERNAL_SECRET", "test-internal-secret")
os.environ.setdefault("RESEND_API_KEY", "")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from creator_program.core.deps import get_db, get_sweep_db
from creator_program.core.security import ADMIN_SCOPE, USER_SCOPE, create_session_token
from creator_program.db.base import Base
from creator_program.db.enums import AdminRole
from creator_program.db.models import AdminUser, Community, User
from creator_program.db.session import SessionLocal, engine
from creator_program.main import app
from creator_program.schemas.auth import Caller
from creator_program.schemas.creator_application import ApplicationSubmit, PlatformIn

CSRF_HEADERS = {"X-Requested-With": "XMLHttpRequest"}

VALID_DESCRIPTION = (
    "I stream speedruns of classic platformers three nights a week and teach routing."
)
VALID_BIO = "Speedrunner and routing nerd."


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Session over a freshly created schema; dropped after the test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# =============================================================================
# Factories
# =============================================================================

def make_user(db: Session, **overrides) -> User:
    suffix = uuid.uuid4().hex[:8]
    user = User(
        email=overrides.pop("email", f"user-{suffix}@test.com"),
        username=overrides.pop("username", f"user{suffix}"),
        display_name=overrides.pop("display_name", "Test User"),
        **overrides,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_admin(db: Session, role: AdminRole = AdminRole.ADMIN, **overrides) -> AdminUser:
    suffix = uuid.uuid4().hex[:8]
    admin = AdminUser(
        email=overrides.pop("email", f"admin-{suffix}@test.com"),
        display_name=overrides.pop("display_name", f"Admin {suffix}"),
        role=role.value,
        roles=overrides.pop("roles", []),
        **overrides,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def make_community(db: Session, owner: User, **overrides) -> Community:
    community = Community(
        name=overrides.pop("name", f"Community {uuid.uuid4().hex[:6]}"),
        owner_user_id=owner.id,
        **overrides,
    )
    db.add(community)
    db.commit()
    db.refresh(community)
    return community


def caller_for(admin: AdminUser) -> Caller:
    return Caller(
        id=admin.id,
        roles=admin.role_set,
        email=admin.email,
        display_name=admin.display_name or admin.email,
    )


def application_payload(
    display_name: str = "Speedy Runner",
    follower_count: int = 1200,
    **overrides,
) -> ApplicationSubmit:
    return ApplicationSubmit(
        display_name=display_name,
        primary_platform=overrides.pop("primary_platform", "twitch"),
        platforms=overrides.pop(
            "platforms",
            [
                PlatformIn(
                    type="twitch",
                    url="https://twitch.tv/speedy",
                    handle="speedy",
                    follower_count=follower_count,
                )
            ],
        ),
        description=overrides.pop("description", VALID_DESCRIPTION),
        bio=overrides.pop("bio", VALID_BIO),
    )


def make_creator(db: Session, user: User, owner: AdminUser, display_name: str = "Speedy Runner"):
    """Submit and owner-approve an application; returns the new creator."""
    from creator_program.services import application_service

    application = application_service.submit_application(
        db, user, application_payload(display_name=display_name)
    )
    result = application_service.approve_application(
        db, application.id, caller_for(owner), owner_override=True
    )
    return result.creator


def user_headers(user: User) -> dict:
    token = create_session_token(user.id, user.token_version, scope=USER_SCOPE)
    return {"Authorization": f"Bearer {token}", **CSRF_HEADERS}


def admin_headers(admin: AdminUser) -> dict:
    token = create_session_token(admin.id, admin.token_version, scope=ADMIN_SCOPE)
    return {"Authorization": f"Bearer {token}", **CSRF_HEADERS}


@pytest.fixture
def user(db: Session) -> User:
    return make_user(db)


@pytest.fixture
def admin_a(db: Session) -> AdminUser:
    return make_admin(db, display_name="Alice Admin")


@pytest.fixture
def admin_b(db: Session) -> AdminUser:
    return make_admin(db, display_name="Bob Admin")


@pytest.fixture
def owner(db: Session) -> AdminUser:
    return make_admin(db, role=AdminRole.OWNER, display_name="Olive Owner")


@pytest.fixture
def creator(db: Session, user: User, owner: AdminUser):
    return make_creator(db, user, owner)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient bound to the test session.

    Pass ``headers=user_headers(u)`` or ``headers=admin_headers(a)`` per request.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sweep_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
