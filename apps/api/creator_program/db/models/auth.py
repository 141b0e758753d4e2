"""Platform accounts: users, communities and the admin directory."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from creator_program.db.base import Base
from creator_program.db.enums import AdminRole
from creator_program.utils.datetime_utils import utcnow


class SubscriptionMixin:
    """
    Subscription sub-structure shared by users and communities.

    Creator program entitlements are projected onto these columns by
    subscription_projector; ``subscription_id`` carries the provenance id.
    """

    subscription_plan: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    subscription_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    subscription_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    subscription_created_at: Mapped[datetime | None] = mapped_column(nullable=True)
    subscription_updated_at: Mapped[datetime | None] = mapped_column(nullable=True)


class User(SubscriptionMixin, Base):
    """A platform account. Applicants and creators are users."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    display_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    token_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )


class Community(SubscriptionMixin, Base):
    """A community owned by a user; eligible for one creator promotion."""

    __tablename__ = "communities"
    __table_args__ = (Index("idx_communities_owner", "owner_user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )


class AdminUser(Base):
    """
    Admin directory record.

    This table is authoritative for admin roles. Role claims carried in
    tokens or request bodies are never trusted for authorization.
    """

    __tablename__ = "admin_users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    role: Mapped[str] = mapped_column(String(50), default=AdminRole.ADMIN.value, nullable=False)
    roles: Mapped[list] = mapped_column(default=list, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    token_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    @property
    def role_set(self) -> frozenset[str]:
        return frozenset([self.role, *(self.roles or [])])

    def has_role(self, role: AdminRole) -> bool:
        return role.value in self.role_set
