"""Admin directory lookups. The directory is authoritative for admin roles."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from creator_program.db.enums import AdminRole
from creator_program.db.models import AdminUser


def get_admin(db: Session, admin_id: UUID) -> AdminUser | None:
    return db.get(AdminUser, admin_id)


def get_active_admin(db: Session, admin_id: UUID) -> AdminUser | None:
    admin = get_admin(db, admin_id)
    if admin is None or not admin.is_active:
        return None
    return admin


def is_owner(db: Session, admin_id: UUID) -> bool:
    """Current owner membership, read fresh from the directory."""
    admin = get_active_admin(db, admin_id)
    return admin is not None and admin.has_role(AdminRole.OWNER)


def display_name_for(db: Session, admin_id: UUID | None) -> str | None:
    if admin_id is None:
        return None
    admin = get_admin(db, admin_id)
    if admin is None:
        return None
    return admin.display_name or admin.email


def list_active_admins(db: Session) -> list[AdminUser]:
    return (
        db.query(AdminUser)
        .filter(AdminUser.is_active.is_(True))
        .order_by(AdminUser.created_at)
        .all()
    )


def upsert_admin(
    db: Session,
    *,
    email: str,
    display_name: str,
    role: AdminRole,
    extra_roles: list[AdminRole] | None = None,
) -> AdminUser:
    email = email.strip().lower()
    roles = sorted({r.value for r in (extra_roles or [])} - {role.value})
    admin = db.query(AdminUser).filter(AdminUser.email == email).first()
    if admin is None:
        admin = AdminUser(email=email)
        db.add(admin)
    admin.display_name = display_name
    admin.role = role.value
    admin.roles = roles
    admin.is_active = True
    db.commit()
    db.refresh(admin)
    return admin
