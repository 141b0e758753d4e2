"""Caller identity schemas."""

from uuid import UUID

from pydantic import BaseModel

from creator_program.db.enums import AdminRole


class Caller(BaseModel):
    """
    Authenticated admin resolved from the admin directory.

    Roles come from the directory record at request time, never from the
    token or request body.
    """

    id: UUID
    roles: frozenset[str]
    email: str
    display_name: str

    def has_role(self, role: AdminRole) -> bool:
        return role.value in self.roles
