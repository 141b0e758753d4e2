"""Admin directory enums."""

from enum import Enum


class AdminRole(str, Enum):
    """Roles held in the admin directory."""

    OWNER = "owner"
    ADMIN = "admin"
    MODERATOR = "moderator"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_
