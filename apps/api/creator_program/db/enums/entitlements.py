"""Entitlement enums."""

from enum import Enum


class EntitlementTargetType(str, Enum):
    USER = "user"
    COMMUNITY = "community"
