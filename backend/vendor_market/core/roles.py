"""Role hierarchy shared by the API guards and the page guard."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    VENDOR = "vendor"
    ORGANIZER = "organizer"
    ADMIN = "admin"


# Higher number = more permissions
ROLE_HIERARCHY: dict[Role, int] = {
    Role.VENDOR: 0,
    Role.ORGANIZER: 1,
    Role.ADMIN: 2,
}


def has_minimum_role(user_role: Role | str, required_role: Role | str) -> bool:
    """
    Check if a user's role meets the minimum required role level.

    has_minimum_role("admin", "organizer")     -> True
    has_minimum_role("vendor", "organizer")    -> False
    has_minimum_role("organizer", "organizer") -> True
    """
    return ROLE_HIERARCHY[Role(user_role)] >= ROLE_HIERARCHY[Role(required_role)]


def home_path_for(role: Role | str) -> str:
    """Landing page after sign-in for the given role."""
    if has_minimum_role(role, Role.ORGANIZER):
        return "/dashboard"
    return "/vendor"
