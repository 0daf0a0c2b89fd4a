"""
Membership roles and their hierarchy.

This defines WHO outranks whom, not HOW we check it.
The actual checking happens in guards.py.
"""

from __future__ import annotations

from enum import Enum


class MembershipRole(str, Enum):
    """Role a user holds within their organization."""
    
    EMPLOYEE = "employee"    # Own records only
    MANAGER = "manager"      # Team oversight
    HR_ADMIN = "hr_admin"    # Full organization administration


class UnknownRoleError(ValueError):
    """A role value outside the known hierarchy."""
    pass


# Static ordering, higher value = more privilege
ROLE_HIERARCHY: dict[MembershipRole, int] = {
    MembershipRole.EMPLOYEE: 1,
    MembershipRole.MANAGER: 2,
    MembershipRole.HR_ADMIN: 3,
}


def parse_role(role: MembershipRole | str) -> MembershipRole:
    """Coerce a role value, raising UnknownRoleError if it isn't one."""
    if isinstance(role, MembershipRole):
        return role
    try:
        return MembershipRole(role)
    except ValueError:
        raise UnknownRoleError(f"Unknown role: {role!r}")


def hierarchy_level(role: MembershipRole | str) -> int:
    """Position of a role in the hierarchy (1 = least privileged)."""
    return ROLE_HIERARCHY[parse_role(role)]


def is_at_least(role: MembershipRole | str, required: MembershipRole | str) -> bool:
    """Check whether `role` sits at or above `required`."""
    return hierarchy_level(role) >= hierarchy_level(required)
