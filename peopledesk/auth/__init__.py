"""
Access control - session resolution plus authorization guards.

Design principles:
1. Resolve the session once per request, pass it explicitly
2. Guards return results; transport decides redirect vs error
3. Role checks follow a fixed hierarchy (employee < manager < hr_admin)
4. Missing data degrades to "no organization", never to access
"""

from peopledesk.auth.roles import (
    MembershipRole,
    ROLE_HIERARCHY,
    UnknownRoleError,
    hierarchy_level,
    is_at_least,
)
from peopledesk.auth.types import (
    Identity,
    MembershipRow,
    OrganizationRow,
    ProfileRow,
    SessionUser,
    decode_membership,
    decode_profile,
)
from peopledesk.auth.provider import (
    AuthProvider,
    AuthProviderUnavailable,
    IdentityError,
    IdentityExpired,
    IdentityInvalid,
    IdentityMissing,
    JWTAuthProvider,
)
from peopledesk.auth.session import (
    RequestContext,
    RequestSession,
    SessionResolver,
)
from peopledesk.auth.guards import (
    GuardResult,
    GuardStage,
    Outcome,
    require_any_role,
    require_org,
    require_role,
    require_role_or_higher,
    require_user,
    require_user_with_any_role,
    require_user_with_org,
    require_user_with_role,
)

__all__ = [
    # Roles
    "MembershipRole",
    "ROLE_HIERARCHY",
    "UnknownRoleError",
    "hierarchy_level",
    "is_at_least",
    # Types
    "Identity",
    "MembershipRow",
    "OrganizationRow",
    "ProfileRow",
    "SessionUser",
    "decode_membership",
    "decode_profile",
    # Provider
    "AuthProvider",
    "AuthProviderUnavailable",
    "IdentityError",
    "IdentityExpired",
    "IdentityInvalid",
    "IdentityMissing",
    "JWTAuthProvider",
    # Session
    "RequestContext",
    "RequestSession",
    "SessionResolver",
    # Guards
    "GuardResult",
    "GuardStage",
    "Outcome",
    "require_any_role",
    "require_org",
    "require_role",
    "require_role_or_higher",
    "require_user",
    "require_user_with_any_role",
    "require_user_with_org",
    "require_user_with_role",
]
