"""
Guards - the single source of truth for auth / org / role checks.

Every guard returns a GuardResult instead of raising. Checks run in a
fixed order (auth → org → role) and stop at the first failure, so a
user without an organization never learns what role a route wants.

The transport layer (peopledesk.api.deps) turns non-allowed results
into redirects or error responses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from peopledesk.auth.roles import (
    MembershipRole,
    UnknownRoleError,
    hierarchy_level,
    parse_role,
)
from peopledesk.auth.session import RequestContext
from peopledesk.auth.types import SessionUser

logger = logging.getLogger(__name__)


# =============================================================================
# Result types
# =============================================================================


class Outcome(str, Enum):
    ALLOWED = "allowed"
    UNAUTHENTICATED = "unauthenticated"    # → sign in
    NO_ORGANIZATION = "no_organization"    # → onboarding
    FORBIDDEN = "forbidden"                # → 403
    INTERNAL_ERROR = "internal_error"      # → 500


class GuardStage(str, Enum):
    """Last check a guard evaluation got through."""
    START = "start"
    AUTH_CHECKED = "auth_checked"
    ORG_CHECKED = "org_checked"
    ROLE_CHECKED = "role_checked"
    ALLOWED = "allowed"


@dataclass(frozen=True)
class GuardResult:
    """Either an allowed SessionUser or a denial outcome, never both."""
    
    outcome: Outcome
    user: SessionUser | None = None
    stage: GuardStage = GuardStage.START
    detail: str | None = None
    
    @property
    def allowed(self) -> bool:
        return self.outcome == Outcome.ALLOWED
    
    @classmethod
    def allow(cls, user: SessionUser, stage: GuardStage = GuardStage.ALLOWED) -> GuardResult:
        return cls(outcome=Outcome.ALLOWED, user=user, stage=stage)
    
    @classmethod
    def deny(
        cls,
        outcome: Outcome,
        stage: GuardStage,
        detail: str | None = None,
    ) -> GuardResult:
        logger.debug(f"Guard denied at {stage.value}: {outcome.value} ({detail})")
        return cls(outcome=outcome, stage=stage, detail=detail)


# =============================================================================
# Primitives
# =============================================================================


def require_user(ctx: RequestContext) -> GuardResult:
    """Require an authenticated user."""
    if ctx.user is None:
        return GuardResult.deny(Outcome.UNAUTHENTICATED, GuardStage.START, "Authentication required")
    return GuardResult.allow(ctx.user, GuardStage.AUTH_CHECKED)


def require_org(user: SessionUser) -> GuardResult:
    """Require the user to belong to an organization."""
    if user.current_organization_id is None:
        return GuardResult.deny(
            Outcome.NO_ORGANIZATION, GuardStage.AUTH_CHECKED, "Organization required"
        )
    return GuardResult.allow(user, GuardStage.ORG_CHECKED)


def _require_membership(user: SessionUser) -> GuardResult | None:
    """Org/role presence check shared by the role guards."""
    if user.current_organization_id is None or user.current_role is None:
        return GuardResult.deny(
            Outcome.NO_ORGANIZATION, GuardStage.AUTH_CHECKED, "Organization required"
        )
    return None


def require_role(user: SessionUser, required_role: MembershipRole | str) -> GuardResult:
    """Require exactly this role, ignoring the hierarchy."""
    denied = _require_membership(user)
    if denied:
        return denied
    
    try:
        required = parse_role(required_role)
    except UnknownRoleError as e:
        logger.error(f"Guard configured with {e}")
        return GuardResult.deny(Outcome.INTERNAL_ERROR, GuardStage.ORG_CHECKED, str(e))
    
    if user.current_role != required:
        return GuardResult.deny(
            Outcome.FORBIDDEN, GuardStage.ORG_CHECKED, f"Requires {required.value} role"
        )
    return GuardResult.allow(user)


def require_role_or_higher(user: SessionUser, required_role: MembershipRole | str) -> GuardResult:
    """
    Require a role at or above `required_role`.
    
    hr_admin passes a manager check, manager passes an employee check, etc.
    """
    denied = _require_membership(user)
    if denied:
        return denied
    
    try:
        user_level = hierarchy_level(user.current_role)
        min_level = hierarchy_level(required_role)
    except UnknownRoleError as e:
        logger.error(f"Role outside hierarchy: {e}")
        return GuardResult.deny(Outcome.INTERNAL_ERROR, GuardStage.ORG_CHECKED, str(e))
    
    if user_level < min_level:
        return GuardResult.deny(
            Outcome.FORBIDDEN,
            GuardStage.ORG_CHECKED,
            f"Requires {parse_role(required_role).value} role or higher",
        )
    return GuardResult.allow(user)


def require_any_role(
    user: SessionUser,
    allowed_roles: Iterable[MembershipRole | str],
) -> GuardResult:
    """Require one of the listed roles (exact match)."""
    denied = _require_membership(user)
    if denied:
        return denied
    
    try:
        allowed = {parse_role(r) for r in allowed_roles}
    except UnknownRoleError as e:
        logger.error(f"Guard configured with {e}")
        return GuardResult.deny(Outcome.INTERNAL_ERROR, GuardStage.ORG_CHECKED, str(e))
    
    if user.current_role not in allowed:
        return GuardResult.deny(
            Outcome.FORBIDDEN,
            GuardStage.ORG_CHECKED,
            f"Requires one of: {sorted(r.value for r in allowed)}",
        )
    return GuardResult.allow(user)


# =============================================================================
# Composites
# =============================================================================


def require_user_with_org(ctx: RequestContext) -> GuardResult:
    """Authenticated user with an organization."""
    result = require_user(ctx)
    if not result.allowed:
        return result
    return require_org(result.user)


def require_user_with_role(
    ctx: RequestContext,
    required_role: MembershipRole | str,
) -> GuardResult:
    """Authenticated user with an organization and a role at or above `required_role`."""
    result = require_user_with_org(ctx)
    if not result.allowed:
        return result
    return require_role_or_higher(result.user, required_role)


def require_user_with_any_role(
    ctx: RequestContext,
    allowed_roles: Iterable[MembershipRole | str],
) -> GuardResult:
    """Authenticated user with an organization and one of the listed roles."""
    result = require_user_with_org(ctx)
    if not result.allowed:
        return result
    return require_any_role(result.user, allowed_roles)
