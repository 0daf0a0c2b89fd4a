"""
Tests for the guard engine.

Guards are pure: build a context, call the guard, inspect the result.
"""

import pytest

from peopledesk.auth.guards import (
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
from peopledesk.auth.roles import ROLE_HIERARCHY, MembershipRole
from peopledesk.auth.session import RequestContext
from peopledesk.auth.types import SessionUser


# =============================================================================
# Fixtures
# =============================================================================


def member(role: MembershipRole, org: str = "O1") -> SessionUser:
    return SessionUser(id="u1", current_organization_id=org, current_role=role)


@pytest.fixture
def no_org_user():
    """Signed in, no membership."""
    return SessionUser(id="u1", email="u1@example.com")


@pytest.fixture
def manager():
    return member(MembershipRole.MANAGER)


@pytest.fixture
def anonymous():
    return RequestContext.anonymous()


# =============================================================================
# Primitives
# =============================================================================


class TestRequireUser:
    def test_anonymous(self, anonymous):
        result = require_user(anonymous)
        assert result.outcome == Outcome.UNAUTHENTICATED
        assert result.user is None
        assert not result.allowed

    def test_signed_in(self, no_org_user):
        result = require_user(RequestContext(user=no_org_user))
        assert result.allowed
        assert result.user is no_org_user
        assert result.stage == GuardStage.AUTH_CHECKED


class TestRequireOrg:
    def test_no_org(self, no_org_user):
        assert require_org(no_org_user).outcome == Outcome.NO_ORGANIZATION

    def test_with_org(self, manager):
        result = require_org(manager)
        assert result.allowed
        assert result.stage == GuardStage.ORG_CHECKED


class TestRequireRole:
    def test_exact_match(self, manager):
        assert require_role(manager, "manager").allowed

    def test_higher_role_is_not_enough(self):
        # Exact variant ignores the hierarchy
        assert require_role(member(MembershipRole.HR_ADMIN), "manager").outcome == Outcome.FORBIDDEN

    def test_lower_role(self, manager):
        assert require_role(manager, MembershipRole.EMPLOYEE).outcome == Outcome.FORBIDDEN

    def test_no_org(self, no_org_user):
        assert require_role(no_org_user, "employee").outcome == Outcome.NO_ORGANIZATION

    def test_unknown_role(self, manager):
        assert require_role(manager, "owner").outcome == Outcome.INTERNAL_ERROR


class TestRequireRoleOrHigher:
    @pytest.mark.parametrize("held", list(MembershipRole))
    @pytest.mark.parametrize("required", list(MembershipRole))
    def test_monotonic(self, held, required):
        result = require_role_or_higher(member(held), required)
        assert result.allowed == (ROLE_HIERARCHY[held] >= ROLE_HIERARCHY[required])
        if not result.allowed:
            assert result.outcome == Outcome.FORBIDDEN

    def test_manager_scenario(self, manager):
        assert require_role_or_higher(manager, "employee").allowed
        assert require_role_or_higher(manager, "manager").allowed
        assert require_role_or_higher(manager, "hr_admin").outcome == Outcome.FORBIDDEN
        assert require_role(manager, "employee").outcome == Outcome.FORBIDDEN

    def test_unknown_role_never_allows(self):
        result = require_role_or_higher(member(MembershipRole.HR_ADMIN), "superuser")
        assert result.outcome == Outcome.INTERNAL_ERROR
        assert result.user is None

    @pytest.mark.parametrize("required", ["employee", "manager", "hr_admin", "superuser"])
    def test_no_org_wins_over_role(self, no_org_user, required):
        assert require_role_or_higher(no_org_user, required).outcome == Outcome.NO_ORGANIZATION


class TestRequireAnyRole:
    def test_member_of_set(self, manager):
        assert require_any_role(manager, ["employee", "manager"]).allowed

    def test_not_in_set(self, manager):
        result = require_any_role(manager, [MembershipRole.HR_ADMIN])
        assert result.outcome == Outcome.FORBIDDEN

    def test_empty_set(self, manager):
        assert require_any_role(manager, []).outcome == Outcome.FORBIDDEN

    def test_no_org(self, no_org_user):
        assert require_any_role(no_org_user, list(MembershipRole)).outcome == Outcome.NO_ORGANIZATION

    def test_unknown_role_in_set(self, manager):
        assert require_any_role(manager, ["manager", "owner"]).outcome == Outcome.INTERNAL_ERROR


# =============================================================================
# Composites
# =============================================================================


class TestComposites:
    @pytest.mark.parametrize("guard, args", [
        (require_user_with_org, ()),
        (require_user_with_role, ("employee",)),
        (require_user_with_any_role, (["employee"],)),
    ])
    def test_anonymous_is_unauthenticated(self, anonymous, guard, args):
        result = guard(anonymous, *args)
        assert result.outcome == Outcome.UNAUTHENTICATED
        assert result.stage == GuardStage.START

    @pytest.mark.parametrize("guard, args", [
        (require_user_with_org, ()),
        (require_user_with_role, ("hr_admin",)),
        (require_user_with_any_role, (["hr_admin"],)),
    ])
    def test_no_org_short_circuits(self, no_org_user, guard, args):
        result = guard(RequestContext(user=no_org_user), *args)
        assert result.outcome == Outcome.NO_ORGANIZATION
        assert result.stage == GuardStage.AUTH_CHECKED

    def test_with_org(self, manager):
        result = require_user_with_org(RequestContext(user=manager))
        assert result.allowed
        assert result.user is manager

    def test_with_role_is_hierarchical(self):
        ctx = RequestContext(user=member(MembershipRole.HR_ADMIN))
        for role in MembershipRole:
            result = require_user_with_role(ctx, role)
            assert result.allowed
            assert result.stage == GuardStage.ALLOWED

    def test_with_role_forbidden(self, manager):
        result = require_user_with_role(RequestContext(user=manager), "hr_admin")
        assert result.outcome == Outcome.FORBIDDEN
        assert result.stage == GuardStage.ORG_CHECKED

    def test_first_membership_scenario(self):
        # Resolved from (O1, employee) then (O2, hr_admin): only the first counts
        ctx = RequestContext(user=member(MembershipRole.EMPLOYEE, org="O1"))
        assert require_user_with_role(ctx, "hr_admin").outcome == Outcome.FORBIDDEN

    def test_with_any_role(self, manager):
        ctx = RequestContext(user=manager)
        assert require_user_with_any_role(ctx, ["manager", "hr_admin"]).allowed
        assert require_user_with_any_role(ctx, ["employee"]).outcome == Outcome.FORBIDDEN
