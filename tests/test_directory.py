"""
Tests for the directory store.
"""

import pytest

from peopledesk.auth.roles import MembershipRole
from peopledesk.core.utils import slugify
from peopledesk.storage import Collections, DirectoryStore, InMemoryMetadataStorage


class BrokenMembershipDirectory(DirectoryStore):
    """Membership writes fail."""

    async def add_membership(self, user_id, organization_id, role, department=None):
        raise ConnectionError("membership table unavailable")


@pytest.fixture
def directory():
    return DirectoryStore(InMemoryMetadataStorage())


class TestMemberships:
    @pytest.mark.asyncio
    async def test_joined_in_insertion_order(self, directory):
        await directory.add_organization("First", org_id="O1")
        await directory.add_organization("Second", org_id="O2")
        await directory.add_membership("u1", "O2", MembershipRole.MANAGER)
        await directory.add_membership("u1", "O1", "employee", department="Ops")
        await directory.add_membership("u2", "O1", MembershipRole.HR_ADMIN)

        rows = await directory.get_memberships("u1")

        assert [r["organization_id"] for r in rows] == ["O2", "O1"]
        assert rows[0]["organization"] == {"id": "O2", "name": "Second", "slug": "second"}
        assert rows[1]["role"] == "employee"
        assert rows[1]["department"] == "Ops"

    @pytest.mark.asyncio
    async def test_missing_organization_joins_as_none(self, directory):
        await directory.add_membership("u1", "O_gone", MembershipRole.EMPLOYEE)
        rows = await directory.get_memberships("u1")
        assert rows[0]["organization"] is None

    @pytest.mark.asyncio
    async def test_profile(self, directory):
        assert await directory.get_profile("u1") is None
        await directory.add_profile("u1", full_name="Una")
        assert (await directory.get_profile("u1"))["full_name"] == "Una"


class TestCreateOrganization:
    @pytest.mark.asyncio
    async def test_creator_becomes_hr_admin(self, directory):
        org_id = await directory.create_organization("Acme Corp", owner_id="u1")

        org = await directory.metadata.get(Collections.ORGANIZATIONS, org_id)
        rows = await directory.get_memberships("u1")

        assert org["slug"] == "acme-corp"
        assert len(rows) == 1
        assert rows[0]["organization_id"] == org_id
        assert rows[0]["role"] == "hr_admin"

    @pytest.mark.asyncio
    async def test_failed_membership_rolls_back_organization(self):
        directory = BrokenMembershipDirectory(InMemoryMetadataStorage())

        with pytest.raises(ConnectionError):
            await directory.create_organization("Acme Corp", owner_id="u1")

        assert await directory.metadata.query(Collections.ORGANIZATIONS) == []


class TestSlugify:
    @pytest.mark.parametrize("name, slug", [
        ("Acme Corp", "acme-corp"),
        ("  Acme   Corp. ", "acme-corp"),
        ("R&D / Labs", "r-d-labs"),
        ("!!!", "org"),
    ])
    def test_slugify(self, name, slug):
        assert slugify(name) == slug
