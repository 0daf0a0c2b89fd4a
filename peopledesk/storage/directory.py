"""
Directory store - profiles, organizations and memberships.

Answers point queries by user id. Rows are returned raw; decoding into
typed models happens in the session layer.
"""

from __future__ import annotations

import logging
from typing import Any

from peopledesk.auth.roles import MembershipRole
from peopledesk.core.utils import generate_id, slugify
from peopledesk.storage.base import Collections, MetadataStorage

logger = logging.getLogger(__name__)


class DirectoryStore:
    """Read access (plus onboarding writes) over a MetadataStorage."""
    
    def __init__(self, metadata: MetadataStorage):
        self.metadata = metadata
    
    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    
    async def get_profile(self, user_id: str) -> dict[str, Any] | None:
        """Profile row for a user, or None."""
        return await self.metadata.get(Collections.USER_PROFILES, user_id)
    
    async def get_memberships(self, user_id: str) -> list[dict[str, Any]]:
        """
        Membership rows for a user, each joined with its organization.
        
        Order is whatever the underlying store returns. A membership whose
        organization can't be found carries `organization: None`.
        """
        rows = await self.metadata.query(Collections.MEMBERSHIPS, {"user_id": user_id})
        
        joined = []
        for row in rows:
            org = await self.metadata.get(Collections.ORGANIZATIONS, row.get("organization_id", ""))
            joined.append({
                **row,
                "organization": (
                    {"id": org["id"], "name": org.get("name"), "slug": org.get("slug")}
                    if org else None
                ),
            })
        return joined
    
    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    
    async def add_profile(
        self,
        user_id: str,
        full_name: str | None = None,
        avatar_url: str | None = None,
    ) -> None:
        await self.metadata.save(
            Collections.USER_PROFILES,
            user_id,
            {"full_name": full_name, "avatar_url": avatar_url},
        )
    
    async def add_organization(self, name: str, org_id: str | None = None) -> str:
        org_id = org_id or generate_id("org")
        await self.metadata.save(
            Collections.ORGANIZATIONS,
            org_id,
            {"name": name, "slug": slugify(name)},
        )
        return org_id
    
    async def add_membership(
        self,
        user_id: str,
        organization_id: str,
        role: MembershipRole | str,
        department: str | None = None,
    ) -> str:
        membership_id = generate_id("mem")
        await self.metadata.save(
            Collections.MEMBERSHIPS,
            membership_id,
            {
                "user_id": user_id,
                "organization_id": organization_id,
                "role": role.value if isinstance(role, MembershipRole) else role,
                "department": department,
            },
        )
        return membership_id
    
    async def create_organization(self, name: str, owner_id: str) -> str:
        """
        Create an organization with its creator as hr_admin.
        
        Rolls the organization back if the membership can't be written.
        """
        org_id = await self.add_organization(name)
        try:
            await self.add_membership(owner_id, org_id, MembershipRole.HR_ADMIN)
        except Exception:
            await self.metadata.delete(Collections.ORGANIZATIONS, org_id)
            raise
        
        logger.info(f"Created organization {org_id} for {owner_id}")
        return org_id
