"""
Session data model.

Rows coming out of the directory are decoded here into typed models,
so nothing downstream ever inspects raw dicts.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from peopledesk.auth.roles import MembershipRole

logger = logging.getLogger(__name__)


# =============================================================================
# Directory rows
# =============================================================================


class ProfileRow(BaseModel):
    """User profile (zero or one per principal)."""
    full_name: str | None = None
    avatar_url: str | None = None


class OrganizationRow(BaseModel):
    id: str
    name: str
    slug: str


class MembershipRow(BaseModel):
    """Membership joined with its organization."""
    id: str
    user_id: str
    organization_id: str
    role: MembershipRole
    department: str | None = None
    organization: OrganizationRow


def decode_profile(raw: Any) -> ProfileRow | None:
    """Decode a raw profile row; None if absent or malformed."""
    if raw is None:
        return None
    try:
        return ProfileRow.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Malformed profile row: {e}")
        return None


def decode_membership(raw: Any) -> MembershipRow | None:
    """Decode a raw membership row; None if the row or its organization join is malformed."""
    try:
        return MembershipRow.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Malformed membership row: {e}")
        return None


# =============================================================================
# Identity & session
# =============================================================================


@dataclass(frozen=True)
class Identity:
    """Verified principal returned by the auth provider."""
    id: str
    email: str | None = None


@dataclass(frozen=True)
class SessionUser:
    """
    The canonical user for one request.
    
    Organization and role always travel together: both set or both None.
    """
    
    id: str
    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    current_organization_id: str | None = None
    current_role: MembershipRole | None = None
    
    def __post_init__(self):
        if (self.current_organization_id is None) != (self.current_role is None):
            raise ValueError(
                "current_organization_id and current_role must both be set or both be None"
            )
    
    @property
    def has_organization(self) -> bool:
        return self.current_organization_id is not None
    
    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.current_role is not None:
            data["current_role"] = self.current_role.value
        return data
