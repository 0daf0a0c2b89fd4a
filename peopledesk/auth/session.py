"""
Session resolution - the "who is this" for each request.

Turns request credentials into a single SessionUser:
1. Verify identity with the auth provider
2. Look up profile and memberships (concurrently)
3. Pick the first membership as the current organization

Store failures degrade to null fields rather than failing the request;
guards decide afterwards whether the missing data matters.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable

from peopledesk.auth.provider import AuthProvider, IdentityError
from peopledesk.auth.roles import MembershipRole, parse_role, UnknownRoleError
from peopledesk.auth.types import (
    Identity,
    SessionUser,
    decode_membership,
    decode_profile,
)
from peopledesk.core.utils import generate_id

if TYPE_CHECKING:
    from peopledesk.storage.directory import DirectoryStore

logger = logging.getLogger(__name__)


# =============================================================================
# Resolver
# =============================================================================


class SessionResolver:
    """
    Builds SessionUser values from provider + directory data.
    
    Stateless; one instance serves every request.
    """
    
    def __init__(self, provider: AuthProvider, directory: DirectoryStore):
        self.provider = provider
        self.directory = directory
    
    async def resolve(self, credentials: str | None) -> SessionUser | None:
        """
        Resolve credentials into a session user.
        
        Returns None when there is no verified identity; in that case the
        directory is never queried. AuthProviderUnavailable propagates.
        """
        try:
            identity = await self.provider.get_current_identity(credentials)
        except IdentityError as e:
            logger.debug(f"No verified identity: {e}")
            return None
        
        profile_raw, memberships_raw = await asyncio.gather(
            self.directory.get_profile(identity.id),
            self.directory.get_memberships(identity.id),
            return_exceptions=True,
        )
        
        return build_session_user(identity, profile_raw, memberships_raw)


def build_session_user(
    identity: Identity,
    profile_raw: Any,
    memberships_raw: Any,
) -> SessionUser:
    """
    Combine identity with raw lookup results.
    
    Either lookup result may be an exception instance (from gather), which
    is treated as "no data".
    """
    full_name = None
    avatar_url = None
    
    if isinstance(profile_raw, BaseException):
        logger.warning(f"Profile lookup failed for {identity.id}: {profile_raw!r}")
    else:
        profile = decode_profile(profile_raw)
        if profile:
            full_name = profile.full_name
            avatar_url = profile.avatar_url
    
    organization_id = None
    role = None
    
    if isinstance(memberships_raw, BaseException):
        logger.warning(f"Membership lookup failed for {identity.id}: {memberships_raw!r}")
    elif memberships_raw:
        # First membership wins; the rest are ignored
        membership = decode_membership(memberships_raw[0])
        if membership:
            organization_id = membership.organization.id
            role = membership.role
        if len(memberships_raw) > 1:
            logger.debug(
                f"{identity.id} has {len(memberships_raw)} memberships, using the first"
            )
    
    return SessionUser(
        id=identity.id,
        email=identity.email,
        full_name=full_name,
        avatar_url=avatar_url,
        current_organization_id=organization_id,
        current_role=role,
    )


# =============================================================================
# Per-request memo
# =============================================================================


class RequestSession:
    """
    Resolves the session at most once for a single request.
    
    The first call to user() starts resolution; later and concurrent calls
    await the same task. Never shared across requests.
    """
    
    def __init__(self, resolver: SessionResolver, credentials: str | None):
        self._resolver = resolver
        self._credentials = credentials
        self._task: asyncio.Task | None = None
    
    @property
    def resolved(self) -> bool:
        return self._task is not None and self._task.done()
    
    async def user(self) -> SessionUser | None:
        if self._task is None:
            self._task = asyncio.ensure_future(self._resolver.resolve(self._credentials))
        return await self._task


# =============================================================================
# Request context
# =============================================================================


@dataclass(frozen=True)
class RequestContext:
    """
    Immutable per-request context handed to every guard.
    
    Built once after resolution completes.
    """
    
    user: SessionUser | None = None
    request_id: str = ""
    
    @classmethod
    async def from_session(
        cls,
        session: RequestSession,
        request_id: str | None = None,
    ) -> RequestContext:
        return cls(user=await session.user(), request_id=request_id or generate_id("req"))
    
    @classmethod
    def anonymous(cls) -> RequestContext:
        return cls(request_id=generate_id("req"))
    
    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
    
    @property
    def current_organization_id(self) -> str | None:
        return self.user.current_organization_id if self.user else None
    
    def has_role(self, role: MembershipRole | str) -> bool:
        """Exact role check, never raises."""
        if self.user is None or self.user.current_role is None:
            return False
        try:
            return self.user.current_role == parse_role(role)
        except UnknownRoleError:
            return False
    
    def has_any_role(self, roles: Iterable[MembershipRole | str]) -> bool:
        return any(self.has_role(r) for r in roles)
