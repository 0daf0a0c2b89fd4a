# =============================================================================
# Auth Provider
# =============================================================================
#
# The auth provider turns request credentials into a verified Identity.
# Credential checks and token issuance live behind this interface:
#   - AuthProvider     - abstract contract consumed by the session resolver
#   - JWTAuthProvider  - verifies signed access tokens (PyJWT)
#
# =============================================================================

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import timedelta

import jwt

from peopledesk.auth.types import Identity
from peopledesk.config import Settings, get_settings
from peopledesk.core.utils import generate_id, utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================

class IdentityError(Exception):
    """No verified identity for this request."""
    pass


class IdentityMissing(IdentityError):
    """No credentials were presented."""
    pass


class IdentityInvalid(IdentityError):
    """Credentials are invalid or malformed."""
    pass


class IdentityExpired(IdentityInvalid):
    """Credentials have expired."""
    pass


class AuthProviderUnavailable(Exception):
    """The provider itself failed (network, misconfiguration)."""
    pass


# =============================================================================
# Interface
# =============================================================================

class AuthProvider(ABC):
    """
    Source of verified identities.
    
    Implementations may suspend on network I/O.
    """
    
    @abstractmethod
    async def get_current_identity(self, credentials: str | None) -> Identity:
        """
        Verify credentials and return the principal.
        
        Raises:
            IdentityError: verification failed or nothing presented
            AuthProviderUnavailable: the provider could not be reached
        """
        pass


# =============================================================================
# JWT implementation
# =============================================================================

class JWTAuthProvider(AuthProvider):
    """Verifies HMAC-signed access tokens."""
    
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
    
    def create_access_token(self, user_id: str, email: str | None = None) -> str:
        """Create a JWT access token."""
        now = utc_now()
        expire = now + timedelta(minutes=self.settings.jwt_access_token_expire_minutes)
        
        payload = {
            "sub": user_id,
            "exp": expire,
            "iat": now,
            "type": "access",
            "jti": generate_id("tok"),
        }
        if email:
            payload["email"] = email
        
        return jwt.encode(
            payload,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm,
        )
    
    async def get_current_identity(self, credentials: str | None) -> Identity:
        if not credentials:
            raise IdentityMissing("No credentials presented")
        
        try:
            payload = jwt.decode(
                credentials,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise IdentityExpired("Token has expired")
        except jwt.InvalidTokenError as e:
            raise IdentityInvalid(f"Invalid token: {e}")
        
        if payload.get("type") != "access":
            raise IdentityInvalid(f"Expected access token, got {payload.get('type')}")
        
        sub = payload.get("sub")
        if not sub:
            raise IdentityInvalid("Token has no subject")
        
        return Identity(id=sub, email=payload.get("email"))
