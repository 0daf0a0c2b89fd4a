"""
FastAPI wiring for session resolution and guards.

Just use: `user: SessionUser = Depends(require_role("manager"))`

Design:
- `get_request_context` resolves the session once per request (FastAPI
  caches a dependency for the lifetime of the request)
- the `require_*` factories run a guard against that context
- a denied guard raises GuardDenied, which the app's exception handler
  maps to a redirect or an error response
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from peopledesk.auth import guards
from peopledesk.auth.guards import GuardResult, GuardStage, Outcome
from peopledesk.auth.provider import AuthProviderUnavailable
from peopledesk.auth.roles import MembershipRole
from peopledesk.auth.session import RequestContext, RequestSession, SessionResolver
from peopledesk.auth.types import SessionUser
from peopledesk.config import Settings, get_settings
from peopledesk.storage.directory import DirectoryStore

logger = logging.getLogger(__name__)


# Optional bearer (doesn't fail if no token)
optional_bearer = HTTPBearer(auto_error=False)


class GuardDenied(Exception):
    """Raised at the transport edge when a guard does not allow the request."""
    
    def __init__(self, result: GuardResult):
        super().__init__(result.detail or result.outcome.value)
        self.result = result


# =============================================================================
# App-state accessors
# =============================================================================


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_resolver(request: Request) -> SessionResolver:
    return request.app.state.resolver


def get_directory(request: Request) -> DirectoryStore:
    return request.app.state.directory


# =============================================================================
# Session
# =============================================================================


async def get_credentials(
    request: Request,
    bearer: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    settings: Settings = Depends(get_app_settings),
) -> str | None:
    """Bearer token if present, otherwise the session cookie."""
    if bearer:
        return bearer.credentials
    return request.cookies.get(settings.session_cookie_name)


async def get_request_context(
    request: Request,
    credentials: str | None = Depends(get_credentials),
    resolver: SessionResolver = Depends(get_resolver),
) -> RequestContext:
    """Resolve the session for this request."""
    session = RequestSession(resolver, credentials)
    try:
        return await RequestContext.from_session(session, request.headers.get("x-request-id"))
    except AuthProviderUnavailable as e:
        logger.error(f"Auth provider unavailable: {e}")
        raise GuardDenied(
            GuardResult.deny(Outcome.INTERNAL_ERROR, GuardStage.START, "Auth provider unavailable")
        )


def check(result: GuardResult) -> SessionUser:
    """Return the allowed user or raise GuardDenied."""
    if not result.allowed:
        raise GuardDenied(result)
    return result.user


# =============================================================================
# Guard dependencies
# =============================================================================


def require_user() -> Callable:
    """Any authenticated user, with or without an organization."""
    
    async def dependency(ctx: RequestContext = Depends(get_request_context)) -> SessionUser:
        return check(guards.require_user(ctx))
    
    return dependency


def require_org() -> Callable:
    """Authenticated user with an organization."""
    
    async def dependency(ctx: RequestContext = Depends(get_request_context)) -> SessionUser:
        return check(guards.require_user_with_org(ctx))
    
    return dependency


def require_role(role: MembershipRole | str) -> Callable:
    """Authenticated user with a role at or above `role`."""
    
    async def dependency(ctx: RequestContext = Depends(get_request_context)) -> SessionUser:
        return check(guards.require_user_with_role(ctx, role))
    
    return dependency


def require_exact_role(role: MembershipRole | str) -> Callable:
    """Authenticated user holding exactly `role`."""
    
    async def dependency(ctx: RequestContext = Depends(get_request_context)) -> SessionUser:
        result = guards.require_user_with_org(ctx)
        if result.allowed:
            result = guards.require_role(result.user, role)
        return check(result)
    
    return dependency


def require_any_role(*roles: MembershipRole | str) -> Callable:
    """Authenticated user holding one of `roles`."""
    
    async def dependency(ctx: RequestContext = Depends(get_request_context)) -> SessionUser:
        return check(guards.require_user_with_any_role(ctx, roles))
    
    return dependency


# =============================================================================
# Outcome → response
# =============================================================================


def outcome_to_response(result: GuardResult, settings: Settings) -> Response:
    """Translate a denied guard result into an HTTP response."""
    if result.outcome == Outcome.UNAUTHENTICATED:
        return RedirectResponse(settings.signin_path, status_code=303)
    if result.outcome == Outcome.NO_ORGANIZATION:
        return RedirectResponse(settings.onboarding_path, status_code=303)
    if result.outcome == Outcome.FORBIDDEN:
        return JSONResponse({"detail": "Forbidden"}, status_code=403)
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


async def guard_denied_handler(request: Request, exc: GuardDenied) -> Response:
    return outcome_to_response(exc.result, get_app_settings(request))
