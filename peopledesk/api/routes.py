# =============================================================================
# Protected Routes
# =============================================================================
#
# Endpoints:
#   GET  /health           - Liveness
#   GET  /me               - Current session (or null)
#   GET  /app/dashboard    - Any member of an organization
#   GET  /app/employee     - employee or higher
#   GET  /app/member       - employee or higher
#   GET  /app/manager      - manager or higher
#   GET  /app/admin        - hr_admin
#   GET  /onboarding       - Signed in, no organization yet
#   POST /onboarding       - Create an organization
#   POST /auth/signout     - Clear session cookie
#
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Form, HTTPException
from fastapi.responses import RedirectResponse
from peopledesk.api.deps import (
    get_app_settings,
    get_directory,
    get_request_context,
    require_org,
    require_role,
    require_user,
)
from peopledesk.auth.roles import MembershipRole
from peopledesk.auth.session import RequestContext
from peopledesk.auth.types import SessionUser
from peopledesk.config import Settings
from peopledesk.storage.directory import DirectoryStore

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Public Endpoints
# =============================================================================

@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/me")
async def me(ctx: RequestContext = Depends(get_request_context)):
    """Current session user, or null when signed out."""
    return {"user": ctx.user.to_dict() if ctx.user else None}


@router.post("/auth/signout")
async def signout(settings: Settings = Depends(get_app_settings)):
    """
    Sign out (client-held tokens should be discarded as well).
    """
    response = RedirectResponse(settings.signin_path, status_code=303)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response


# =============================================================================
# App Areas
# =============================================================================

@router.get("/app/dashboard")
async def dashboard(user: SessionUser = Depends(require_org())):
    """Shared landing page for everyone with an organization."""
    return {"user": user.to_dict()}


@router.get("/app/employee")
async def employee_area(user: SessionUser = Depends(require_role(MembershipRole.EMPLOYEE))):
    return {"area": "employee", "user": user.to_dict()}


@router.get("/app/member")
async def member_area(user: SessionUser = Depends(require_role(MembershipRole.EMPLOYEE))):
    return {"area": "member", "user": user.to_dict()}


@router.get("/app/manager")
async def manager_area(user: SessionUser = Depends(require_role(MembershipRole.MANAGER))):
    return {"area": "manager", "user": user.to_dict()}


@router.get("/app/admin")
async def admin_area(user: SessionUser = Depends(require_role(MembershipRole.HR_ADMIN))):
    return {"area": "admin", "user": user.to_dict()}


# =============================================================================
# Onboarding
# =============================================================================

@router.get("/onboarding")
async def onboarding(
    user: SessionUser = Depends(require_user()),
    settings: Settings = Depends(get_app_settings),
):
    """
    Onboarding page for signed-in users without an organization.
    
    Users who already have one are sent to the dashboard.
    """
    if user.has_organization:
        return RedirectResponse(settings.dashboard_path, status_code=303)
    return {"user": user.to_dict()}


@router.post("/onboarding")
async def create_organization(
    name: str | None = Form(None),
    user: SessionUser = Depends(require_user()),
    settings: Settings = Depends(get_app_settings),
    directory: DirectoryStore = Depends(get_directory),
):
    """
    Create an organization with the current user as hr_admin.
    """
    if user.has_organization:
        return RedirectResponse(settings.dashboard_path, status_code=303)
    
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Organization name is required")
    if len(name) < 2 or len(name) > 100:
        raise HTTPException(
            status_code=400,
            detail="Organization name must be between 2 and 100 characters",
        )
    
    try:
        await directory.create_organization(name, owner_id=user.id)
    except Exception as e:
        logger.error(f"Failed to create organization for {user.id}: {e}")
        raise HTTPException(
            status_code=400,
            detail="Unable to create organization. Please try again.",
        )
    
    # The next request resolves a fresh session with the new membership
    return RedirectResponse(settings.dashboard_path, status_code=303)
