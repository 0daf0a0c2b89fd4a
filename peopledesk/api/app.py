"""
FastAPI application for the people desk.

Wires the auth provider, directory and session resolver into app state
and maps guard denials to redirects or error responses.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from peopledesk import __version__
from peopledesk.api.deps import GuardDenied, guard_denied_handler
from peopledesk.api.routes import router
from peopledesk.auth.provider import AuthProvider, JWTAuthProvider
from peopledesk.auth.session import SessionResolver
from peopledesk.config import Settings, configure_logging, get_settings
from peopledesk.storage import DirectoryStore, create_local_directory

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and announce startup."""
    settings: Settings = app.state.settings
    configure_logging(settings)
    logger.info(f"People desk API starting in {settings.environment} mode")
    
    yield
    
    logger.info("People desk API shutting down")


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    provider: AuthProvider | None = None,
    directory: DirectoryStore | None = None,
) -> FastAPI:
    """Build the application; collaborators default to local implementations."""
    settings = settings or get_settings()
    provider = provider or JWTAuthProvider(settings)
    directory = directory or create_local_directory()
    
    app = FastAPI(
        title="People Desk API",
        description="Organization-scoped, role-based access for HR workflows",
        version=__version__,
        lifespan=lifespan,
    )
    
    app.state.settings = settings
    app.state.provider = provider
    app.state.directory = directory
    app.state.resolver = SessionResolver(provider, directory)
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    app.add_exception_handler(GuardDenied, guard_denied_handler)
    app.include_router(router)
    
    return app


app = create_app()
