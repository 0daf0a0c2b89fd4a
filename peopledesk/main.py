"""
People desk - main entry point.

Walks through session resolution and the guards against an in-memory
directory, and can be run to verify the installation.

Serve the API with `peopledesk-serve` (or `uvicorn peopledesk.api.app:app`).
"""

from __future__ import annotations

import asyncio

import uvicorn

from peopledesk.auth import (
    JWTAuthProvider,
    MembershipRole,
    RequestContext,
    RequestSession,
    SessionResolver,
    require_user_with_org,
    require_user_with_role,
)
from peopledesk.config import configure_logging, get_settings
from peopledesk.storage import create_local_directory


async def demo():
    """
    Resolve a few users and show what each guard decides.
    """
    configure_logging()
    
    print("=" * 60)
    print("PEOPLE DESK DEMO")
    print("=" * 60)
    print()
    
    directory = create_local_directory()
    provider = JWTAuthProvider()
    resolver = SessionResolver(provider, directory)
    
    acme = await directory.add_organization("Acme Corp")
    await directory.add_profile("user_ana", full_name="Ana Reyes")
    await directory.add_membership("user_ana", acme, MembershipRole.MANAGER, department="Ops")
    await directory.add_profile("user_ben", full_name="Ben Cruz")
    
    tokens = {
        "ana (manager)": provider.create_access_token("user_ana", "ana@example.com"),
        "ben (no org)": provider.create_access_token("user_ben", "ben@example.com"),
        "anonymous": None,
    }
    
    for label, token in tokens.items():
        ctx = await RequestContext.from_session(RequestSession(resolver, token))
        print(f"{label}:")
        print(f"  • session: {ctx.user.to_dict() if ctx.user else None}")
        print(f"  • dashboard: {require_user_with_org(ctx).outcome.value}")
        for role in MembershipRole:
            print(f"  • {role.value} area: {require_user_with_role(ctx, role).outcome.value}")
        print()
    
    print("=" * 60)
    print("Demo complete!")
    print("=" * 60)


def main():
    """Main entry point."""
    asyncio.run(demo())


def serve():
    """Run the API on the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "peopledesk.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
