"""
People desk - multi-tenant access control for an HR web application.

Resolves each request into a session user (organization + role) and
gates protected routes behind composable guards.
"""

__version__ = "0.1.0"
