"""
Small helpers shared by the directory and the auth layer.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def generate_id(prefix: str) -> str:
    """Prefixed random id, e.g. generate_id("org") -> "org_3f9a0c1b2d4e"."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def slugify(name: str) -> str:
    """
    URL slug for an organization name.
    
    "Acme Corp." -> "acme-corp"; names with nothing usable fall back to "org".
    """
    slug = _SLUG_SEPARATORS.sub("-", name.lower()).strip("-")
    return slug or "org"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
