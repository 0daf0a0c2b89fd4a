"""Shared building blocks."""

from peopledesk.core.utils import generate_id, slugify, utc_now

__all__ = ["generate_id", "slugify", "utc_now"]
