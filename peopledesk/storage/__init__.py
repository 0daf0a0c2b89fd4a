"""
Storage abstractions.

- MetadataStorage → PostgreSQL in production, in-memory locally
- DirectoryStore  → profile / organization / membership lookups on top
"""

from peopledesk.storage.base import MetadataStorage, Collections
from peopledesk.storage.memory import InMemoryMetadataStorage
from peopledesk.storage.directory import DirectoryStore


def create_local_directory() -> DirectoryStore:
    """Directory backed by in-memory storage."""
    return DirectoryStore(InMemoryMetadataStorage())


__all__ = [
    "MetadataStorage",
    "Collections",
    "InMemoryMetadataStorage",
    "DirectoryStore",
    "create_local_directory",
]
