"""
In-memory storage for development and tests.

Works without any external services. Rows keep insertion order.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from peopledesk.storage.base import MetadataStorage


class InMemoryMetadataStorage(MetadataStorage):
    """In-memory document storage."""
    
    def __init__(self):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
    
    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        if collection not in self._data:
            self._data[collection] = {}
        self._data[collection][id] = {
            **data,
            "id": id,
            "_updated_at": datetime.now(timezone.utc).isoformat(),
        }
    
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._data.get(collection, {}).get(id)
        return dict(doc) if doc is not None else None
    
    async def delete(self, collection: str, id: str) -> bool:
        if collection in self._data and id in self._data[collection]:
            del self._data[collection][id]
            return True
        return False
    
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        if collection not in self._data:
            return []
        
        results = list(self._data[collection].values())
        
        if filters:
            results = [
                doc for doc in results
                if all(doc.get(key) == value for key, value in filters.items())
            ]
        
        return [dict(doc) for doc in results[offset:offset + limit]]
