"""
Storage Module - Black Box Interface

Purpose: Abstract all data persistence
Interface: StorageModule.connect(), StorageModule.collection()
Hidden: Redis specifics, connection pooling, serialization, unique indexes

Can be replaced with any storage backend without affecting other modules.
"""

import logging
from typing import Iterable, Optional

import redis.asyncio as redis

from .documents import DocumentStore, MemoryDocumentStore, RedisDocumentStore, new_id
from .errors import DuplicateKeyError, RecordNotFoundError, StorageError

logger = logging.getLogger(__name__)


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, backend: str = "redis", connection_url: Optional[str] = None):
        """
        Initialize storage.

        Args:
            backend: "redis" or "memory"
            connection_url: Redis URL (ignored for the memory backend)
        """
        self.backend = backend
        self.url = connection_url or "redis://localhost:6379/0"
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> Optional[redis.Redis]:
        """Get storage connection (None for the memory backend)."""
        if self.backend == "memory":
            return None
        if not self._client:
            self._client = redis.from_url(self.url, decode_responses=True)
            logger.info(f"Connected document storage to {self.url}")
        return self._client

    def collection(self, name: str, unique: Iterable[str] = ()) -> DocumentStore:
        """Build a document store for one collection."""
        if self.backend == "memory":
            return MemoryDocumentStore(name, unique=unique)
        if not self._client:
            raise RuntimeError("StorageModule.connect() must be awaited first")
        return RedisDocumentStore(self._client, name, unique=unique)

    async def ping(self) -> bool:
        """Check the backend is reachable."""
        if self.backend == "memory":
            return True
        if not self._client:
            return False
        return bool(await self._client.ping())

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.close()
            self._client = None


__all__ = [
    "StorageModule",
    "DocumentStore",
    "MemoryDocumentStore",
    "RedisDocumentStore",
    "StorageError",
    "DuplicateKeyError",
    "RecordNotFoundError",
    "new_id",
]
