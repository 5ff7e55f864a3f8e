"""
Document stores keyed by a generated 24-hex id.

Each store is one collection and declares its unique fields up front, so
uniqueness is enforced at the store boundary rather than by callers.
"""

import asyncio
import copy
import json
import logging
import secrets
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from .errors import DuplicateKeyError, RecordNotFoundError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


def new_id() -> str:
    """Generate a record id (24 lowercase hex characters)."""
    return secrets.token_hex(12)


class DocumentStore(Protocol):
    """Protocol for a single collection of JSON documents."""

    collection: str
    unique: Tuple[str, ...]

    async def insert(self, doc: Document) -> Document:
        ...

    async def get(self, record_id: str) -> Optional[Document]:
        ...

    async def find_one(self, field: str, value: Any) -> Optional[Document]:
        ...

    async def list(self) -> List[Document]:
        ...

    async def update(self, record_id: str, changes: Document) -> Document:
        ...

    async def delete(self, record_id: str) -> None:
        ...


class MemoryDocumentStore:
    """
    In-memory document store with unique-index maps.

    A single asyncio lock serialises writes so index claims and document
    writes happen together.
    """

    def __init__(self, collection: str, unique: Iterable[str] = ()):
        self.collection = collection
        self.unique = tuple(unique)
        self._docs: Dict[str, Document] = {}
        self._indexes: Dict[str, Dict[Any, str]] = {field: {} for field in self.unique}
        self._lock = asyncio.Lock()

    async def insert(self, doc: Document) -> Document:
        async with self._lock:
            record = copy.deepcopy(doc)
            record.setdefault("_id", new_id())
            record_id = record["_id"]

            for field in self.unique:
                self._check_unique(field, record.get(field), record_id)
            for field in self.unique:
                self._indexes[field][record.get(field)] = record_id

            self._docs[record_id] = record
            return copy.deepcopy(record)

    async def get(self, record_id: str) -> Optional[Document]:
        doc = self._docs.get(record_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find_one(self, field: str, value: Any) -> Optional[Document]:
        if field in self._indexes:
            record_id = self._indexes[field].get(value)
            return await self.get(record_id) if record_id else None

        for doc in self._docs.values():
            if doc.get(field) == value:
                return copy.deepcopy(doc)
        return None

    async def list(self) -> List[Document]:
        return [copy.deepcopy(doc) for doc in self._docs.values()]

    async def update(self, record_id: str, changes: Document) -> Document:
        async with self._lock:
            current = self._docs.get(record_id)
            if current is None:
                raise RecordNotFoundError(self.collection, record_id)

            changed = [
                f for f in self.unique if f in changes and changes[f] != current.get(f)
            ]
            for field in changed:
                self._check_unique(field, changes[field], record_id)
            for field in changed:
                self._indexes[field].pop(current.get(field), None)
                self._indexes[field][changes[field]] = record_id

            current.update(copy.deepcopy(changes))
            current["_id"] = record_id
            return copy.deepcopy(current)

    async def delete(self, record_id: str) -> None:
        async with self._lock:
            doc = self._docs.pop(record_id, None)
            if doc is None:
                raise RecordNotFoundError(self.collection, record_id)
            for field in self.unique:
                self._indexes[field].pop(doc.get(field), None)

    def _check_unique(self, field: str, value: Any, record_id: str) -> None:
        owner = self._indexes[field].get(value)
        if owner is not None and owner != record_id:
            raise DuplicateKeyError(self.collection, field, str(value))


class RedisDocumentStore:
    """
    Redis-backed document store.

    Keys:
    - {collection}:doc:{id}            JSON document
    - {collection}:ids                 set of ids
    - {collection}:unique:{field}:{v}  id owning a unique value (SET NX)
    """

    def __init__(self, redis_client, collection: str, unique: Iterable[str] = ()):
        """
        Initialize document store.

        Args:
            redis_client: Async Redis client (decode_responses=True)
            collection: Collection name used as key prefix
            unique: Fields that must hold distinct values across the collection
        """
        self.redis = redis_client
        self.collection = collection
        self.unique = tuple(unique)

    def _doc_key(self, record_id: str) -> str:
        return f"{self.collection}:doc:{record_id}"

    def _ids_key(self) -> str:
        return f"{self.collection}:ids"

    def _unique_key(self, field: str, value: Any) -> str:
        return f"{self.collection}:unique:{field}:{value}"

    async def _claim_all(self, values: Dict[str, Any], record_id: str) -> None:
        """Claim every unique value for record_id, releasing partial claims on conflict."""
        claimed = []
        for field, value in values.items():
            key = self._unique_key(field, value)
            if not await self.redis.set(key, record_id, nx=True):
                owner = await self.redis.get(key)
                if owner != record_id:
                    if claimed:
                        await self.redis.delete(*claimed)
                    raise DuplicateKeyError(self.collection, field, str(value))
                continue
            claimed.append(key)

    async def insert(self, doc: Document) -> Document:
        record = dict(doc)
        record.setdefault("_id", new_id())
        record_id = record["_id"]

        await self._claim_all({f: record.get(f) for f in self.unique}, record_id)

        await self.redis.set(self._doc_key(record_id), json.dumps(record))
        await self.redis.sadd(self._ids_key(), record_id)
        return record

    async def get(self, record_id: str) -> Optional[Document]:
        data = await self.redis.get(self._doc_key(record_id))
        if data:
            return json.loads(data)
        return None

    async def find_one(self, field: str, value: Any) -> Optional[Document]:
        if field in self.unique:
            record_id = await self.redis.get(self._unique_key(field, value))
            return await self.get(record_id) if record_id else None

        for doc in await self.list():
            if doc.get(field) == value:
                return doc
        return None

    async def list(self) -> List[Document]:
        ids = sorted(await self.redis.smembers(self._ids_key()))
        if not ids:
            return []
        raw = await self.redis.mget([self._doc_key(i) for i in ids])
        return [json.loads(item) for item in raw if item]

    async def update(self, record_id: str, changes: Document) -> Document:
        current = await self.get(record_id)
        if current is None:
            raise RecordNotFoundError(self.collection, record_id)

        changed = {
            f: changes[f]
            for f in self.unique
            if f in changes and changes[f] != current.get(f)
        }
        await self._claim_all(changed, record_id)
        stale = [self._unique_key(f, current.get(f)) for f in changed]
        if stale:
            await self.redis.delete(*stale)

        current.update(changes)
        current["_id"] = record_id
        await self.redis.set(self._doc_key(record_id), json.dumps(current))
        return current

    async def delete(self, record_id: str) -> None:
        current = await self.get(record_id)
        if current is None:
            raise RecordNotFoundError(self.collection, record_id)

        keys = [self._unique_key(f, current.get(f)) for f in self.unique]
        await self.redis.delete(self._doc_key(record_id), *keys)
        await self.redis.srem(self._ids_key(), record_id)
        logger.debug(f"Deleted {self.collection} record {record_id}")
