"""
In-process storage.

Default backend for a single ledger process, simulations and tests. Nothing
survives a restart and locks are only visible inside this process.
"""

from __future__ import annotations

import time
import uuid
from copy import deepcopy
from typing import Any

from vestledger.storage.base import StorageBackend, register_storage_backend


class InMemoryStorage(StorageBackend):
    """
    Collections are dicts of deep-copied documents.

    None of the methods await, so each call is atomic within one event loop.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        # lock key -> (token, monotonic expiry)
        self._locks: dict[str, tuple[str, float]] = {}

    def _documents(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    async def save(self, collection: str, key: str, data: dict[str, Any]) -> None:
        self._documents(collection)[key] = deepcopy(data)

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        data = self._documents(collection).get(key)
        return deepcopy(data) if data is not None else None

    async def delete(self, collection: str, key: str) -> bool:
        return self._documents(collection).pop(key, None) is not None

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        filters = filters or {}
        return [
            {**deepcopy(data), "_key": key}
            for key, data in self._documents(collection).items()
            if all(data.get(field) == value for field, value in filters.items())
        ]

    async def update(self, collection: str, key: str, data: dict[str, Any]) -> bool:
        documents = self._documents(collection)
        if key not in documents:
            return False
        documents[key].update(deepcopy(data))
        return True

    def _live_token(self, key: str) -> str | None:
        held = self._locks.get(key)
        if held is None or time.monotonic() >= held[1]:
            return None
        return held[0]

    async def acquire_lock(self, key: str, ttl: int = 30) -> str | None:
        if self._live_token(key) is not None:
            return None
        token = str(uuid.uuid4())
        self._locks[key] = (token, time.monotonic() + ttl)
        return token

    async def extend_lock(self, key: str, token: str, ttl: int) -> bool:
        if self._live_token(key) != token:
            return False
        self._locks[key] = (token, time.monotonic() + ttl)
        return True

    async def release_lock(self, key: str, token: str) -> bool:
        if self._live_token(key) != token:
            return False
        del self._locks[key]
        return True


register_storage_backend("memory", InMemoryStorage)
