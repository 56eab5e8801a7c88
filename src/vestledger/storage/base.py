"""
Storage interface for vestledger.

Schedules and journal entries are plain JSON-able dicts kept in named
collections. Schedule locks live beside them so that every ledger process
sharing a backend also shares its locks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StorageBackend(ABC):
    """
    Persistence used by VestingLedger, TransferJournal and ScheduleLockService.

    A ``save`` replaces the whole document in a single write, so a schedule is
    never observed half-updated.
    """

    @abstractmethod
    async def save(self, collection: str, key: str, data: dict[str, Any]) -> None:
        """Store ``data`` under ``key``, replacing any previous document."""
        ...

    @abstractmethod
    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        """Document stored under ``key``, or None."""
        ...

    @abstractmethod
    async def delete(self, collection: str, key: str) -> bool:
        """Remove ``key``; False if it was not there."""
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        All documents of a collection whose fields equal every filter value.

        Each returned dict carries its key under ``_key``.
        """
        ...

    @abstractmethod
    async def update(self, collection: str, key: str, data: dict[str, Any]) -> bool:
        """Merge ``data`` into an existing document; False if it does not exist."""
        ...

    @abstractmethod
    async def acquire_lock(self, key: str, ttl: int = 30) -> str | None:
        """
        Try to take a lock without waiting.

        Returns:
            Ownership token, or None while another holder's lock is live
        """
        ...

    @abstractmethod
    async def extend_lock(self, key: str, token: str, ttl: int) -> bool:
        """
        Push the expiry of a held lock ``ttl`` seconds into the future.

        Returns:
            False if ``token`` no longer owns the lock
        """
        ...

    @abstractmethod
    async def release_lock(self, key: str, token: str) -> bool:
        """
        Release a lock if ``token`` still owns it.

        Returns:
            False if the lock expired or belongs to another token
        """
        ...


_STORAGE_BACKENDS: dict[str, type[StorageBackend]] = {}


def register_storage_backend(name: str, backend_class: type[StorageBackend]) -> None:
    """Register a storage backend by name."""
    _STORAGE_BACKENDS[name] = backend_class


def get_storage_backend(name: str) -> type[StorageBackend] | None:
    """Get a registered storage backend by name."""
    return _STORAGE_BACKENDS.get(name)


def list_storage_backends() -> list[str]:
    """List all registered storage backend names."""
    return list(_STORAGE_BACKENDS.keys())
