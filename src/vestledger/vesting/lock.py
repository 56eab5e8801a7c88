"""
Schedule Lock Service.

Serializes operations on a single beneficiary's schedule so that a release
and a deletion never read and commit interleaved state. Different
beneficiaries use different lock keys and proceed in parallel.

A held lock is renewed in the background for as long as the holder's block
runs, so a slow transfer cannot outlive the lock's TTL.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from vestledger.core.exceptions import ScheduleLockedError
from vestledger.core.logging import get_logger

if TYPE_CHECKING:
    from vestledger.storage.base import StorageBackend

logger = get_logger("lock")


class ScheduleLease:
    """A schedule lock held by ``hold()``."""

    def __init__(self, beneficiary: str, token: str) -> None:
        self.beneficiary = beneficiary
        self.token = token
        self.lost = False

    def ensure_held(self) -> None:
        """
        Raises:
            ScheduleLockedError: The lock expired and may now belong to someone else
        """
        if self.lost:
            raise ScheduleLockedError(
                "Schedule lock expired while held", beneficiary=self.beneficiary
            )


class ScheduleLockService:
    """
    Service for managing per-beneficiary schedule locks (mutexes).

    Implements a distributed lock pattern using the storage backend.
    """

    def __init__(
        self,
        storage: StorageBackend,
        ttl: int = 30,
        retry_count: int = 3,
        retry_delay: float = 0.1,
    ) -> None:
        """
        Initialize lock service.

        Args:
            storage: Storage backend (Redis/Memory)
            ttl: Lock time-to-live in seconds; renewed every ttl/3 while held
            retry_count: Number of retries if lock is held
            retry_delay: Delay between retries
        """
        self._storage = storage
        self._ttl = ttl
        self._retry_count = retry_count
        self._retry_delay = retry_delay

    @staticmethod
    def lock_key(beneficiary: str) -> str:
        return f"lock:schedule:{beneficiary}"

    async def acquire(
        self,
        beneficiary: str,
        ttl: int | None = None,
        retry_count: int | None = None,
        retry_delay: float | None = None,
    ) -> str | None:
        """
        Acquire the lock for a beneficiary's schedule.

        Returns:
            lock_token (str) if successful, None if failed
        """
        ttl = self._ttl if ttl is None else ttl
        retry_count = self._retry_count if retry_count is None else retry_count
        retry_delay = self._retry_delay if retry_delay is None else retry_delay
        key = self.lock_key(beneficiary)

        for i in range(retry_count + 1):
            token = await self._storage.acquire_lock(key, ttl)
            if token:
                logger.debug(f"Acquired lock for {beneficiary} (token: {token[:8]}...)")
                return token

            if i < retry_count:
                logger.debug(f"Schedule {beneficiary} locked, retrying in {retry_delay}s...")
                await asyncio.sleep(retry_delay)

        logger.warning(f"Failed to acquire lock for {beneficiary} after {retry_count} retries")
        return None

    async def renew(self, beneficiary: str, lock_token: str, ttl: int | None = None) -> bool:
        """Extend a held lock; False if ``lock_token`` no longer owns it."""
        ttl = self._ttl if ttl is None else ttl
        return await self._storage.extend_lock(self.lock_key(beneficiary), lock_token, ttl)

    async def release(self, beneficiary: str, lock_token: str) -> bool:
        """
        Release a previously acquired lock.

        Returns:
            True if released, False if expired or owned by another token
        """
        result = await self._storage.release_lock(self.lock_key(beneficiary), lock_token)
        if result:
            logger.debug(f"Released lock for {beneficiary}")
        else:
            logger.warning(
                f"Lock for {beneficiary} (token: {lock_token[:8]}...) "
                "had already expired or changed owner at release"
            )
        return result

    async def _keep_alive(self, lease: ScheduleLease) -> None:
        interval = self._ttl / 3
        while True:
            await asyncio.sleep(interval)
            if not await self.renew(lease.beneficiary, lease.token):
                lease.lost = True
                logger.error(f"Lost lock for {lease.beneficiary} before the operation finished")
                return

    @asynccontextmanager
    async def hold(self, beneficiary: str) -> AsyncIterator[ScheduleLease]:
        """
        Hold the beneficiary's lock for the duration of the block.

        Raises:
            ScheduleLockedError: If the lock could not be acquired
        """
        token = await self.acquire(beneficiary)
        if token is None:
            raise ScheduleLockedError(
                "Schedule is locked by another operation", beneficiary=beneficiary
            )
        lease = ScheduleLease(beneficiary, token)
        renewer = asyncio.create_task(self._keep_alive(lease))
        try:
            yield lease
        finally:
            renewer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await renewer
            await self.release(beneficiary, token)
