"""Tests for ScheduleLockService."""

import asyncio

import pytest

from vestledger.core.exceptions import ScheduleLockedError
from vestledger.storage.memory import InMemoryStorage
from vestledger.vesting.lock import ScheduleLockService


@pytest.fixture
def memory_storage():
    """Provides memory storage."""
    return InMemoryStorage()


@pytest.fixture
def lock_service(memory_storage):
    """Provides lock service."""
    return ScheduleLockService(memory_storage, retry_delay=0.05)


@pytest.mark.asyncio
async def test_acquire_and_release_lock(lock_service):
    """Test basic lock acquire and release."""
    lock_token = await lock_service.acquire("alice")
    assert lock_token is not None
    assert isinstance(lock_token, str)

    lock_token_2 = await lock_service.acquire("alice", retry_count=1)
    assert lock_token_2 is None

    assert await lock_service.release("alice", lock_token) is True

    lock_token_3 = await lock_service.acquire("alice")
    assert lock_token_3 is not None
    await lock_service.release("alice", lock_token_3)


@pytest.mark.asyncio
async def test_locks_are_per_beneficiary(lock_service):
    alice = await lock_service.acquire("alice")
    bob = await lock_service.acquire("bob", retry_count=0)

    assert alice is not None
    assert bob is not None


@pytest.mark.asyncio
async def test_lock_ttl(memory_storage):
    """Test that locks expire after TTL."""
    service = ScheduleLockService(memory_storage, ttl=1)

    lock_token = await service.acquire("alice")
    assert lock_token is not None

    assert await service.acquire("alice", retry_count=0) is None

    await asyncio.sleep(1.1)

    lock_token_3 = await service.acquire("alice", retry_count=0)
    assert lock_token_3 is not None

    # The expired holder can no longer release the new holder's lock
    assert await service.release("alice", lock_token) is False


@pytest.mark.asyncio
async def test_retry_mechanism(lock_service):
    """Test that retry mechanism waits and acquires if lock is freed."""
    lock_token = await lock_service.acquire("alice")

    async def delayed_release():
        await asyncio.sleep(0.1)
        await lock_service.release("alice", lock_token)

    task = asyncio.create_task(delayed_release())

    lock_token_2 = await lock_service.acquire("alice", retry_count=10)
    assert lock_token_2 is not None

    await task
    await lock_service.release("alice", lock_token_2)


@pytest.mark.asyncio
async def test_token_ownership(lock_service):
    """Test that a lock cannot be released with a wrong token."""
    lock_token = await lock_service.acquire("alice")

    assert await lock_service.release("alice", "wrong-token") is False
    assert await lock_service.acquire("alice", retry_count=0) is None
    assert await lock_service.release("alice", lock_token) is True


@pytest.mark.asyncio
async def test_hold_releases_on_error(lock_service):
    with pytest.raises(RuntimeError):
        async with lock_service.hold("alice"):
            raise RuntimeError("boom")

    token = await lock_service.acquire("alice", retry_count=0)
    assert token is not None


@pytest.mark.asyncio
async def test_hold_raises_when_contended(memory_storage):
    service = ScheduleLockService(memory_storage, retry_count=0)

    async with service.hold("alice"):
        with pytest.raises(ScheduleLockedError) as exc_info:
            async with service.hold("alice"):
                pass

    assert exc_info.value.beneficiary == "alice"


@pytest.mark.asyncio
async def test_hold_renews_lock_beyond_ttl(memory_storage):
    service = ScheduleLockService(memory_storage, ttl=1, retry_count=0)

    async with service.hold("alice") as lease:
        await asyncio.sleep(1.5)

        assert await service.acquire("alice") is None
        lease.ensure_held()

    assert await service.acquire("alice") is not None


@pytest.mark.asyncio
async def test_lease_reports_lost_lock(memory_storage):
    service = ScheduleLockService(memory_storage, ttl=1, retry_count=0)

    async with service.hold("alice") as lease:
        # Another process forcibly takes over after the lock is dropped
        await memory_storage.release_lock(service.lock_key("alice"), lease.token)
        intruder = await service.acquire("alice")
        assert intruder is not None

        await asyncio.sleep(0.5)

        assert lease.lost is True
        with pytest.raises(ScheduleLockedError, match="expired while held"):
            lease.ensure_held()

    # The intruder's lock survives our exit
    assert await service.acquire("alice") is None


@pytest.mark.asyncio
async def test_renew_requires_ownership(lock_service):
    token = await lock_service.acquire("alice")

    assert await lock_service.renew("alice", token) is True
    assert await lock_service.renew("alice", "wrong-token") is False
