"""
vestledger - Per-beneficiary linear token vesting ledger.

Tracks, for each beneficiary, an entitlement that unlocks linearly between a
start and end time, with pause/resume and early termination with claw-back.

Usage:
    >>> from vestledger import VestingClient, Config, InMemoryAssetTransfer
    >>>
    >>> custody = InMemoryAssetTransfer()
    >>> custody.fund_custody("TOKEN", 1000)
    >>> client = VestingClient(Config(), transfer=custody, administrators=["admin"])
    >>> await client.add_vesting_schedule("admin", "alice", "TOKEN", 1000, t0, t1)
    >>> released = await client.vest("alice")
"""

from vestledger.access import AccessControl, StaticAccessControl
from vestledger.client import VestingClient
from vestledger.core.clock import Clock, ManualClock, MonotonicClock, SystemClock
from vestledger.core.config import Config
from vestledger.core.exceptions import (
    AlreadyExistsError,
    ConfigurationError,
    InvalidRangeError,
    NoScheduleError,
    PausedError,
    PauseStateUnchangedError,
    ScheduleError,
    ScheduleLockedError,
    TransferFailedError,
    TransferPendingError,
    UnauthorizedError,
    ValidationError,
    VestingError,
)
from vestledger.core.logging import configure_logging, get_logger
from vestledger.core.types import ScheduleState, SettlementResult, TransferResult, VestingRecord
from vestledger.storage import InMemoryStorage, RedisStorage, StorageBackend, get_storage
from vestledger.transfer import AssetTransfer, HttpAssetTransfer, InMemoryAssetTransfer
from vestledger.vesting import (
    JournalEntry,
    JournalEntryKind,
    JournalEntryStatus,
    ScheduleLease,
    ScheduleLockService,
    TransferJournal,
    VestingLedger,
    releasable_amount,
    unvested_amount,
    vested_amount,
)

__version__ = "0.1.0"
__all__ = [
    # Main Client
    "VestingClient",
    "VestingLedger",
    # Types
    "VestingRecord",
    "ScheduleState",
    "SettlementResult",
    "TransferResult",
    # Vesting math
    "vested_amount",
    "releasable_amount",
    "unvested_amount",
    # Collaborators
    "AccessControl",
    "StaticAccessControl",
    "AssetTransfer",
    "InMemoryAssetTransfer",
    "HttpAssetTransfer",
    "Clock",
    "SystemClock",
    "ManualClock",
    "MonotonicClock",
    # Storage, locks, journal
    "StorageBackend",
    "InMemoryStorage",
    "RedisStorage",
    "get_storage",
    "ScheduleLockService",
    "ScheduleLease",
    "TransferJournal",
    "JournalEntry",
    "JournalEntryKind",
    "JournalEntryStatus",
    # Config & logging
    "Config",
    "configure_logging",
    "get_logger",
    # Exceptions
    "VestingError",
    "ConfigurationError",
    "ValidationError",
    "ScheduleError",
    "AlreadyExistsError",
    "NoScheduleError",
    "InvalidRangeError",
    "PauseStateUnchangedError",
    "PausedError",
    "ScheduleLockedError",
    "TransferFailedError",
    "TransferPendingError",
    "UnauthorizedError",
]
