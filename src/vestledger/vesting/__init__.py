"""
Vesting module - schedule bookkeeping and release calculation.
"""

from vestledger.vesting.journal import (
    JournalEntry,
    JournalEntryKind,
    JournalEntryStatus,
    TransferJournal,
)
from vestledger.vesting.ledger import VestingLedger
from vestledger.vesting.lock import ScheduleLease, ScheduleLockService
from vestledger.vesting.schedule import releasable_amount, unvested_amount, vested_amount

__all__ = [
    "VestingLedger",
    "ScheduleLockService",
    "ScheduleLease",
    "TransferJournal",
    "JournalEntry",
    "JournalEntryKind",
    "JournalEntryStatus",
    "vested_amount",
    "releasable_amount",
    "unvested_amount",
]
