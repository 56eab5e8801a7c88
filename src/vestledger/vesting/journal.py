"""
Transfer journal.

Audit trail of every transfer leg the vesting ledger issues: releases to a
beneficiary, settlements on deletion, and claw-backs to an administrator.
Entries are written PENDING before the transfer and finalized afterwards,
so a crash between the two leaves a visible pending entry.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vestledger.storage.base import StorageBackend


class JournalEntryKind(str, Enum):
    """Why a transfer was issued."""

    RELEASE = "release"
    SETTLEMENT = "settlement"
    CLAWBACK = "clawback"


class JournalEntryStatus(str, Enum):
    """Status of a journaled transfer."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class JournalEntry:
    """
    A single transfer leg.

    Attributes:
        id: Unique entry ID
        timestamp: When the entry was written (wall clock)
        vesting_time: Ledger clock reading the amount was computed at
        beneficiary: Schedule the transfer belongs to
        destination: Who receives the funds
        asset: Asset identifier
        amount: Base units transferred
        kind: release, settlement or clawback
        status: Current status
        tx_reference: Reference returned by the transfer collaborator
        error: Failure reason, if any
        metadata: Additional data
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    vesting_time: int = 0
    beneficiary: str = ""
    destination: str = ""
    asset: str = ""
    amount: int = 0
    kind: JournalEntryKind = JournalEntryKind.RELEASE
    status: JournalEntryStatus = JournalEntryStatus.PENDING
    tx_reference: str | None = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "vesting_time": self.vesting_time,
            "beneficiary": self.beneficiary,
            "destination": self.destination,
            "asset": self.asset,
            "amount": str(self.amount),
            "kind": self.kind.value,
            "status": self.status.value,
            "tx_reference": self.tx_reference,
            "error": self.error,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JournalEntry:
        """Create JournalEntry from dictionary."""
        ts_str = data.get("timestamp")
        timestamp = datetime.fromisoformat(ts_str) if ts_str else datetime.now()

        return cls(
            id=data.get("id", str(uuid.uuid4())),
            timestamp=timestamp,
            vesting_time=int(data.get("vesting_time", 0)),
            beneficiary=data.get("beneficiary", ""),
            destination=data.get("destination", ""),
            asset=data.get("asset", ""),
            amount=int(data.get("amount", "0")),
            kind=JournalEntryKind(data.get("kind", JournalEntryKind.RELEASE.value)),
            status=JournalEntryStatus(data.get("status", JournalEntryStatus.PENDING.value)),
            tx_reference=data.get("tx_reference"),
            error=data.get("error"),
            metadata=data.get("metadata", {}),
        )


class TransferJournal:
    """
    Transfer journal using StorageBackend.

    Stores and retrieves journal entries in a single collection.
    """

    COLLECTION = "transfer_journal"

    def __init__(self, storage: StorageBackend) -> None:
        self._storage = storage

    async def record(self, entry: JournalEntry) -> str:
        """Record an entry and return its ID."""
        await self._storage.save(self.COLLECTION, entry.id, entry.to_dict())
        return entry.id

    async def get(self, entry_id: str) -> JournalEntry | None:
        """Get entry by ID, or None if not found."""
        data = await self._storage.get(self.COLLECTION, entry_id)
        if not data:
            return None
        return JournalEntry.from_dict(data)

    async def update_status(
        self,
        entry_id: str,
        status: JournalEntryStatus,
        tx_reference: str | None = None,
        error: str | None = None,
    ) -> bool:
        """
        Finalize an entry.

        Args:
            entry_id: Entry ID
            status: New status
            tx_reference: Optional transfer reference
            error: Optional failure reason

        Returns:
            True if updated, False if not found
        """
        updates: dict[str, Any] = {"status": status.value}
        if tx_reference:
            updates["tx_reference"] = tx_reference
        if error:
            updates["error"] = error
        return await self._storage.update(self.COLLECTION, entry_id, updates)

    async def query(
        self,
        beneficiary: str | None = None,
        destination: str | None = None,
        kind: JournalEntryKind | None = None,
        status: JournalEntryStatus | None = None,
        limit: int = 100,
    ) -> list[JournalEntry]:
        """
        Query journal entries, newest first.

        Args:
            beneficiary: Filter by schedule owner
            destination: Filter by receiver
            kind: Filter by kind
            status: Filter by status
            limit: Maximum entries to return

        Returns:
            List of matching entries
        """
        filters: dict[str, Any] = {}
        if beneficiary:
            filters["beneficiary"] = beneficiary
        if destination:
            filters["destination"] = destination
        if kind:
            filters["kind"] = kind.value
        if status:
            filters["status"] = status.value

        raw_results = await self._storage.query(self.COLLECTION, filters=filters)
        entries = [JournalEntry.from_dict(d) for d in raw_results]
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit]

    async def get_total_released(self, beneficiary: str) -> int:
        """
        Sum of completed transfers paid to the beneficiary.

        Covers releases and deletion settlements; claw-backs go elsewhere.
        """
        raw_results = await self._storage.query(
            self.COLLECTION,
            filters={
                "beneficiary": beneficiary,
                "destination": beneficiary,
                "status": JournalEntryStatus.COMPLETED.value,
            },
        )
        return sum(int(d.get("amount", "0")) for d in raw_results)
