"""
Unit tests for the transfer journal.

Tests JournalEntry and TransferJournal.
"""

import pytest

from vestledger.storage.memory import InMemoryStorage
from vestledger.vesting.journal import (
    JournalEntry,
    JournalEntryKind,
    JournalEntryStatus,
    TransferJournal,
)


class TestJournalEntry:
    """Tests for JournalEntry dataclass."""

    def test_default_values(self):
        entry = JournalEntry()
        assert entry.id is not None
        assert entry.status == JournalEntryStatus.PENDING
        assert entry.kind == JournalEntryKind.RELEASE
        assert entry.amount == 0

    def test_to_dict_stores_amount_as_string(self):
        entry = JournalEntry(beneficiary="alice", destination="alice", amount=10**30)
        d = entry.to_dict()

        assert d["amount"] == str(10**30)
        assert d["kind"] == "release"
        assert "timestamp" in d

    def test_from_dict(self):
        entry = JournalEntry(
            beneficiary="alice",
            destination="admin",
            asset="TOKEN",
            amount=12,
            kind=JournalEntryKind.CLAWBACK,
            status=JournalEntryStatus.FAILED,
            error="rejected",
            vesting_time=99,
        )
        restored = JournalEntry.from_dict(entry.to_dict())

        assert restored == entry


class TestTransferJournal:
    """Tests for TransferJournal."""

    @pytest.fixture
    def journal(self) -> TransferJournal:
        return TransferJournal(InMemoryStorage())

    @pytest.mark.asyncio
    async def test_record_and_get(self, journal):
        entry = JournalEntry(beneficiary="alice", destination="alice", amount=25)

        entry_id = await journal.record(entry)
        retrieved = await journal.get(entry_id)

        assert retrieved is not None
        assert retrieved.amount == 25

    @pytest.mark.asyncio
    async def test_get_nonexistent(self, journal):
        assert await journal.get("nonexistent-id") is None

    @pytest.mark.asyncio
    async def test_update_status(self, journal):
        entry = JournalEntry(beneficiary="alice", destination="alice", amount=25)
        await journal.record(entry)

        assert await journal.update_status(
            entry.id, JournalEntryStatus.COMPLETED, tx_reference="tx-1"
        )

        retrieved = await journal.get(entry.id)
        assert retrieved.status == JournalEntryStatus.COMPLETED
        assert retrieved.tx_reference == "tx-1"

    @pytest.mark.asyncio
    async def test_update_status_nonexistent(self, journal):
        assert await journal.update_status("missing", JournalEntryStatus.FAILED) is False

    @pytest.mark.asyncio
    async def test_query_filters(self, journal):
        await journal.record(JournalEntry(beneficiary="alice", destination="alice", amount=1))
        await journal.record(
            JournalEntry(
                beneficiary="alice",
                destination="admin",
                amount=2,
                kind=JournalEntryKind.CLAWBACK,
            )
        )
        await journal.record(JournalEntry(beneficiary="bob", destination="bob", amount=3))

        assert len(await journal.query(beneficiary="alice")) == 2
        clawbacks = await journal.query(kind=JournalEntryKind.CLAWBACK)
        assert [e.amount for e in clawbacks] == [2]
        assert len(await journal.query(limit=1)) == 1

    @pytest.mark.asyncio
    async def test_total_released_counts_completed_payouts_only(self, journal):
        completed = JournalEntry(
            beneficiary="alice",
            destination="alice",
            amount=100,
            status=JournalEntryStatus.COMPLETED,
        )
        settlement = JournalEntry(
            beneficiary="alice",
            destination="alice",
            amount=50,
            kind=JournalEntryKind.SETTLEMENT,
            status=JournalEntryStatus.COMPLETED,
        )
        failed = JournalEntry(
            beneficiary="alice",
            destination="alice",
            amount=1000,
            status=JournalEntryStatus.FAILED,
        )
        clawback = JournalEntry(
            beneficiary="alice",
            destination="admin",
            amount=7,
            kind=JournalEntryKind.CLAWBACK,
            status=JournalEntryStatus.COMPLETED,
        )
        for entry in (completed, settlement, failed, clawback):
            await journal.record(entry)

        assert await journal.get_total_released("alice") == 150

