"""
Vesting ledger.

Owns the beneficiary -> VestingRecord mapping and exposes the five ledger
operations. Every mutating operation runs under the beneficiary's schedule
lock, reads the clock once, issues transfers, and commits bookkeeping only
after the transfer collaborator confirms success.

A transfer leg is journaled and marked on its record before it is sent. No
further payout starts for that record until the leg is confirmed or
rejected; an unconfirmed leg is re-submitted under its journal entry ID,
which the collaborator uses as the idempotency key.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vestledger.core.exceptions import (
    AlreadyExistsError,
    InvalidRangeError,
    NoScheduleError,
    PausedError,
    PauseStateUnchangedError,
    TransferFailedError,
    TransferPendingError,
    ValidationError,
)
from vestledger.core.logging import get_logger
from vestledger.core.types import (
    ScheduleState,
    SettlementResult,
    TransferResult,
    VestingRecord,
)
from vestledger.vesting.journal import (
    JournalEntry,
    JournalEntryKind,
    JournalEntryStatus,
    TransferJournal,
)
from vestledger.vesting.lock import ScheduleLease, ScheduleLockService
from vestledger.vesting.schedule import releasable_amount, vested_amount

if TYPE_CHECKING:
    from vestledger.access.control import AccessControl
    from vestledger.core.clock import Clock
    from vestledger.storage.base import StorageBackend
    from vestledger.transfer.base import AssetTransfer

logger = get_logger("ledger")


def _require_identity(name: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{name} is required")


def _require_uint(name: str, value: int) -> None:
    # bool is an int subclass but never a valid amount or timestamp
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer", details={name: repr(value)})
    if value < 0:
        raise ValidationError(f"{name} must not be negative", details={name: value})


class VestingLedger:
    """
    Per-beneficiary linear vesting ledger.

    One schedule per beneficiary. Administrators create, pause and delete
    schedules; beneficiaries release their own accrued funds with vest().

    Example:
        >>> ledger = VestingLedger(storage, transfer, access, clock)
        >>> await ledger.add_vesting_schedule(admin, "0xb", "TOKEN", 1000, t0, t1)
        >>> await ledger.vest("0xb")
    """

    COLLECTION = "vesting_schedules"

    def __init__(
        self,
        storage: StorageBackend,
        transfer: AssetTransfer,
        access_control: AccessControl,
        clock: Clock,
        lock_service: ScheduleLockService | None = None,
        journal: TransferJournal | None = None,
    ) -> None:
        """
        Args:
            storage: Backend holding schedule records
            transfer: Collaborator that moves funds out of custody
            access_control: Decides who is an administrator
            clock: Time source, read fresh by every operation
            lock_service: Schedule locks; defaults to locks on ``storage``
            journal: Transfer audit log; defaults to a journal on ``storage``
        """
        self._storage = storage
        self._transfer = transfer
        self._access = access_control
        self._clock = clock
        self._locks = lock_service or ScheduleLockService(storage)
        self._journal = journal or TransferJournal(storage)

    @property
    def journal(self) -> TransferJournal:
        return self._journal

    # ─── Record access ───────────────────────────────────────────────

    async def _load(self, beneficiary: str) -> VestingRecord | None:
        data = await self._storage.get(self.COLLECTION, beneficiary)
        if not data:
            return None
        return VestingRecord.from_dict(data)

    async def _load_existing(self, beneficiary: str) -> VestingRecord:
        record = await self._load(beneficiary)
        if record is None:
            raise NoScheduleError("Beneficiary has no vesting schedule", beneficiary=beneficiary)
        return record

    async def _commit(self, record: VestingRecord) -> None:
        await self._storage.save(self.COLLECTION, record.beneficiary, record.to_dict())

    # ─── Transfers ───────────────────────────────────────────────────

    async def _submit(self, entry: JournalEntry) -> TransferResult:
        # The journal entry ID doubles as the idempotency key, so a
        # re-submitted leg can never move funds twice
        try:
            return await self._transfer.transfer(
                entry.asset, entry.destination, entry.amount, idempotency_key=entry.id
            )
        except Exception as e:
            return TransferResult(
                success=False,
                asset=entry.asset,
                destination=entry.destination,
                amount=entry.amount,
                error=f"{type(e).__name__}: {e}",
            )

    async def _discard(self, record: VestingRecord, entry: JournalEntry, error: str) -> None:
        record.pending_transfer = None
        await self._commit(record)
        await self._journal.update_status(entry.id, JournalEntryStatus.FAILED, error=error)
        logger.warning(
            f"{entry.kind.value} of {entry.amount} {entry.asset} "
            f"to {entry.destination} failed: {error}"
        )

    async def _check(
        self, record: VestingRecord, entry: JournalEntry, result: TransferResult
    ) -> None:
        """
        Raise unless the transfer of ``entry`` is confirmed.

        Raises:
            TransferPendingError: Outcome unknown; the record stays marked
            TransferFailedError: Nothing moved; the mark is cleared
        """
        if result.success:
            entry.tx_reference = result.tx_reference
            return

        if result.pending:
            await self._journal.update_status(
                entry.id, JournalEntryStatus.PENDING, error=result.error
            )
            logger.warning(
                f"{entry.kind.value} {entry.id} of {entry.amount} {entry.asset} "
                f"to {entry.destination} is unconfirmed: {result.error}"
            )
            raise TransferPendingError(
                "Transfer outcome is not confirmed yet",
                entry_id=entry.id,
                beneficiary=record.beneficiary,
                details={"kind": entry.kind.value, "error": result.error},
            )

        error = result.error or "transfer failed"
        await self._discard(record, entry, error)
        raise TransferFailedError(
            "Asset transfer failed",
            asset=entry.asset,
            destination=entry.destination,
            amount=entry.amount,
            beneficiary=record.beneficiary,
            details={"kind": entry.kind.value, "error": error, "journal_entry": entry.id},
        )

    async def _pay(
        self,
        record: VestingRecord,
        lease: ScheduleLease,
        destination: str,
        amount: int,
        kind: JournalEntryKind,
        now: int,
    ) -> JournalEntry:
        """
        Issue one transfer leg.

        The leg is journaled and marked on the record before the transfer
        goes out. On return the transfer is confirmed and the caller passes
        the entry to ``_apply``.
        """
        lease.ensure_held()
        entry = JournalEntry(
            vesting_time=now,
            beneficiary=record.beneficiary,
            destination=destination,
            asset=record.asset,
            amount=amount,
            kind=kind,
        )
        await self._journal.record(entry)
        record.pending_transfer = entry.id
        await self._commit(record)

        await self._check(record, entry, await self._submit(entry))
        return entry

    async def _apply(self, record: VestingRecord, entry: JournalEntry) -> VestingRecord | None:
        """
        Commit a confirmed leg in one write.

        Returns:
            The updated record, or None once a claw-back has removed it
        """
        record.pending_transfer = None
        if entry.kind == JournalEntryKind.CLAWBACK:
            await self._storage.delete(self.COLLECTION, record.beneficiary)
            applied = None
        else:
            record.released_amount += entry.amount
            await self._commit(record)
            applied = record
        await self._journal.update_status(
            entry.id, JournalEntryStatus.COMPLETED, tx_reference=entry.tx_reference
        )
        return applied

    async def _reconcile(
        self, record: VestingRecord, lease: ScheduleLease
    ) -> VestingRecord | None:
        """
        Resolve the record's in-flight transfer, if any.

        Returns:
            The record, or None if the resolved leg was a claw-back

        Raises:
            TransferPendingError: The outcome is still unknown
        """
        if record.pending_transfer is None:
            return record

        entry = await self._journal.get(record.pending_transfer)
        if entry is None:
            raise TransferPendingError(
                "In-flight transfer has no journal entry",
                entry_id=record.pending_transfer,
                beneficiary=record.beneficiary,
            )

        lease.ensure_held()
        logger.info(
            f"Re-submitting in-flight {entry.kind.value} {entry.id} for {record.beneficiary}"
        )
        result = await self._submit(entry)
        if not result.success and not result.pending:
            await self._discard(record, entry, result.error or "transfer failed")
            return record

        await self._check(record, entry, result)
        return await self._apply(record, entry)

    async def _load_reconciled(self, beneficiary: str, lease: ScheduleLease) -> VestingRecord:
        record = await self._reconcile(await self._load_existing(beneficiary), lease)
        if record is None:
            raise NoScheduleError("Beneficiary has no vesting schedule", beneficiary=beneficiary)
        return record

    # ─── Administrator operations ────────────────────────────────────

    async def add_vesting_schedule(
        self,
        caller: str,
        beneficiary: str,
        asset: str,
        total_amount: int,
        start_time: int,
        end_time: int,
    ) -> VestingRecord:
        """
        Create a schedule for a beneficiary that has none.

        Funding is expected to be in custody already.

        Raises:
            UnauthorizedError: Caller is not an administrator
            InvalidRangeError: start_time >= end_time
            AlreadyExistsError: Beneficiary already has a schedule
            ValidationError: Malformed identities, amounts or timestamps
        """
        await self._access.require_administrator(caller, "add_vesting_schedule")
        _require_identity("beneficiary", beneficiary)
        _require_identity("asset", asset)
        _require_uint("total_amount", total_amount)
        _require_uint("start_time", start_time)
        _require_uint("end_time", end_time)
        if start_time >= end_time:
            raise InvalidRangeError(
                "start_time must be before end_time",
                start_time=start_time,
                end_time=end_time,
                beneficiary=beneficiary,
            )

        async with self._locks.hold(beneficiary):
            if await self._load(beneficiary) is not None:
                raise AlreadyExistsError(
                    "Beneficiary already has a vesting schedule", beneficiary=beneficiary
                )

            record = VestingRecord(
                beneficiary=beneficiary,
                asset=asset,
                total_amount=total_amount,
                start_time=start_time,
                end_time=end_time,
            )
            await self._commit(record)

        logger.info(
            f"Added schedule for {beneficiary}: {total_amount} {asset} "
            f"vesting {start_time}..{end_time}"
        )
        return record.copy()

    async def set_pause(self, caller: str, beneficiary: str, pause: bool) -> VestingRecord:
        """
        Pause or resume releases for a beneficiary.

        Accrual keeps running while paused; only vest() is blocked.

        Raises:
            UnauthorizedError: Caller is not an administrator
            NoScheduleError: Beneficiary has no schedule
            PauseStateUnchangedError: Schedule is already in the requested state
        """
        await self._access.require_administrator(caller, "set_pause")

        async with self._locks.hold(beneficiary):
            record = await self._load_existing(beneficiary)
            if record.is_paused == pause:
                raise PauseStateUnchangedError(
                    "Pause status must change", paused=pause, beneficiary=beneficiary
                )
            record.is_paused = pause
            await self._commit(record)

        logger.info(f"{'Paused' if pause else 'Resumed'} schedule for {beneficiary}")
        return record.copy()

    async def delete_vesting_schedule(
        self,
        caller: str,
        beneficiary: str,
        settle_beneficiary: bool = True,
    ) -> SettlementResult:
        """
        Terminate a schedule and claw back what has not vested.

        With ``settle_beneficiary`` the vested-but-unreleased amount is paid
        to the beneficiary and the unvested remainder to the calling
        administrator. Without it, everything not yet released goes to the
        administrator.

        The settlement is committed to ``released_amount`` as soon as it is
        confirmed. If the claw-back leg then fails, the schedule is kept in
        that state, so retrying never pays the beneficiary twice.

        Raises:
            UnauthorizedError: Caller is not an administrator
            NoScheduleError: Beneficiary has no schedule
            TransferFailedError: A transfer leg failed
            TransferPendingError: A transfer leg is unconfirmed
        """
        await self._access.require_administrator(caller, "delete_vesting_schedule")

        async with self._locks.hold(beneficiary) as lease:
            record = await self._load_reconciled(beneficiary, lease)
            now = self._clock.now()

            settled = releasable_amount(record, now) if settle_beneficiary else 0
            clawback = record.total_amount - record.released_amount - settled

            if settled > 0:
                entry = await self._pay(
                    record, lease, beneficiary, settled, JournalEntryKind.SETTLEMENT, now
                )
                await self._apply(record, entry)

            if clawback > 0:
                try:
                    entry = await self._pay(
                        record, lease, caller, clawback, JournalEntryKind.CLAWBACK, now
                    )
                except TransferFailedError as e:
                    e.settled_amount = settled
                    raise
                await self._apply(record, entry)
            else:
                await self._storage.delete(self.COLLECTION, beneficiary)

        logger.info(
            f"Deleted schedule for {beneficiary}: settled {settled}, "
            f"clawed back {clawback} {record.asset} to {caller}"
        )
        return SettlementResult(
            beneficiary=beneficiary,
            administrator=caller,
            asset=record.asset,
            settled_amount=settled,
            clawback_amount=clawback,
            settle_beneficiary=settle_beneficiary,
            timestamp=now,
        )

    async def reconcile(self, caller: str, beneficiary: str) -> VestingRecord:
        """
        Resolve a schedule's unconfirmed transfer.

        The transfer is re-submitted under its original idempotency key. A
        confirmed leg is committed, a failed one discarded.

        Returns:
            The schedule afterwards; the all-zero record if a confirmed
            claw-back completed its deletion

        Raises:
            UnauthorizedError: Caller is not an administrator
            NoScheduleError: Beneficiary has no schedule
            TransferPendingError: The outcome is still unknown
        """
        await self._access.require_administrator(caller, "reconcile")

        async with self._locks.hold(beneficiary) as lease:
            record = await self._reconcile(await self._load_existing(beneficiary), lease)

        if record is None:
            return VestingRecord.empty(beneficiary)
        return record.copy()

    # ─── Beneficiary operations ──────────────────────────────────────

    async def vest(self, caller: str) -> int:
        """
        Release everything the caller has accrued so far.

        The caller acts on their own schedule only. An unconfirmed release
        left by an earlier call is resolved first.

        Returns:
            Amount released by this call; 0 when nothing new has vested

        Raises:
            NoScheduleError: Caller has no schedule
            PausedError: Caller's schedule is paused
            TransferFailedError: Transfer failed; nothing was committed
            TransferPendingError: Transfer is unconfirmed; releases are held
                until it resolves
        """
        _require_identity("caller", caller)

        async with self._locks.hold(caller) as lease:
            record = await self._load_reconciled(caller, lease)
            if record.is_paused:
                raise PausedError("Vesting is paused", beneficiary=caller)

            now = self._clock.now()
            amount = releasable_amount(record, now)
            if amount == 0:
                logger.debug(f"Nothing to release for {caller} at {now}")
                return 0

            entry = await self._pay(record, lease, caller, amount, JournalEntryKind.RELEASE, now)
            await self._apply(record, entry)

        logger.info(
            f"Released {amount} {record.asset} to {caller} "
            f"({record.released_amount}/{record.total_amount})"
        )
        return amount

    # ─── Queries ─────────────────────────────────────────────────────

    async def releasable_amount(self, beneficiary: str) -> int:
        """Currently releasable amount; 0 when the beneficiary has no schedule."""
        record = await self._load(beneficiary)
        if record is None:
            return 0
        return releasable_amount(record, self._clock.now())

    async def vested_amount(self, beneficiary: str) -> int:
        """Accrued amount including what has already been released."""
        record = await self._load(beneficiary)
        if record is None:
            return 0
        return vested_amount(record, self._clock.now())

    async def get_schedule(self, beneficiary: str) -> VestingRecord:
        """Detached copy of the schedule, or an all-zero record when absent."""
        record = await self._load(beneficiary)
        return record if record is not None else VestingRecord.empty(beneficiary)

    async def schedule_state(self, beneficiary: str) -> ScheduleState:
        record = await self._load(beneficiary)
        if record is None:
            return ScheduleState.ABSENT
        return ScheduleState.PAUSED if record.is_paused else ScheduleState.ACTIVE

    async def list_schedules(self) -> list[VestingRecord]:
        """All active schedules, ordered by beneficiary."""
        raw = await self._storage.query(self.COLLECTION)
        records = [VestingRecord.from_dict(d) for d in raw]
        records.sort(key=lambda r: r.beneficiary)
        return records
