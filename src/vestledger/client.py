"""VestingClient - main entry point wiring the ledger to its collaborators."""

from __future__ import annotations

from collections.abc import Iterable

from vestledger.access.control import AccessControl, StaticAccessControl
from vestledger.core.clock import Clock, MonotonicClock
from vestledger.core.config import Config
from vestledger.core.exceptions import ConfigurationError
from vestledger.core.logging import configure_logging, get_logger
from vestledger.core.types import ScheduleState, SettlementResult, VestingRecord
from vestledger.storage import StorageBackend, get_storage
from vestledger.transfer.base import AssetTransfer
from vestledger.transfer.http import HttpAssetTransfer
from vestledger.vesting.journal import JournalEntry, TransferJournal
from vestledger.vesting.ledger import VestingLedger
from vestledger.vesting.lock import ScheduleLockService


class VestingClient:
    """
    Main client for vestledger.

    Builds storage, locks, journal and ledger from a Config. Collaborators
    that cannot be derived from configuration (access control, and the
    transfer adapter unless a transfer API URL is configured) are passed in.
    """

    def __init__(
        self,
        config: Config | None = None,
        transfer: AssetTransfer | None = None,
        access_control: AccessControl | None = None,
        administrators: Iterable[str] | None = None,
        clock: Clock | None = None,
        storage: StorageBackend | None = None,
        configure_logs: bool = True,
    ) -> None:
        """
        Args:
            config: Configuration (defaults to Config.from_env())
            transfer: Asset transfer collaborator; HttpAssetTransfer from config if omitted
            access_control: Administrator gate
            administrators: Shortcut for a StaticAccessControl
            clock: Time source (defaults to a monotonic system clock)
            storage: Storage backend (defaults to the configured backend)
            configure_logs: Install the vestledger log handler at config.log_level
        """
        self._config = config or Config.from_env()

        if configure_logs:
            configure_logging(level=self._config.log_level)
        self._logger = get_logger("client")

        if access_control is None:
            if administrators is None:
                raise ConfigurationError("access_control or administrators is required")
            access_control = StaticAccessControl(administrators)

        if transfer is None:
            transfer = HttpAssetTransfer.from_config(self._config)

        if storage is None:
            kwargs = {}
            if self._config.storage_backend == "redis" and self._config.redis_url:
                kwargs["redis_url"] = self._config.redis_url
            storage = get_storage(self._config.storage_backend, **kwargs)

        self._storage = storage
        self._transfer = transfer
        self._journal = TransferJournal(storage)
        self._ledger = VestingLedger(
            storage=storage,
            transfer=transfer,
            access_control=access_control,
            clock=clock or MonotonicClock(),
            lock_service=ScheduleLockService(
                storage,
                ttl=self._config.lock_ttl,
                retry_count=self._config.lock_retry_count,
                retry_delay=self._config.lock_retry_delay,
            ),
            journal=self._journal,
        )
        self._logger.info(
            f"Vesting ledger ready (storage: {self._config.storage_backend}, "
            f"env: {self._config.env})"
        )

    @property
    def config(self) -> Config:
        return self._config

    @property
    def ledger(self) -> VestingLedger:
        return self._ledger

    @property
    def journal(self) -> TransferJournal:
        return self._journal

    async def add_vesting_schedule(
        self,
        caller: str,
        beneficiary: str,
        asset: str,
        total_amount: int,
        start_time: int,
        end_time: int,
    ) -> VestingRecord:
        return await self._ledger.add_vesting_schedule(
            caller, beneficiary, asset, total_amount, start_time, end_time
        )

    async def set_pause(self, caller: str, beneficiary: str, pause: bool) -> VestingRecord:
        return await self._ledger.set_pause(caller, beneficiary, pause)

    async def vest(self, caller: str) -> int:
        return await self._ledger.vest(caller)

    async def releasable_amount(self, beneficiary: str) -> int:
        return await self._ledger.releasable_amount(beneficiary)

    async def delete_vesting_schedule(
        self, caller: str, beneficiary: str, settle_beneficiary: bool = True
    ) -> SettlementResult:
        return await self._ledger.delete_vesting_schedule(caller, beneficiary, settle_beneficiary)

    async def reconcile(self, caller: str, beneficiary: str) -> VestingRecord:
        """Resolve an unconfirmed transfer left on a schedule."""
        return await self._ledger.reconcile(caller, beneficiary)

    async def get_schedule(self, beneficiary: str) -> VestingRecord:
        return await self._ledger.get_schedule(beneficiary)

    async def schedule_state(self, beneficiary: str) -> ScheduleState:
        return await self._ledger.schedule_state(beneficiary)

    async def history(self, beneficiary: str, limit: int = 100) -> list[JournalEntry]:
        """Journaled transfers for a beneficiary, newest first."""
        return await self._journal.query(beneficiary=beneficiary, limit=limit)

    async def close(self) -> None:
        """Release network resources held by the collaborators."""
        close_transfer = getattr(self._transfer, "close", None)
        if close_transfer is not None:
            await close_transfer()
        close_storage = getattr(self._storage, "close", None)
        if close_storage is not None:
            await close_storage()
