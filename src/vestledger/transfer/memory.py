"""
In-memory asset custody.

Keeps fungible balances in process. The ledger's custody account is debited
on every transfer. Suitable for simulations and tests.
"""

from __future__ import annotations

import uuid
from collections import defaultdict

from vestledger.core.logging import get_logger
from vestledger.core.types import TransferResult
from vestledger.transfer.base import AssetTransfer

logger = get_logger("transfer.memory")


class InMemoryAssetTransfer(AssetTransfer):
    """
    Balance book for any number of assets.

    Attributes:
        custody: Identity that holds funds awaiting release
    """

    def __init__(self, custody: str = "vesting-custody") -> None:
        self.custody = custody
        self._balances: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._failing_destinations: set[str] = set()
        self._fail_next = 0
        self._pending_next = 0
        self._settled: dict[str, TransferResult] = {}
        self.transfers: list[TransferResult] = []

    def mint(self, asset: str, holder: str, amount: int) -> None:
        """Credit ``amount`` of ``asset`` to ``holder`` out of thin air."""
        if amount < 0:
            raise ValueError("Mint amount must not be negative")
        self._balances[asset][holder] += amount

    def fund_custody(self, asset: str, amount: int) -> None:
        """Deposit funds that schedules will be paid from."""
        self.mint(asset, self.custody, amount)

    def balance_of(self, asset: str, holder: str) -> int:
        return self._balances[asset].get(holder, 0)

    def fail_next(self, count: int = 1) -> None:
        """Make the next ``count`` transfers fail."""
        self._fail_next += count

    def fail_destination(self, destination: str) -> None:
        """Reject every transfer to ``destination`` until restored."""
        self._failing_destinations.add(destination)

    def restore_destination(self, destination: str) -> None:
        self._failing_destinations.discard(destination)

    def leave_pending(self, count: int = 1) -> None:
        """Make the next ``count`` transfers settle but report an unknown outcome."""
        self._pending_next += count

    async def transfer(
        self,
        asset: str,
        destination: str,
        amount: int,
        idempotency_key: str | None = None,
    ) -> TransferResult:
        if idempotency_key in self._settled:
            return self._settled[idempotency_key]

        error = None
        if self._fail_next > 0:
            self._fail_next -= 1
            error = "Injected transfer failure"
        elif destination in self._failing_destinations:
            error = f"Destination {destination} rejected the transfer"
        elif self.balance_of(asset, self.custody) < amount:
            error = (
                f"Insufficient custody balance: "
                f"{self.balance_of(asset, self.custody)} < {amount}"
            )

        if error:
            logger.debug(f"Transfer of {amount} {asset} to {destination} failed: {error}")
            return TransferResult(
                success=False,
                asset=asset,
                destination=destination,
                amount=amount,
                error=error,
            )

        self._balances[asset][self.custody] -= amount
        self._balances[asset][destination] += amount

        result = TransferResult(
            success=True,
            asset=asset,
            destination=destination,
            amount=amount,
            tx_reference=str(uuid.uuid4()),
        )
        self.transfers.append(result)
        if idempotency_key is not None:
            self._settled[idempotency_key] = result

        if self._pending_next > 0:
            self._pending_next -= 1
            return TransferResult(
                success=False,
                asset=asset,
                destination=destination,
                amount=amount,
                pending=True,
                error="Transfer accepted, confirmation not received",
            )
        return result
