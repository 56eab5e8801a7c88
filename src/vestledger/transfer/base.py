"""
Base asset transfer interface.

The vesting ledger never moves value itself. Every payout goes through an
AssetTransfer implementation that reports success, failure, or an outcome
it could not confirm yet.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vestledger.core.types import TransferResult


class AssetTransfer(ABC):
    """
    Abstract base class for asset transfer collaborators.

    Implementations:
    - InMemoryAssetTransfer: custody balances held in process
    - HttpAssetTransfer: custodial transfer API over HTTP
    """

    @abstractmethod
    async def transfer(
        self,
        asset: str,
        destination: str,
        amount: int,
        idempotency_key: str | None = None,
    ) -> TransferResult:
        """
        Move ``amount`` base units of ``asset`` from ledger custody to ``destination``.

        Args:
            asset: Asset identifier
            destination: Receiving identity/address
            amount: Base units, always positive
            idempotency_key: Submitting the same key again must not move
                funds a second time; it reports the first submission's outcome

        Returns:
            TransferResult; ``success=False`` without ``pending`` means
            nothing was moved
        """
        ...
