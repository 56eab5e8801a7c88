"""
Type definitions for vestledger.

This module contains the enums and data classes shared by the ledger,
the transfer adapters and the journal.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class ScheduleState(str, Enum):
    """Lifecycle state of a beneficiary's schedule."""

    ABSENT = "absent"
    ACTIVE = "active"
    PAUSED = "paused"


@dataclass
class VestingRecord:
    """
    Vesting schedule of a single beneficiary.

    Attributes:
        beneficiary: Identity entitled to the released funds
        asset: Identifier of the fungible asset being released
        total_amount: Full entitlement in asset base units
        released_amount: Cumulative amount already transferred out
        start_time: Unix timestamp at which accrual begins
        end_time: Unix timestamp at which accrual reaches 100%
        is_paused: When True, releases are blocked
        pending_transfer: Journal entry ID of a payout whose outcome is not
            yet known; no other payout is issued while it is set
    """

    beneficiary: str
    asset: str = ""
    total_amount: int = 0
    released_amount: int = 0
    start_time: int = 0
    end_time: int = 0
    is_paused: bool = False
    pending_transfer: str | None = None

    @classmethod
    def empty(cls, beneficiary: str) -> "VestingRecord":
        """All-zero view returned for a beneficiary without a schedule."""
        return cls(beneficiary=beneficiary)

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    def copy(self) -> "VestingRecord":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        # Integers are stored as strings so JSON backends keep full precision
        return {
            "beneficiary": self.beneficiary,
            "asset": self.asset,
            "total_amount": str(self.total_amount),
            "released_amount": str(self.released_amount),
            "start_time": str(self.start_time),
            "end_time": str(self.end_time),
            "is_paused": self.is_paused,
            "pending_transfer": self.pending_transfer,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VestingRecord":
        return cls(
            beneficiary=data["beneficiary"],
            asset=data.get("asset", ""),
            total_amount=int(data.get("total_amount", "0")),
            released_amount=int(data.get("released_amount", "0")),
            start_time=int(data.get("start_time", "0")),
            end_time=int(data.get("end_time", "0")),
            is_paused=bool(data.get("is_paused", False)),
            pending_transfer=data.get("pending_transfer"),
        )


@dataclass
class TransferResult:
    """
    Result reported by an AssetTransfer collaborator.

    ``pending`` marks a transfer the collaborator accepted or may have
    accepted but could not confirm; ``success`` is False in that case and
    the transfer must not be treated as failed.
    """

    success: bool
    asset: str
    destination: str
    amount: int
    pending: bool = False
    tx_reference: str | None = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class SettlementResult:
    """Outcome of deleting a schedule."""

    beneficiary: str
    administrator: str
    asset: str
    settled_amount: int
    clawback_amount: int
    settle_beneficiary: bool
    timestamp: int
