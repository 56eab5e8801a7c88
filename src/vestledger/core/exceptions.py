"""
Exception hierarchy for vestledger.

All ledger-specific exceptions inherit from VestingError for easy catching.
"""

from __future__ import annotations

from typing import Any


class VestingError(Exception):
    """
    Base exception for all vestledger errors.

    Catch this to handle any ledger-related exception.

    Example:
        >>> try:
        ...     await ledger.vest("0xbeneficiary")
        ... except VestingError as e:
        ...     print(f"Vesting error: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(VestingError):
    """
    Configuration is missing or invalid.

    Raised when:
    - Environment variables hold unparseable values
    - An unknown storage backend is requested
    """

    pass


class ValidationError(VestingError):
    """
    Input validation error.

    Raised when:
    - Amounts or timestamps are negative or not integers
    - Identities are empty
    """

    pass


class ScheduleError(VestingError):
    """Base exception for errors tied to a single beneficiary's schedule."""

    def __init__(
        self,
        message: str,
        beneficiary: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.beneficiary = beneficiary


class AlreadyExistsError(ScheduleError):
    """The beneficiary already has a vesting schedule."""

    pass


class NoScheduleError(ScheduleError):
    """The beneficiary has no vesting schedule."""

    pass


class InvalidRangeError(ScheduleError):
    """
    The vesting window is empty or inverted.

    Raised when start_time >= end_time.
    """

    def __init__(
        self,
        message: str,
        start_time: int,
        end_time: int,
        beneficiary: str | None = None,
    ) -> None:
        super().__init__(message, beneficiary)
        self.start_time = start_time
        self.end_time = end_time

    def __str__(self) -> str:
        return f"{self.message} (start={self.start_time}, end={self.end_time})"


class PauseStateUnchangedError(ScheduleError):
    """setPause was called with the state the schedule is already in."""

    def __init__(self, message: str, paused: bool, beneficiary: str | None = None) -> None:
        super().__init__(message, beneficiary)
        self.paused = paused


class PausedError(ScheduleError):
    """A release was attempted while the schedule is paused."""

    pass


class ScheduleLockedError(ScheduleError):
    """
    The beneficiary's schedule lock could not be acquired.

    Another operation on the same schedule is in progress. Safe to retry.
    """

    pass


class TransferFailedError(ScheduleError):
    """
    The asset transfer collaborator reported a failure.

    The failed leg moved nothing and its bookkeeping is not committed, so the
    operation is safe to retry. When a deletion's beneficiary leg succeeded
    before the claw-back leg failed, the settled amount has been committed
    to ``released_amount`` and is reported in ``settled_amount``; the
    schedule stays in place for the retry.
    """

    def __init__(
        self,
        message: str,
        asset: str,
        destination: str,
        amount: int,
        beneficiary: str | None = None,
        settled_amount: int = 0,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, beneficiary, details)
        self.asset = asset
        self.destination = destination
        self.amount = amount
        self.settled_amount = settled_amount

    def __str__(self) -> str:
        return (
            f"{self.message} | "
            f"Asset: {self.asset}, Destination: {self.destination}, Amount: {self.amount}"
        )


class TransferPendingError(ScheduleError):
    """
    A transfer was submitted but its outcome is not known yet.

    The schedule keeps the journal entry of that transfer as in flight and
    refuses further payouts until it is reconciled; reconciling re-submits
    it under the same idempotency key.
    """

    def __init__(
        self,
        message: str,
        entry_id: str,
        beneficiary: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, beneficiary, details)
        self.entry_id = entry_id

    def __str__(self) -> str:
        return f"{self.message} (journal entry: {self.entry_id})"


class UnauthorizedError(VestingError):
    """
    Caller is not allowed to perform the action.

    Raised when a non-administrator calls an administrator-only operation.
    """

    def __init__(self, message: str, caller: str, action: str) -> None:
        super().__init__(message)
        self.caller = caller
        self.action = action

    def __str__(self) -> str:
        return f"[{self.action}] {self.message} (caller: {self.caller})"
