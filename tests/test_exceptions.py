"""Unit tests for exceptions module."""

import pytest

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


class TestVestingError:
    """Tests for base exception."""

    def test_basic_error(self) -> None:
        error = VestingError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details == {}

    def test_error_with_details(self) -> None:
        error = VestingError("Storage failed", details={"backend": "redis"})

        assert "Storage failed" in str(error)
        assert "Details:" in str(error)
        assert error.details["backend"] == "redis"

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad config"),
            ValidationError("bad input"),
            AlreadyExistsError("exists", beneficiary="alice"),
            NoScheduleError("missing", beneficiary="alice"),
            InvalidRangeError("range", start_time=2, end_time=1),
            PauseStateUnchangedError("unchanged", paused=True),
            PausedError("paused"),
            ScheduleLockedError("locked"),
            TransferFailedError("failed", asset="T", destination="alice", amount=1),
            TransferPendingError("unconfirmed", entry_id="e1"),
            UnauthorizedError("denied", caller="bob", action="set_pause"),
        ],
    )
    def test_is_catchable_as_base_type(self, error) -> None:
        with pytest.raises(VestingError):
            raise error


class TestScheduleErrors:
    def test_schedule_errors_carry_beneficiary(self) -> None:
        error = NoScheduleError("Beneficiary has no vesting schedule", beneficiary="alice")

        assert isinstance(error, ScheduleError)
        assert error.beneficiary == "alice"

    def test_invalid_range_str(self) -> None:
        error = InvalidRangeError("start_time must be before end_time", start_time=5, end_time=3)

        assert str(error) == "start_time must be before end_time (start=5, end=3)"

    def test_pause_state_unchanged(self) -> None:
        error = PauseStateUnchangedError("Pause status must change", paused=False)
        assert error.paused is False


class TestTransferFailedError:
    def test_fields(self) -> None:
        error = TransferFailedError(
            "Asset transfer failed",
            asset="TOKEN",
            destination="alice",
            amount=500,
            beneficiary="alice",
        )

        assert error.amount == 500
        assert error.settled_amount == 0
        assert "Destination: alice" in str(error)
        assert "Amount: 500" in str(error)


class TestUnauthorizedError:
    def test_str(self) -> None:
        error = UnauthorizedError("Caller is not an administrator", caller="bob", action="set_pause")

        assert not isinstance(error, ScheduleError)
        assert str(error) == "[set_pause] Caller is not an administrator (caller: bob)"


class TestTransferPendingError:
    def test_names_journal_entry(self) -> None:
        error = TransferPendingError(
            "Transfer outcome is not confirmed yet", entry_id="e-42", beneficiary="alice"
        )

        assert isinstance(error, ScheduleError)
        assert error.entry_id == "e-42"
        assert error.beneficiary == "alice"
        assert str(error) == "Transfer outcome is not confirmed yet (journal entry: e-42)"
