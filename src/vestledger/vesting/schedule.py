"""
Linear vesting math.

Pure functions of a VestingRecord and a timestamp. No I/O, no clock reads.
All arithmetic is on integers so repeated releases never drift.
"""

from __future__ import annotations

from vestledger.core.types import VestingRecord


def vested_amount(record: VestingRecord, now: int) -> int:
    """
    Amount of the entitlement accrued at ``now``.

    Three regimes:
    - ``now <= start_time``: nothing has vested
    - ``now >= end_time``: the full total has vested
    - otherwise: ``total * elapsed // duration`` (truncated)

    Pausing does not affect accrual; it only blocks releases.
    """
    if now <= record.start_time:
        return 0
    if now >= record.end_time:
        return record.total_amount
    elapsed = now - record.start_time
    return record.total_amount * elapsed // record.duration


def releasable_amount(record: VestingRecord, now: int) -> int:
    """Vested amount not yet released. Never negative."""
    return max(vested_amount(record, now) - record.released_amount, 0)


def unvested_amount(record: VestingRecord, now: int) -> int:
    """Part of the entitlement that has not accrued yet."""
    return record.total_amount - vested_amount(record, now)
