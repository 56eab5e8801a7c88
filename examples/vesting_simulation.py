"""
Example: One-Year Vesting Schedule

Simulates a team allocation vesting linearly over a year, with a pause,
a mid-year release and an early termination with claw-back.
"""

import asyncio

from vestledger import (
    Config,
    InMemoryAssetTransfer,
    ManualClock,
    VestingClient,
)

ADMIN = "0x9f2A5b3C7d1E4f6A8b0C2d4E6f8A0b2C4d6E8f0A"
ALICE = "0x742d35Cc6634C0532925a3b844Bc9e7595f5e4a0"
TOKEN = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

ONE_TOKEN = 10**18
START = 1614556800
YEAR = 31_536_000


async def main():
    """
    Vesting example showing:
    1. Funding custody and creating a schedule
    2. Pausing and resuming releases
    3. Releasing accrued tokens
    4. Deleting the schedule and clawing back the rest
    """
    print("=== vestledger Vesting Example ===\n")

    custody = InMemoryAssetTransfer()
    custody.fund_custody(TOKEN, 1000 * ONE_TOKEN)
    clock = ManualClock(start=START - 86_400)

    client = VestingClient(
        Config(log_level="INFO"),
        transfer=custody,
        administrators=[ADMIN],
        clock=clock,
    )

    await client.add_vesting_schedule(ADMIN, ALICE, TOKEN, 1000 * ONE_TOKEN, START, START + YEAR)

    # ========================================
    # Six months in, paused then resumed
    # ========================================
    await client.set_pause(ADMIN, ALICE, True)
    clock.set(START + YEAR // 2)
    print(f"  State: {(await client.schedule_state(ALICE)).value}")
    print(f"  Releasable while paused: {await client.releasable_amount(ALICE) // ONE_TOKEN}")
    await client.set_pause(ADMIN, ALICE, False)

    released = await client.vest(ALICE)
    print(f"  Released at mid-year: {released // ONE_TOKEN}")

    # ========================================
    # Nine months in, terminate early
    # ========================================
    clock.set(START + YEAR * 3 // 4)
    result = await client.delete_vesting_schedule(ADMIN, ALICE, settle_beneficiary=True)
    print(f"  Settled to beneficiary: {result.settled_amount // ONE_TOKEN}")
    print(f"  Clawed back to admin:   {result.clawback_amount // ONE_TOKEN}")

    print("\n--- Balances ---")
    print(f"  Beneficiary: {custody.balance_of(TOKEN, ALICE) // ONE_TOKEN}")
    print(f"  Admin:       {custody.balance_of(TOKEN, ADMIN) // ONE_TOKEN}")

    print("\n--- Transfer History ---")
    for entry in await client.history(ALICE):
        print(f"  {entry.kind.value:<10} {entry.amount // ONE_TOKEN:>5} -> {entry.destination[:10]}...")


if __name__ == "__main__":
    asyncio.run(main())
