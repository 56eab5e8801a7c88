import pytest

from vestledger.access.control import StaticAccessControl
from vestledger.core.clock import ManualClock
from vestledger.storage.memory import InMemoryStorage
from vestledger.transfer.memory import InMemoryAssetTransfer
from vestledger.vesting.journal import TransferJournal
from vestledger.vesting.ledger import VestingLedger
from vestledger.vesting.lock import ScheduleLockService

# Timestamps of a one-year schedule: start, mid-year, end, end + 1
START = 1614556800
MID = 1630324800
END = 1646092800
AFTER_END = 1646092801

ADMIN = "0xAdmin000000000000000000000000000000000001"
ALICE = "0xA11ce00000000000000000000000000000000002"
BOB = "0xB0b0000000000000000000000000000000000003"
ASSET = "0xT0ken00000000000000000000000000000000004"

MINT_AMOUNT = 1000 * 10**18


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def clock():
    return ManualClock(start=START - 3600)


@pytest.fixture
def custody():
    transfer = InMemoryAssetTransfer()
    transfer.fund_custody(ASSET, 10 * MINT_AMOUNT)
    return transfer


@pytest.fixture
def access():
    return StaticAccessControl([ADMIN])


@pytest.fixture
def journal(storage):
    return TransferJournal(storage)


@pytest.fixture
def ledger(storage, custody, access, clock, journal):
    return VestingLedger(
        storage=storage,
        transfer=custody,
        access_control=access,
        clock=clock,
        lock_service=ScheduleLockService(storage, retry_count=0),
        journal=journal,
    )
