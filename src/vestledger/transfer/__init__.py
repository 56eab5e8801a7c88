"""Asset transfer collaborators."""

from vestledger.transfer.base import AssetTransfer
from vestledger.transfer.http import HttpAssetTransfer
from vestledger.transfer.memory import InMemoryAssetTransfer

__all__ = ["AssetTransfer", "HttpAssetTransfer", "InMemoryAssetTransfer"]
