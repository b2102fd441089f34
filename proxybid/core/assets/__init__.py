"""Asset layer: native currency, token ledger and the capability over both"""
from proxybid.core.assets.journal import Journal
from proxybid.core.assets.native import NativeBank
from proxybid.core.assets.token_ledger import TokenLedger
from proxybid.core.assets.capability import (
    AssetTransferCapability,
    NativeAsset,
    LedgerAsset,
)

__all__ = [
    "Journal",
    "NativeBank",
    "TokenLedger",
    "AssetTransferCapability",
    "NativeAsset",
    "LedgerAsset",
]
