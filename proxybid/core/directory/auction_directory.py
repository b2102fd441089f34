"""
Auction Directory - creates auctions and tracks which ones exist.

This module provides:
- Auction creation with a fresh escrow address per instance
- Listing (all, active, by seller)
- Membership lookup for authorization checks

Handles are the auctions' escrow addresses, derived from the directory's
own address and a creation nonce. Membership is a dict lookup.
"""

from typing import Dict, List, Optional

from proxybid.core.assets.capability import (
    AssetTransferCapability,
    LedgerAsset,
    NativeAsset,
)
from proxybid.core.assets.native import NativeBank
from proxybid.core.assets.token_ledger import TokenLedger
from proxybid.core.auction.auction import ProxyAuction
from proxybid.core.config import AssetMode, AuctionConfig
from proxybid.crypto import address_from_label, derive_contract_address, short_address
from proxybid.utils.logger import get_logger

logger = get_logger("directory")

DEFAULT_DIRECTORY_LABEL = "proxybid.directory"


class AuctionDirectory:
    """
    Registry and factory of auctions.

    Attributes:
        address: Directory address (seed of auction addresses)
        bank: Native-currency accounts used by native auctions
        token: Token ledger used by token auctions (optional)
        auctions: handle -> auction, in creation order
    """

    def __init__(
        self,
        bank: NativeBank,
        token: Optional[TokenLedger] = None,
        address: Optional[bytes] = None,
    ):
        self.address = address or address_from_label(DEFAULT_DIRECTORY_LABEL)
        self.bank = bank
        self.token = token
        if token is not None and token.journal is not bank.journal:
            # One undo log, so a native auction's abort also reverts token
            # operations run from its payout hooks (and vice versa)
            if token.journal.depth or bank.journal.depth:
                raise ValueError("Cannot attach stores while an operation is in progress")
            token.journal = bank.journal
        self.auctions: Dict[bytes, ProxyAuction] = {}
        self.nonce = 0

        logger.info(f"AuctionDirectory initialized at {short_address(self.address)}")

    # =========================================================================
    # Creation
    # =========================================================================

    def _make_asset(self, mode: AssetMode, escrow_address: bytes) -> AssetTransferCapability:
        if mode == AssetMode.NATIVE:
            return NativeAsset(self.bank, escrow_address)
        if self.token is None:
            raise ValueError("Token auctions need a directory with a token ledger")
        return LedgerAsset(self.token, escrow_address)

    def create_auction(self, config: AuctionConfig) -> bytes:
        """
        Create an auction.

        Args:
            config: Validated auction parameters

        Returns:
            Handle (escrow address) of the new auction
        """
        handle = derive_contract_address(self.address, self.nonce)
        auction = ProxyAuction(config, self._make_asset(config.asset_mode, handle))

        self.nonce += 1
        self.auctions[handle] = auction

        logger.info(
            f"Created auction {short_address(handle)} '{config.name}' "
            f"({config.asset_mode.value}, [{config.start}, {config.end}))"
        )
        return handle

    # =========================================================================
    # Lookup
    # =========================================================================

    def is_known(self, handle: bytes) -> bool:
        """Whether `handle` names an auction created here."""
        return isinstance(handle, (bytes, bytearray)) and bytes(handle) in self.auctions

    def get_auction(self, handle: bytes) -> Optional[ProxyAuction]:
        """Auction for a handle, or None."""
        return self.auctions.get(handle)

    def list_all(self) -> List[bytes]:
        """All handles, oldest first."""
        return list(self.auctions)

    def list_active(self, now: Optional[int] = None) -> List[bytes]:
        """Handles of auctions accepting bids at `now`."""
        return [handle for handle, auction in self.auctions.items() if auction.is_active(now)]

    def list_by_seller(self, seller: bytes) -> List[bytes]:
        """Handles of auctions sold by `seller`."""
        return [handle for handle, auction in self.auctions.items() if auction.seller == seller]

    # =========================================================================
    # Statistics
    # =========================================================================

    def stats(self, now: Optional[int] = None) -> dict:
        """Get directory statistics."""
        auctions = list(self.auctions.values())
        return {
            "total_auctions": len(auctions),
            "active_auctions": sum(1 for a in auctions if a.is_active(now)),
            "canceled_auctions": sum(1 for a in auctions if a.canceled),
            "ended_auctions": sum(1 for a in auctions if a.ended),
            "total_escrowed": sum(a.escrow_balance() for a in auctions),
            "total_paid_to_sellers": sum(a.total_paid_to_seller for a in auctions),
        }

    def __len__(self) -> int:
        return len(self.auctions)
