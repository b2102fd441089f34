"""
proxybid Auction Module.

This module provides the escrowed proxy-bidding auction:
- Bid ledger (escrow of record)
- Proxy bid engine (leader and binding price)
- Lifecycle phases, guards and settlement arithmetic
- The ProxyAuction state machine and its events
"""

from proxybid.core.auction.bid_ledger import BidLedger
from proxybid.core.auction.proxy_bid import BidState, compute_new_state
from proxybid.core.auction.lifecycle import (
    AuctionPhase,
    Settlement,
    compute_phase,
    plan_settlement,
)
from proxybid.core.auction.events import (
    AuctionEvent,
    BidPlaced,
    AuctionCanceled,
    AuctionFinalized,
    Withdrawal,
    EventLog,
)
from proxybid.core.auction.auction import ProxyAuction, AuctionInfo

__all__ = [
    # Ledger & engine
    "BidLedger",
    "BidState",
    "compute_new_state",
    # Lifecycle
    "AuctionPhase",
    "Settlement",
    "compute_phase",
    "plan_settlement",
    # Events
    "AuctionEvent",
    "BidPlaced",
    "AuctionCanceled",
    "AuctionFinalized",
    "Withdrawal",
    "EventLog",
    # Auction
    "ProxyAuction",
    "AuctionInfo",
]
