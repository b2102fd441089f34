"""
Proxy Auction - escrowed English auction with proxy bidding.

Conceptual Background:
---------------------
Bidders pledge value into the auction's escrow. Pledges accumulate per
bidder in the BidLedger; the ProxyBidEngine decides who leads and what the
leader currently owes (the binding bid).

Settlement:
-----------
- cancel: the leader's whole pledge is refunded at once.
- finalize / end early: the seller receives the binding bid from the
  leader's pledge and the leader gets the rest back.
- Every other pledge stays in escrow until its owner calls withdraw().

Safety:
-------
Each state-changing operation runs in a transaction scope:
1. A re-entrancy latch rejects any nested call into the same auction.
2. A scope opens in the asset store's journal, and restoring the auction's
   own state is the first undo entry recorded in it.
3. State is mutated first, transfers happen last.
4. Accounting invariants are checked before commit.
5. Any exception replays the scope's undo entries and propagates. This
   reverts the auction's state and transfers together with whatever other
   auctions did from inside its payout hooks, and nothing else.
Events are published once the outermost operation commits.
"""

import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, List, Optional

from proxybid.core.assets.capability import AssetTransferCapability
from proxybid.core.auction.bid_ledger import BidLedger
from proxybid.core.auction.events import (
    AuctionCanceled,
    AuctionEvent,
    AuctionFinalized,
    BidPlaced,
    EventLog,
    Withdrawal,
)
from proxybid.core.auction.lifecycle import (
    AuctionPhase,
    compute_phase,
    plan_settlement,
    require_bidding_open,
    require_may_end_early,
    require_may_finalize,
    require_settled,
)
from proxybid.core.auction.proxy_bid import compute_new_state
from proxybid.core.config import AssetMode, AuctionConfig
from proxybid.core.errors import (
    AssetTransferFailed,
    BidTooLow,
    InvalidState,
    InvariantViolation,
    NothingToWithdraw,
    ReentrantCall,
    Unauthorized,
)
from proxybid.crypto import bytes_to_hex, short_address
from proxybid.utils.logger import get_logger
from proxybid.utils.validation import validate_amount

logger = get_logger("auction")


def _now(now: Optional[int]) -> int:
    return int(time.time()) if now is None else now


# =============================================================================
# Snapshot
# =============================================================================


@dataclass
class AuctionInfo:
    """Read-only summary of an auction."""
    address: bytes
    name: str
    description: str
    seller: bytes
    start: int
    end: int
    highest_bid: int
    highest_bidder: Optional[bytes]
    highest_binding_bid: int
    min_bid: int
    min_increment: int
    asset_mode: AssetMode
    is_active: bool
    ended: bool
    canceled: bool

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("address", "seller", "highest_bidder"):
            if data[key] is not None:
                data[key] = bytes_to_hex(data[key])
        data["asset_mode"] = self.asset_mode.value
        return data


# =============================================================================
# Proxy Auction
# =============================================================================


class ProxyAuction:
    """
    One lot, one seller, one asset.

    Attributes:
        config: Immutable auction parameters
        asset: Capability moving value in and out of escrow
        address: Escrow address of this auction
        canceled: Canceled latch
        ended: Ended latch
        highest_bidder: Current leader, or None
        highest_bid: Leader's cumulative pledge
        highest_binding_bid: What the leader owes if settled now
        bids: Escrow of record
        events: Committed events
        total_pledged: Sum of all accepted pledges
        total_paid_to_seller: Value released to the seller
        total_refunded: Value returned to bidders
    """

    def __init__(self, config: AuctionConfig, asset: AssetTransferCapability):
        if asset.mode != config.asset_mode:
            raise ValueError(f"Asset mode {asset.mode.value} does not match config {config.asset_mode.value}")

        self.config = config
        self.asset = asset
        self.address = asset.escrow_address

        self.canceled = False
        self.ended = False
        self.highest_bidder: Optional[bytes] = None
        self.highest_bid = 0
        self.highest_binding_bid = 0
        self.bids = BidLedger()
        self.events = EventLog()

        self.total_pledged = 0
        self.total_paid_to_seller = 0
        self.total_refunded = 0

        self._locked = False
        self._pending_events: List[AuctionEvent] = []

    # =========================================================================
    # Configuration Access
    # =========================================================================

    @property
    def seller(self) -> bytes:
        return self.config.seller

    @property
    def start(self) -> int:
        return self.config.start

    @property
    def end(self) -> int:
        return self.config.end

    # =========================================================================
    # Transaction Scope
    # =========================================================================

    def _snapshot(self) -> Dict[str, Any]:
        return {
            "canceled": self.canceled,
            "ended": self.ended,
            "highest_bidder": self.highest_bidder,
            "highest_bid": self.highest_bid,
            "highest_binding_bid": self.highest_binding_bid,
            "total_pledged": self.total_pledged,
            "total_paid_to_seller": self.total_paid_to_seller,
            "total_refunded": self.total_refunded,
            "bids": self.bids.snapshot(),
        }

    def _restore(self, snapshot: Dict[str, Any]) -> None:
        self.bids.restore(snapshot.pop("bids"))
        for key, value in snapshot.items():
            setattr(self, key, value)

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        if self._locked:
            logger.warning(f"Blocked re-entrant {operation} on auction {short_address(self.address)}")
            raise ReentrantCall(f"Re-entrant {operation} rejected")

        journal = self.asset.journal
        self._locked = True
        try:
            with journal.scope():
                state = self._snapshot()
                journal.record(lambda: self._restore(state))
                yield
                self.check_invariants()
                pending, self._pending_events = self._pending_events, []
                # Nested inside another operation, this waits for the outer commit
                journal.after_commit(lambda: self.events.publish(pending))
        finally:
            self._locked = False
            self._pending_events = []

    def _emit(self, event: AuctionEvent) -> None:
        self._pending_events.append(event)

    def _pay(self, to: bytes, amount: int, purpose: str) -> None:
        success, err = self.asset.pay_out(to, amount)
        if not success:
            raise AssetTransferFailed(f"{purpose} of {amount} to {bytes_to_hex(to)} failed: {err}")

    def _require_seller(self, caller: bytes, action: str) -> None:
        if caller != self.seller:
            raise Unauthorized(f"Only the seller may {action}")

    # =========================================================================
    # Bidding
    # =========================================================================

    def place_bid(self, bidder: bytes, amount: int, now: Optional[int] = None) -> int:
        """
        Pledge `amount` more on behalf of `bidder`.

        Args:
            bidder: Bidding party
            amount: Value attached (native) or to pull (token)
            now: Current unix time; defaults to the system clock

        Returns:
            The bidder's cumulative pledge

        Raises:
            InvalidState, InvalidTiming, Unauthorized, BidTooLow,
            AssetTransferFailed
        """
        now = _now(now)
        valid, err = validate_amount(amount)
        if not valid:
            raise ValueError(err)

        with self._transaction("place_bid"):
            require_bidding_open(self.start, self.end, self.canceled, self.ended, now)
            if bidder == self.seller:
                raise Unauthorized("The seller cannot bid")
            if amount <= self.config.min_bid:
                raise BidTooLow(f"Bid {amount} must exceed minimum bid {self.config.min_bid}")

            state = compute_new_state(
                ledger=self.bids.view(),
                current_leader=self.highest_bidder,
                current_highest_bid=self.highest_bid,
                current_binding_bid=self.highest_binding_bid,
                bidder=bidder,
                new_pledge_amount=amount,
                increment=self.config.min_increment,
            )

            # Pull before recording the pledge
            success, err = self.asset.deposit(bidder, amount)
            if not success:
                raise AssetTransferFailed(f"Deposit of {amount} from {bytes_to_hex(bidder)} failed: {err}")

            cumulative = self.bids.credit(bidder, amount)
            self.total_pledged += amount
            self.highest_bidder = state.leader
            self.highest_bid = state.highest_bid
            self.highest_binding_bid = state.binding_bid
            self._emit(BidPlaced(bidder=bidder, amount=cumulative))

        logger.debug(
            f"Bid on {short_address(self.address)}: {short_address(bidder)} pledged {cumulative} "
            f"(leader {short_address(self.highest_bidder)}, binding {self.highest_binding_bid})"
        )
        return cumulative

    # =========================================================================
    # Cancellation
    # =========================================================================

    def cancel_auction(self, caller: bytes) -> None:
        """
        Cancel the auction (seller only).

        The leader's whole pledge is refunded immediately; every other
        bidder withdraws their own.
        """
        with self._transaction("cancel_auction"):
            self._require_seller(caller, "cancel")
            if self.canceled or self.ended:
                raise InvalidState("Auction already canceled or ended")

            self.canceled = True
            leader = self.highest_bidder
            refund = self.bids.release(leader) if leader is not None else 0
            self.total_refunded += refund
            self._emit(AuctionCanceled(refunded_leader=leader, refund=refund))

            if refund > 0:
                self._pay(leader, refund, "Cancellation refund")

        logger.info(f"Auction {short_address(self.address)} canceled (leader refund {refund})")

    # =========================================================================
    # Settlement
    # =========================================================================

    def finalize_auction(self, caller: bytes, now: Optional[int] = None) -> None:
        """Settle after the end time (or after cancellation). Seller only."""
        now = _now(now)
        with self._transaction("finalize_auction"):
            self._require_seller(caller, "finalize")
            require_may_finalize(self.end, self.canceled, self.ended, now)
            self._settle()

    def end_auction_early(self, caller: bytes, now: Optional[int] = None) -> None:
        """Settle before the end time (or after cancellation). Seller only."""
        now = _now(now)
        with self._transaction("end_auction_early"):
            self._require_seller(caller, "end the auction early")
            require_may_end_early(self.end, self.canceled, self.ended, now)
            self._settle()

    def _settle(self) -> None:
        """
        Shared settlement; callers have already passed their timing guard.

        Pays the seller the binding bid and refunds the winner's unused
        ceiling. A canceled auction has no winner to settle.
        """
        self.ended = True
        winner: Optional[bytes] = None
        seller_amount = 0
        refund = 0

        if not self.canceled and self.highest_bidder is not None:
            winner = self.highest_bidder
            settlement = plan_settlement(self.bids.release(winner), self.highest_binding_bid)
            seller_amount = settlement.seller_amount
            refund = settlement.winner_refund
            self.total_paid_to_seller += seller_amount
            self.total_refunded += refund

        self._emit(AuctionFinalized(winner=winner, amount=seller_amount))

        if seller_amount > 0:
            self._pay(self.seller, seller_amount, "Seller payment")
        if refund > 0:
            self._pay(winner, refund, "Winner refund")

        logger.info(
            f"Auction {short_address(self.address)} ended: "
            f"winner={short_address(winner) if winner else None}, paid={seller_amount}, refund={refund}"
        )

    # =========================================================================
    # Withdrawal
    # =========================================================================

    def withdraw(self, caller: bytes) -> int:
        """
        Pay out the caller's escrowed pledge once the auction is settled.

        Returns:
            Amount paid

        Raises:
            InvalidState: auction not yet canceled or ended
            NothingToWithdraw: caller has no escrowed pledge
            AssetTransferFailed: payout refused
        """
        with self._transaction("withdraw"):
            require_settled(self.canceled, self.ended)
            amount = self.bids.release(caller)
            if amount == 0:
                raise NothingToWithdraw(f"No escrowed balance for {bytes_to_hex(caller)}")

            self.total_refunded += amount
            self._emit(Withdrawal(party=caller, amount=amount))
            self._pay(caller, amount, "Withdrawal")

        logger.debug(f"Withdrawal from {short_address(self.address)}: {amount} to {short_address(caller)}")
        return amount

    # =========================================================================
    # Queries
    # =========================================================================

    def phase(self, now: Optional[int] = None) -> AuctionPhase:
        return compute_phase(self.start, self.end, self.canceled, self.ended, _now(now))

    def is_active(self, now: Optional[int] = None) -> bool:
        """Whether bids are accepted at `now`."""
        return self.phase(now) == AuctionPhase.ACTIVE

    def is_settled(self) -> bool:
        return self.canceled or self.ended

    def get_bid(self, party: bytes) -> int:
        """Escrowed pledge of a party."""
        return self.bids.get(party)

    def get_auction_info(self, now: Optional[int] = None) -> AuctionInfo:
        return AuctionInfo(
            address=self.address,
            name=self.config.name,
            description=self.config.description,
            seller=self.seller,
            start=self.start,
            end=self.end,
            highest_bid=self.highest_bid,
            highest_bidder=self.highest_bidder,
            highest_binding_bid=self.highest_binding_bid,
            min_bid=self.config.min_bid,
            min_increment=self.config.min_increment,
            asset_mode=self.config.asset_mode,
            is_active=self.is_active(now),
            ended=self.ended,
            canceled=self.canceled,
        )

    def escrow_balance(self) -> int:
        """Value held in escrow on behalf of bidders."""
        return self.bids.total()

    # =========================================================================
    # Invariants
    # =========================================================================

    def check_invariants(self) -> None:
        """
        Verify accounting invariants.

        Raises:
            InvariantViolation: with the first broken invariant
        """
        if self.highest_binding_bid > self.highest_bid:
            raise InvariantViolation(
                f"Binding bid {self.highest_binding_bid} exceeds highest bid {self.highest_bid}"
            )

        held = self.bids.total()
        accounted = held + self.total_paid_to_seller + self.total_refunded
        if accounted != self.total_pledged:
            raise InvariantViolation(f"Value not conserved: {accounted} accounted vs {self.total_pledged} pledged")

        escrowed = self.asset.escrow_balance()
        if escrowed < held:
            raise InvariantViolation(f"Escrow account holds {escrowed}, ledger owes {held}")

    def __repr__(self) -> str:
        return (
            f"ProxyAuction({self.config.name!r}, leader={short_address(self.highest_bidder) if self.highest_bidder else None}, "
            f"binding={self.highest_binding_bid}, bidders={len(self.bids)})"
        )
