"""
Auction Lifecycle - phases, timing guards and settlement arithmetic.

    PENDING --(now >= start)--> ACTIVE --(now >= end)--> ENDED
       |                          |                        ^
       +---------(cancel)---------+----> CANCELED          |
                                  +------(end early)-------+

CANCELED and ENDED are one-way latches. The phase is derived from the
latches and the clock; CANCELED takes precedence over ENDED, so exactly
one phase describes an auction at any time. Bidding is open on the
half-open window [start, end).
"""

from dataclasses import dataclass
from enum import IntEnum

from proxybid.core.errors import InvalidState, InvalidTiming


class AuctionPhase(IntEnum):
    """Lifecycle phase of an auction."""
    PENDING = 0     # Before start
    ACTIVE = 1      # Accepting bids
    CANCELED = 2    # Canceled by the seller (terminal)
    ENDED = 3       # Past end, or settled (terminal)


def compute_phase(start: int, end: int, canceled: bool, ended: bool, now: int) -> AuctionPhase:
    """Phase of an auction at time `now`."""
    if canceled:
        return AuctionPhase.CANCELED
    if ended or now >= end:
        return AuctionPhase.ENDED
    if now >= start:
        return AuctionPhase.ACTIVE
    return AuctionPhase.PENDING


# =============================================================================
# Guards
# =============================================================================


def require_bidding_open(start: int, end: int, canceled: bool, ended: bool, now: int) -> None:
    """Raise unless a bid may be placed at `now`."""
    if canceled or ended:
        raise InvalidState("Auction is no longer accepting bids")
    if now < start:
        raise InvalidTiming(f"Auction has not started (starts at {start}, now {now})")
    if now >= end:
        raise InvalidTiming(f"Auction has ended (ended at {end}, now {now})")


def require_may_finalize(end: int, canceled: bool, ended: bool, now: int) -> None:
    """Raise unless finalization is allowed: after end, or once canceled."""
    if ended:
        raise InvalidState("Auction already ended")
    if not (now > end or canceled):
        raise InvalidTiming(f"Cannot finalize before end ({end}, now {now})")


def require_may_end_early(end: int, canceled: bool, ended: bool, now: int) -> None:
    """Raise unless ending early is allowed: before end, or once canceled."""
    if ended:
        raise InvalidState("Auction already ended")
    if not (now < end or canceled):
        raise InvalidTiming(f"Auction already past end ({end}, now {now}); finalize instead")


def require_settled(canceled: bool, ended: bool) -> None:
    """Raise unless the auction has been canceled or ended."""
    if not (canceled or ended):
        raise InvalidState("Auction is neither canceled nor ended")


# =============================================================================
# Settlement
# =============================================================================


@dataclass(frozen=True)
class Settlement:
    """How the winner's escrow is split at settlement."""
    seller_amount: int
    winner_refund: int


def plan_settlement(winner_pledge: int, binding_bid: int) -> Settlement:
    """
    Split the winner's escrowed pledge.

    The seller receives the binding bid; the unused part of the winner's
    ceiling goes back to the winner.
    """
    if binding_bid > winner_pledge:
        raise ValueError(f"Binding bid {binding_bid} exceeds escrowed pledge {winner_pledge}")
    return Settlement(seller_amount=binding_bid, winner_refund=winner_pledge - binding_bid)
