"""
Proxy Bid Engine - leader and binding price of an English auction.

Conceptual Background:
---------------------
Each bidder's cumulative pledge is a private ceiling. The public price
(the binding bid) is what the leader would pay if the auction settled now:
one increment above the best competing pledge, never more than the leader's
own ceiling.

Rules, for a pledge bringing `bidder` to `total`:

1. Accept only if total >= binding + increment.
2. No leader yet: bidder leads, highest = binding = total.
3. Another party's total exceeds the leader's ceiling: bidder takes the
   lead, highest = total, binding = min(total, old highest + increment).
4. Another party's total does not exceed the ceiling (ties go to the
   earlier pledge): the leader keeps the lead and the ceiling,
   binding = min(total + increment, highest).
5. The leader raises their own pledge: highest = total,
   binding = min(total, old highest + increment).

Outbid pledges stay in the ledger untouched; they are refunded only
through withdrawal once the auction is settled.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from proxybid.core.errors import BidTooLow


@dataclass(frozen=True)
class BidState:
    """Leader and prices after a pledge."""
    leader: Optional[bytes]
    highest_bid: int
    binding_bid: int


def compute_new_state(
    ledger: Mapping[bytes, int],
    current_leader: Optional[bytes],
    current_highest_bid: int,
    current_binding_bid: int,
    bidder: bytes,
    new_pledge_amount: int,
    increment: int,
) -> BidState:
    """
    Compute leader, highest bid and binding bid after a new pledge.

    Pure: neither the ledger nor any argument is modified.

    Args:
        ledger: bidder -> cumulative pledge before this pledge
        current_leader: Current leader, or None
        current_highest_bid: Leader's cumulative pledge
        current_binding_bid: Current binding price
        bidder: Party making the pledge
        new_pledge_amount: Amount added by this pledge
        increment: Minimum bid increment (> 0)

    Returns:
        BidState after the pledge

    Raises:
        BidTooLow: total does not clear binding + increment
        ValueError: negative pledge or non-positive increment
    """
    if increment <= 0:
        raise ValueError(f"Increment must be positive, got {increment}")
    if new_pledge_amount < 0:
        raise ValueError(f"Pledge must be non-negative, got {new_pledge_amount}")

    total = ledger.get(bidder, 0) + new_pledge_amount
    required = current_binding_bid + increment
    if total < required:
        raise BidTooLow(f"Cumulative bid {total} below required {required}")

    if current_leader is None:
        return BidState(leader=bidder, highest_bid=total, binding_bid=total)

    if bidder == current_leader:
        return BidState(
            leader=bidder,
            highest_bid=total,
            binding_bid=min(total, current_highest_bid + increment),
        )

    if total > current_highest_bid:
        return BidState(
            leader=bidder,
            highest_bid=total,
            binding_bid=min(total, current_highest_bid + increment),
        )

    # Ceiling holds: price rises toward it
    return BidState(
        leader=current_leader,
        highest_bid=current_highest_bid,
        binding_bid=min(total + increment, current_highest_bid),
    )
