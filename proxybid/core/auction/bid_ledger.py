"""
Bid Ledger - the escrow of record for one auction.

Maps each bidder to the cumulative amount they have pledged and not yet
been paid back. The sum of all entries equals the value the auction holds
on the bidders' behalf.
"""

from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple


class BidLedger:
    """
    bidder -> cumulative pledge.

    Entries only grow through credit() and only shrink to zero through
    release(); there is no partial debit.
    """

    def __init__(self):
        self._pledges: Dict[bytes, int] = {}

    def get(self, bidder: bytes) -> int:
        """Cumulative pledge of a bidder (0 if none)."""
        return self._pledges.get(bidder, 0)

    def credit(self, bidder: bytes, amount: int) -> int:
        """
        Add `amount` to a bidder's pledge.

        Returns:
            The bidder's new cumulative pledge
        """
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        total = self.get(bidder) + amount
        self._pledges[bidder] = total
        return total

    def release(self, bidder: bytes) -> int:
        """
        Zero a bidder's entry.

        Returns:
            The amount the entry held
        """
        return self._pledges.pop(bidder, 0)

    def total(self) -> int:
        """Sum of all pledges held."""
        return sum(self._pledges.values())

    def bidders(self) -> List[bytes]:
        """Bidders with a non-zero entry."""
        return [b for b, v in self._pledges.items() if v > 0]

    def view(self) -> Mapping[bytes, int]:
        """Read-only live view of the entries."""
        return MappingProxyType(self._pledges)

    def items(self) -> Iterator[Tuple[bytes, int]]:
        return iter(self._pledges.items())

    # =========================================================================
    # Checkpoints
    # =========================================================================

    def snapshot(self) -> Dict[bytes, int]:
        return dict(self._pledges)

    def restore(self, snapshot: Dict[bytes, int]) -> None:
        self._pledges = dict(snapshot)

    def __contains__(self, bidder: bytes) -> bool:
        return self.get(bidder) > 0

    def __len__(self) -> int:
        return len(self.bidders())

    def __repr__(self) -> str:
        return f"BidLedger(bidders={len(self)}, total={self.total()})"
