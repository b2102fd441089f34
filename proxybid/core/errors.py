"""
Auction errors.

Every rejected operation raises one of these. The operation that raised
has made no change to auction state or balances.
"""


class AuctionError(Exception):
    """Base class for all auction rejections."""


class Unauthorized(AuctionError):
    """Caller is not the seller where required, or the seller tried to bid."""


class InvalidTiming(AuctionError):
    """Operation attempted outside its time window."""


class InvalidState(AuctionError):
    """Operation not allowed in the auction's current lifecycle state."""


class ReentrantCall(InvalidState):
    """A state-changing call arrived while another one was still running."""


class BidTooLow(AuctionError):
    """Pledge does not clear the minimum bid or the binding bid plus increment."""


class AssetTransferFailed(AuctionError):
    """The asset layer refused a deposit or payout."""


class NothingToWithdraw(AuctionError):
    """Caller has no escrowed balance."""


class InvariantViolation(AuctionError):
    """Internal accounting check failed."""


__all__ = [
    "AuctionError",
    "Unauthorized",
    "InvalidTiming",
    "InvalidState",
    "ReentrantCall",
    "BidTooLow",
    "AssetTransferFailed",
    "NothingToWithdraw",
    "InvariantViolation",
]
