"""
proxybid Auction Directory Module.

Creates auctions and answers membership and listing queries.
"""

from proxybid.core.directory.auction_directory import (
    AuctionDirectory,
    DEFAULT_DIRECTORY_LABEL,
)

__all__ = [
    "AuctionDirectory",
    "DEFAULT_DIRECTORY_LABEL",
]
