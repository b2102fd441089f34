"""
Auction events - observations for external indexing.

Events describe what an operation did; they are not state. An operation
that fails publishes nothing.
"""

from dataclasses import asdict, dataclass
from typing import Callable, Iterator, List, Optional, Type

from proxybid.crypto import bytes_to_hex
from proxybid.utils.logger import get_logger

logger = get_logger("auction.events")


@dataclass(frozen=True)
class AuctionEvent:
    """Base class for auction events."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        data = {"event": self.name}
        for key, value in asdict(self).items():
            data[key] = bytes_to_hex(value) if isinstance(value, bytes) else value
        return data


@dataclass(frozen=True)
class BidPlaced(AuctionEvent):
    bidder: bytes
    amount: int  # cumulative pledge after this bid


@dataclass(frozen=True)
class AuctionCanceled(AuctionEvent):
    refunded_leader: Optional[bytes] = None
    refund: int = 0


@dataclass(frozen=True)
class AuctionFinalized(AuctionEvent):
    winner: Optional[bytes]
    amount: int  # paid to the seller


@dataclass(frozen=True)
class Withdrawal(AuctionEvent):
    party: bytes
    amount: int


Listener = Callable[[AuctionEvent], None]


class EventLog:
    """Ordered log of an auction's events, with listeners."""

    def __init__(self):
        self.events: List[AuctionEvent] = []
        self.listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self.listeners.remove(listener)

    def publish(self, events: List[AuctionEvent]) -> None:
        """
        Append committed events and notify listeners.

        A failing listener is logged and does not affect the others; the
        operation that produced the events has already committed.
        """
        for event in events:
            self.events.append(event)
            for listener in list(self.listeners):
                try:
                    listener(event)
                except Exception:
                    logger.exception(f"Listener failed on {event.name}")

    def of_type(self, event_type: Type[AuctionEvent]) -> List[AuctionEvent]:
        return [e for e in self.events if isinstance(e, event_type)]

    def __iter__(self) -> Iterator[AuctionEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)
