"""
Asset Transfer Capability - one interface over both asset modes.

An auction escrows value in an account of its own (its escrow address).
It only ever asks its capability to:

- deposit(party, amount): move a pledge from the party into escrow
- pay_out(to, amount): move value from escrow to a party
- journal: the undo log of the underlying store, in which the auction opens
  its transaction scope so a failed operation leaves no partial transfer

NativeAsset debits value attached to the bidder's call; LedgerAsset pulls
tokens the bidder approved beforehand. Nothing above this module looks at
which one it holds.
"""

from abc import ABC, abstractmethod
from typing import Tuple

from proxybid.core.assets.journal import Journal
from proxybid.core.assets.native import NativeBank
from proxybid.core.assets.token_ledger import TokenLedger
from proxybid.core.config import AssetMode


class AssetTransferCapability(ABC):
    """Moves value between parties and one auction's escrow account."""

    mode: AssetMode

    def __init__(self, escrow_address: bytes):
        self.escrow_address = escrow_address

    @abstractmethod
    def deposit(self, party: bytes, amount: int) -> Tuple[bool, str]:
        """Move `amount` from `party` into escrow."""

    @abstractmethod
    def pay_out(self, to: bytes, amount: int) -> Tuple[bool, str]:
        """Move `amount` from escrow to `to`."""

    @abstractmethod
    def balance_of(self, party: bytes) -> int:
        """Balance of `party` in this asset."""

    @property
    @abstractmethod
    def journal(self) -> Journal:
        """Undo log of the store backing this asset."""

    def escrow_balance(self) -> int:
        """Value currently held by the escrow account."""
        return self.balance_of(self.escrow_address)


class NativeAsset(AssetTransferCapability):
    """Native currency: pledges arrive as call value, payouts are pushes."""

    mode = AssetMode.NATIVE

    def __init__(self, bank: NativeBank, escrow_address: bytes):
        super().__init__(escrow_address)
        self.bank = bank

    def deposit(self, party: bytes, amount: int) -> Tuple[bool, str]:
        return self.bank.send(party, self.escrow_address, amount)

    def pay_out(self, to: bytes, amount: int) -> Tuple[bool, str]:
        return self.bank.send(self.escrow_address, to, amount)

    def balance_of(self, party: bytes) -> int:
        return self.bank.balance_of(party)

    @property
    def journal(self) -> Journal:
        return self.bank.journal


class LedgerAsset(AssetTransferCapability):
    """Token ledger: pledges are pulled with transfer_from, payouts are transfers."""

    mode = AssetMode.TOKEN

    def __init__(self, token: TokenLedger, escrow_address: bytes):
        super().__init__(escrow_address)
        self.token = token

    def deposit(self, party: bytes, amount: int) -> Tuple[bool, str]:
        return self.token.transfer_from(
            spender=self.escrow_address,
            owner=party,
            to=self.escrow_address,
            amount=amount,
        )

    def pay_out(self, to: bytes, amount: int) -> Tuple[bool, str]:
        return self.token.transfer(self.escrow_address, to, amount)

    def balance_of(self, party: bytes) -> int:
        return self.token.balance_of(party)

    @property
    def journal(self) -> Journal:
        return self.token.journal
