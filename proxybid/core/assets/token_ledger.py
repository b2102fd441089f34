"""
Token Ledger - a fungible token with balances and allowances.

Conceptual Background:
---------------------
Auctions in token mode cannot receive value attached to a call. A bidder
first authorizes the auction (`approve`), and the auction then pulls the
pledge itself (`transfer_from`). Payouts are plain `transfer`s from the
auction's own balance.

Every mutating call reports `(success, error_message)`. A failed call
undoes its own writes through the journal and leaves everything else,
including state other callers changed meanwhile, as it was.
"""

from typing import Callable, Dict, Optional, Tuple

from proxybid.core.assets.journal import Journal
from proxybid.crypto import short_address
from proxybid.utils.logger import get_logger
from proxybid.utils.validation import validate_address, validate_amount

logger = get_logger("assets.token")

ReceiveHook = Callable[[bytes, int], None]


def _journaled_set(journal: Journal, table: dict, key, value: int) -> None:
    previous = table.get(key)
    table[key] = value

    def undo():
        if previous is None:
            table.pop(key, None)
        else:
            table[key] = previous

    journal.record(undo)


class TokenLedger:
    """
    In-memory fungible token.

    Attributes:
        symbol: Ticker symbol
        balances: owner -> balance
        allowances: (owner, spender) -> remaining allowance
        receive_hooks: address -> hook run when the address is credited
        journal: Undo log shared with everything that must revert together
    """

    def __init__(self, symbol: str = "PBT", journal: Optional[Journal] = None):
        self.symbol = symbol
        self.balances: Dict[bytes, int] = {}
        self.allowances: Dict[Tuple[bytes, bytes], int] = {}
        self.receive_hooks: Dict[bytes, ReceiveHook] = {}
        self.supply = 0
        self.journal = journal if journal is not None else Journal()

    # =========================================================================
    # State Access
    # =========================================================================

    def balance_of(self, owner: bytes) -> int:
        """Token balance of an address."""
        return self.balances.get(owner, 0)

    def allowance(self, owner: bytes, spender: bytes) -> int:
        """Remaining amount `spender` may pull from `owner`."""
        return self.allowances.get((owner, spender), 0)

    def total_supply(self) -> int:
        return self.supply

    # =========================================================================
    # Mutation
    # =========================================================================

    def mint(self, to: bytes, amount: int) -> Tuple[bool, str]:
        """Create `amount` new tokens owned by `to`."""
        valid, err = validate_address(to, "to")
        if not valid:
            return False, err
        valid, err = validate_amount(amount)
        if not valid:
            return False, err

        _journaled_set(self.journal, self.balances, to, self.balance_of(to) + amount)
        previous_supply = self.supply
        self.supply += amount
        self.journal.record(lambda: setattr(self, "supply", previous_supply))
        logger.debug(f"Minted {amount} {self.symbol} to {short_address(to)}")
        return True, ""

    def approve(self, owner: bytes, spender: bytes, amount: int) -> Tuple[bool, str]:
        """Set (not add to) the allowance of `spender` over `owner`'s tokens."""
        valid, err = validate_address(spender, "spender")
        if not valid:
            return False, err
        valid, err = validate_amount(amount)
        if not valid:
            return False, err

        _journaled_set(self.journal, self.allowances, (owner, spender), amount)
        logger.debug(f"{short_address(owner)} approved {short_address(spender)} for {amount} {self.symbol}")
        return True, ""

    def transfer(self, sender: bytes, to: bytes, amount: int) -> Tuple[bool, str]:
        """Move `amount` of the sender's own tokens to `to`."""
        return self._move(sender, to, amount)

    def transfer_from(
        self,
        spender: bytes,
        owner: bytes,
        to: bytes,
        amount: int,
    ) -> Tuple[bool, str]:
        """
        Move `amount` from `owner` to `to`, spending `spender`'s allowance.

        Returns:
            (success, error_message)
        """
        valid, err = validate_amount(amount)
        if not valid:
            return False, err

        allowed = self.allowance(owner, spender)
        if allowed < amount:
            return False, f"Insufficient allowance: {allowed} < {amount}"

        _journaled_set(self.journal, self.allowances, (owner, spender), allowed - amount)
        success, err = self._move(owner, to, amount)
        if not success:
            # _move leaves no writes behind on failure
            _journaled_set(self.journal, self.allowances, (owner, spender), allowed)
        return success, err

    def _move(self, sender: bytes, to: bytes, amount: int) -> Tuple[bool, str]:
        valid, err = validate_address(to, "to")
        if not valid:
            return False, err
        valid, err = validate_amount(amount)
        if not valid:
            return False, err

        available = self.balance_of(sender)
        if available < amount:
            return False, f"Insufficient {self.symbol} balance: {available} < {amount}"

        try:
            with self.journal.scope():
                _journaled_set(self.journal, self.balances, sender, available - amount)
                _journaled_set(self.journal, self.balances, to, self.balance_of(to) + amount)

                hook = self.receive_hooks.get(to)
                if hook is not None:
                    hook(sender, amount)
        except Exception as e:
            logger.warning(f"Recipient {short_address(to)} rejected {amount} {self.symbol}: {e}")
            return False, f"Recipient rejected transfer: {e}"

        logger.debug(f"Transferred {amount} {self.symbol} {short_address(sender)} -> {short_address(to)}")
        return True, ""

    # =========================================================================
    # Hooks
    # =========================================================================

    def set_receive_hook(self, address: bytes, hook: Optional[ReceiveHook]) -> None:
        """Install (or remove, with None) the receive hook of an address."""
        if hook is None:
            self.receive_hooks.pop(address, None)
        else:
            self.receive_hooks[address] = hook

    def __repr__(self) -> str:
        return f"TokenLedger(symbol={self.symbol}, holders={len(self.balances)}, supply={self.supply})"
