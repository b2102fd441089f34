"""
Native Bank - native-currency accounts of the hosting environment.

Holds the balance of every account (parties and auction escrows alike) and
moves value by push transfer. A recipient may register a receive hook that
runs after it is credited; if the hook raises, the transfer is refused and
every write made during it (including nested transfers and auction
operations started from the hook) is undone through the bank's journal.
"""

from typing import Callable, Dict, Optional, Tuple

from proxybid.core.assets.journal import Journal
from proxybid.crypto import short_address
from proxybid.utils.logger import get_logger
from proxybid.utils.validation import validate_address, validate_amount

logger = get_logger("assets.native")

# hook(sender, amount) invoked on the recipient after crediting
ReceiveHook = Callable[[bytes, int], None]


class NativeBank:
    """
    In-memory native-currency ledger.

    Attributes:
        balances: address -> balance
        receive_hooks: address -> hook run when the address is paid
        journal: Undo log shared with everything that must revert together
    """

    def __init__(self, journal: Optional[Journal] = None):
        self.balances: Dict[bytes, int] = {}
        self.receive_hooks: Dict[bytes, ReceiveHook] = {}
        self.journal = journal if journal is not None else Journal()

    # =========================================================================
    # State Access
    # =========================================================================

    def balance_of(self, address: bytes) -> int:
        """Native balance of an address."""
        return self.balances.get(address, 0)

    def total_supply(self) -> int:
        """Sum of all balances."""
        return sum(self.balances.values())

    def _set_balance(self, address: bytes, value: int) -> None:
        previous = self.balances.get(address)
        self.balances[address] = value

        def undo():
            if previous is None:
                self.balances.pop(address, None)
            else:
                self.balances[address] = previous

        self.journal.record(undo)

    # =========================================================================
    # Mutation
    # =========================================================================

    def mint(self, address: bytes, amount: int) -> Tuple[bool, str]:
        """
        Credit new currency to an address (genesis / faucet).

        Returns:
            (success, error_message)
        """
        valid, err = validate_address(address)
        if not valid:
            return False, err
        valid, err = validate_amount(amount)
        if not valid:
            return False, err

        self._set_balance(address, self.balance_of(address) + amount)
        logger.debug(f"Minted {amount} to {short_address(address)}")
        return True, ""

    def send(self, sender: bytes, recipient: bytes, amount: int) -> Tuple[bool, str]:
        """
        Push `amount` from sender to recipient.

        Runs the recipient's receive hook, if any, after crediting. Only the
        writes made by this call and its hook are undone on refusal.

        Returns:
            (success, error_message)
        """
        valid, err = validate_address(recipient, "recipient")
        if not valid:
            return False, err
        valid, err = validate_amount(amount)
        if not valid:
            return False, err

        available = self.balance_of(sender)
        if available < amount:
            return False, f"Insufficient balance: {available} < {amount}"

        try:
            with self.journal.scope():
                self._set_balance(sender, available - amount)
                self._set_balance(recipient, self.balance_of(recipient) + amount)

                hook = self.receive_hooks.get(recipient)
                if hook is not None:
                    hook(sender, amount)
        except Exception as e:
            logger.warning(f"Recipient {short_address(recipient)} rejected {amount}: {e}")
            return False, f"Recipient rejected transfer: {e}"

        logger.debug(f"Sent {amount} {short_address(sender)} -> {short_address(recipient)}")
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
        return f"NativeBank(accounts={len(self.balances)}, supply={self.total_supply()})"
