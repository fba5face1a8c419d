"""
Capabilities consumed by the governance core.

The core never owns token balances or the clock. Hosts inject objects that
satisfy these protocols; ManualClock and InMemoryBalances are the
in-process implementations used by embedded hosts and tests.
"""

from typing import Dict, Optional, Protocol, runtime_checkable

from ..exceptions import GridGovException
from ..logger import get_logger

logger = get_logger(__name__)


class InsufficientBalanceError(GridGovException):
    """Raised when a transfer exceeds the sender's balance."""


# ---------------------------------------------------------------------------
# Protocols (structural typing)
# ---------------------------------------------------------------------------

@runtime_checkable
class TokenBalanceProvider(Protocol):
    """Read-only view of the token ledger. Unknown identities hold zero."""

    def balance_of(self, identity: str) -> int: ...


@runtime_checkable
class LogicalClock(Protocol):
    """Monotonically non-decreasing height source."""

    def current_height(self) -> int: ...


# ---------------------------------------------------------------------------
# In-process implementations
# ---------------------------------------------------------------------------

class ManualClock:
    """Clock whose height is advanced explicitly by the host."""

    def __init__(self, height: int = 0):
        if height < 0:
            raise ValueError(f"Height cannot be negative, got {height}")
        self._height = height

    def current_height(self) -> int:
        return self._height

    def set_height(self, height: int) -> None:
        """Jump to *height*; moving backwards is rejected."""
        if height < self._height:
            raise ValueError(
                f"Clock cannot move backwards ({self._height} → {height})"
            )
        self._height = height

    def advance(self, ticks: int = 1) -> int:
        if ticks < 0:
            raise ValueError(f"Cannot advance by negative ticks ({ticks})")
        self._height += ticks
        return self._height

    def __repr__(self) -> str:
        return f"<ManualClock height={self._height}>"


class InMemoryBalances:
    """
    Minimal balance book satisfying TokenBalanceProvider.

    Supports just enough movement (set, transfer) for a host to model
    balances changing between governance calls.
    """

    def __init__(self, balances: Optional[Dict[str, int]] = None):
        self._balances: Dict[str, int] = {}
        for identity, amount in (balances or {}).items():
            self.set_balance(identity, amount)

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def set_balance(self, identity: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Balance cannot be negative, got {amount}")
        self._balances[identity] = amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount cannot be negative, got {amount}")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {balance} < {amount}"
            )
        self._balances[sender] = balance - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        logger.debug(f"Transfer {sender} → {recipient} weight={amount}")

    def __len__(self) -> int:
        return len(self._balances)

    def __repr__(self) -> str:
        return f"<InMemoryBalances accounts={len(self._balances)}>"
