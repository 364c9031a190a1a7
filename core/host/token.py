"""
Fungible Token Collaborator

FungibleToken is the interface the escrow core consumes. InMemoryToken is a
reference implementation with balances, allowances, frozen accounts and
optional receive hooks, used by tests, the scenario runner, and anyone
embedding the core without a real token.

Callers are explicit: every mutating method takes the acting account as
its first argument.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, runtime_checkable

from core.host.ledger import HostLedger


logger = logging.getLogger(__name__)


# (sender, amount) -> False to reject; raising also rejects
TokenReceiveHook = Callable[[str, int], Optional[bool]]


@runtime_checkable
class FungibleToken(Protocol):
    """Transfer interface consumed by the payout engine."""

    address: str

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        ...


class InMemoryToken:
    """
    Token with allowance semantics.

    transfer/transfer_from return False (rather than raising) for short
    balances, short allowances and frozen accounts. Receive hooks run after
    the balances move; if a hook raises or returns False the move is undone.
    """

    def __init__(self, address: str, host: HostLedger | None = None, symbol: str = "TKN") -> None:
        self.address = address
        self.symbol = symbol
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._hooks: dict[str, TokenReceiveHook] = {}
        self.frozen: set[str] = set()
        if host is not None:
            host.register(self)

    def __repr__(self) -> str:
        return f"InMemoryToken({self.address!r}, symbol={self.symbol!r})"

    # Transactional

    def snapshot(self) -> tuple[dict[str, int], dict[tuple[str, str], int], frozenset[str]]:
        return dict(self._balances), dict(self._allowances), frozenset(self.frozen)

    def restore(self, snapshot: tuple[dict[str, int], dict[tuple[str, str], int], frozenset[str]]) -> None:
        balances, allowances, frozen = snapshot
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        self.frozen = set(frozen)

    # Views

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values())

    # Mutations

    def mint(self, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot mint a negative amount: {amount}")
        self._balances[to] = self._balances.get(to, 0) + amount

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        self._allowances[(owner, spender)] = amount
        return True

    def on_receive(self, account: str, hook: TokenReceiveHook) -> None:
        self._hooks[account] = hook

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        return self._move(sender, to, amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self._allowances.get((owner, spender), 0)
        if allowed < amount:
            logger.debug("%s: allowance %d < %d for %s by %s", self.symbol, allowed, amount, owner, spender)
            return False
        if not self._move(owner, to, amount):
            return False
        self._allowances[(owner, spender)] = allowed - amount
        return True

    def _move(self, sender: str, to: str, amount: int) -> bool:
        if amount < 0:
            raise ValueError(f"Cannot transfer a negative amount: {amount}")
        if sender in self.frozen or to in self.frozen:
            logger.debug("%s: transfer %s -> %s blocked by frozen account", self.symbol, sender, to)
            return False
        if self._balances.get(sender, 0) < amount:
            logger.debug("%s: insufficient balance for %s", self.symbol, sender)
            return False

        before = self.snapshot()
        self._balances[sender] -= amount
        self._balances[to] = self._balances.get(to, 0) + amount

        hook = self._hooks.get(to)
        if hook is None:
            return True
        try:
            accepted = hook(sender, amount) is not False
        except BaseException:
            self.restore(before)
            raise
        if not accepted:
            self.restore(before)
        return accepted
