"""
Host Ledger

In-memory host execution environment for the escrow core. Supplies:
- atomic all-or-nothing execution scopes with rollback
- a monotonic UTC clock
- native-currency balances and value transfer with receiver hooks
- the append-only event log

Every stateful component (registry ledgers, tokens) registers itself via
register() so that a failed scope restores all of them together. Scopes
nest: a reentrant call opens its own scope, and an inner failure unwinds
only that scope unless the exception keeps propagating.

Limits:
    Opening a scope snapshots every registered component in full, so the
    cost of each operation grows with the total state held by the host
    rather than with the keys it touches. This is fine for the reference
    host, tests and CLI simulations; a host serving large registries
    should journal writes per key instead.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Optional, Protocol, runtime_checkable

from core.schemas.canonical import dumps_canonical
from core.schemas.events import EscrowEvent


logger = logging.getLogger(__name__)


# (sender, amount) -> False to reject; raising also rejects
ReceiveHook = Callable[[str, int], Optional[bool]]


@runtime_checkable
class Transactional(Protocol):
    """State that can be captured and restored by an atomic scope."""

    def snapshot(self) -> Any:
        ...

    def restore(self, snapshot: Any) -> None:
        ...


class _ReceiverRejected(Exception):
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HostLedger:
    """
    Host environment shared by a registry and its collaborators.

    Usage:
        host = HostLedger()
        host.credit("0xalice", 1_000)
        with host.atomic():
            ...  # any exception restores balances, log and registered state
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or utc_now
        self._last_time: Optional[datetime] = None
        self._balances: dict[str, int] = {}
        self._receivers: dict[str, ReceiveHook] = {}
        self._events: list[EscrowEvent] = []
        self._components: list[Transactional] = []
        self._depth = 0

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def register(self, component: Transactional) -> None:
        """Include a component's state in every atomic scope."""
        if not isinstance(component, Transactional):
            raise TypeError(f"{type(component).__name__} does not implement snapshot/restore")
        if component not in self._components:
            self._components.append(component)

    @property
    def depth(self) -> int:
        """Number of atomic scopes currently open (>1 means reentrant)."""
        return self._depth

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """All-or-nothing scope: on any exception, state is rolled back and the error re-raised."""
        snapshots = [(c, c.snapshot()) for c in self._components]
        balances = dict(self._balances)
        event_count = len(self._events)
        self._depth += 1
        try:
            yield
        except BaseException:
            for component, snap in reversed(snapshots):
                component.restore(snap)
            self._balances = balances
            del self._events[event_count:]
            logger.debug("Rolled back atomic scope at depth %d", self._depth)
            raise
        finally:
            self._depth -= 1

    def now(self) -> datetime:
        """Current host time, never earlier than a previous reading."""
        current = self._clock()
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        if self._last_time is not None and current < self._last_time:
            current = self._last_time
        self._last_time = current
        return current

    # ------------------------------------------------------------------
    # Native currency
    # ------------------------------------------------------------------

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def credit(self, address: str, amount: int) -> None:
        """Mint native currency into an account (test and scenario setup)."""
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        self._balances[address] = self._balances.get(address, 0) + amount

    def register_receiver(self, address: str, hook: ReceiveHook) -> None:
        """Run hook whenever native value is sent to address via send_value()."""
        self._receivers[address] = hook

    def unregister_receiver(self, address: str) -> None:
        self._receivers.pop(address, None)

    def move_value(self, sender: str, to: str, amount: int) -> bool:
        """
        Move value attached to a call. No receiver code runs.

        Returns:
            False if the sender cannot cover the amount
        """
        if amount < 0:
            raise ValueError(f"Cannot move a negative amount: {amount}")
        if self._balances.get(sender, 0) < amount:
            return False
        self._balances[sender] = self._balances.get(sender, 0) - amount
        self._balances[to] = self._balances.get(to, 0) + amount
        return True

    def send_value(self, sender: str, to: str, amount: int) -> bool:
        """
        Transfer native value and execute the receiver's hook.

        The transfer and anything the hook does run in a nested atomic
        scope. A hook returning False rolls the scope back and reports
        failure; a hook raising rolls it back and propagates.

        Returns:
            True on success, False if funds are short or the receiver rejected
        """
        try:
            with self.atomic():
                if not self.move_value(sender, to, amount):
                    logger.debug("Native transfer %s -> %s of %d: insufficient funds", sender, to, amount)
                    return False
                hook = self._receivers.get(to)
                if hook is not None and hook(sender, amount) is False:
                    raise _ReceiverRejected(to)
        except _ReceiverRejected:
            logger.debug("Native transfer %s -> %s of %d rejected by receiver", sender, to, amount)
            return False
        return True

    # ------------------------------------------------------------------
    # Event log
    # ------------------------------------------------------------------

    def emit(self, event: EscrowEvent) -> EscrowEvent:
        """Append an event, assigning its sequence number and timestamp."""
        stamped = event.model_copy(
            update={"sequence": len(self._events) + 1, "timestamp": self.now()}
        )
        self._events.append(stamped)
        logger.debug("Emitted %s #%d for competition %d", stamped.event_type, stamped.sequence, stamped.competition_id)
        return stamped

    def events(self, competition_id: int | None = None) -> list[EscrowEvent]:
        if competition_id is None:
            return list(self._events)
        return [e for e in self._events if e.competition_id == competition_id]

    def export_events(self, competition_id: int | None = None) -> str:
        """Event log as canonical JSON lines."""
        return "\n".join(dumps_canonical(e) for e in self.events(competition_id))
