"""
Host environment collaborators.

The escrow core only talks to these through narrow interfaces:
- HostLedger: atomic scopes, clock, native value, event log
- AdminCapability: single-identity authorization check
- FungibleToken: token transfer interface (InMemoryToken reference impl)
"""

from .ledger import HostLedger, ReceiveHook, Transactional, utc_now
from .auth import AdminCapability
from .token import FungibleToken, InMemoryToken, TokenReceiveHook

__all__ = [
    "HostLedger",
    "ReceiveHook",
    "Transactional",
    "utc_now",
    "AdminCapability",
    "FungibleToken",
    "InMemoryToken",
    "TokenReceiveHook",
]
