"""
Common test fixtures shared by all modules.

Provides factory functions for core escrow objects:
- HostLedger with a fixed clock
- CompetitionRegistry wired to an administrator
- InMemoryToken registered with a host
- Funded participants on either rail
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from core.escrow.registry import CompetitionRegistry
from core.host.auth import AdminCapability
from core.host.ledger import HostLedger
from core.host.token import InMemoryToken
from core.schemas.competition import CompetitionMode, NativeAsset, TokenAsset


ADMIN = "0x" + "ad" * 20
REGISTRY = "0x" + "e5" * 20
TOKEN_ADDRESS = "0x" + "70" * 20
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b0" * 20
CAROL = "0x" + "c4" * 20
DAVE = "0x" + "d4" * 20

BASE_TIME = datetime(2026, 1, 27, 21, 35, 0, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


def make_host(clock: Optional[StepClock] = None) -> HostLedger:
    return HostLedger(clock=clock or StepClock())


def make_registry(
    host: Optional[HostLedger] = None,
    admin: str = ADMIN,
    reentrancy_guard: bool = True,
) -> CompetitionRegistry:
    return CompetitionRegistry(
        host or make_host(),
        AdminCapability(admin),
        address=REGISTRY,
        reentrancy_guard=reentrancy_guard,
    )


def make_token(host: HostLedger, address: str = TOKEN_ADDRESS) -> InMemoryToken:
    return InMemoryToken(address, host=host, symbol="USD")


def create_native(registry: CompetitionRegistry, mode: CompetitionMode, fee: int) -> int:
    return registry.create_competition(mode, NativeAsset(), fee, caller=ADMIN)


def create_token(registry: CompetitionRegistry, token: InMemoryToken, mode: CompetitionMode, fee: int) -> int:
    return registry.create_competition(mode, TokenAsset.of(token), fee, caller=ADMIN)


def join_native(registry: CompetitionRegistry, competition_id: int, identities: Iterable[str]) -> None:
    """Fund each identity with exactly the fee and join."""
    fee = registry.get_competition(competition_id).entry_fee
    for identity in identities:
        registry.host.credit(identity, fee)
        registry.join(competition_id, identity, caller=identity, value=fee)


def join_token(
    registry: CompetitionRegistry,
    token: InMemoryToken,
    competition_id: int,
    identities: Iterable[str],
) -> None:
    """Mint, approve and join for each identity."""
    fee = registry.get_competition(competition_id).entry_fee
    for identity in identities:
        token.mint(identity, fee)
        token.approve(identity, registry.address, fee)
        registry.join(competition_id, identity, caller=identity)
