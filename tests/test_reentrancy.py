"""
Reentrancy tests.

Receive hooks on the native rail (HostLedger.register_receiver) and on the
token rail (InMemoryToken.on_receive) call back into the registry while a
payout is in flight. With the guard on the callback fails with
ReentrantCallException; with it off, the state already written before the
transfer makes the callback fail its ordinary preconditions. Either way
value leaves the pool once.
"""

import pytest

from core.merkle import ClaimTree
from core.schemas import (
    AlreadyClaimedException,
    CompetitionMode,
    EscrowException,
    InvalidStateException,
    ReentrantCallException,
    TransferFailureException,
)

from fixtures.common import (
    ADMIN,
    ALICE,
    BOB,
    CAROL,
    DAVE,
    REGISTRY,
    create_native,
    create_token,
    join_native,
    join_token,
    make_registry,
)


class _Attacker:
    """Receive hook that re-enters the registry once and records the outcome."""

    def __init__(self, attack, swallow: bool = True):
        self.attack = attack
        self.swallow = swallow
        self.errors: list[EscrowException] = []
        self.calls = 0

    def __call__(self, sender, amount):
        self.calls += 1
        if self.calls > 1:
            return True
        try:
            self.attack()
        except EscrowException as e:
            if not self.swallow:
                raise
            self.errors.append(e)
        return True


def _batch(registry, token):
    cid = create_token(registry, token, CompetitionMode.BATCH_PROOF, 100)
    join_token(registry, token, cid, [ALICE, BOB])
    tree = ClaimTree({ALICE: 150, BOB: 50})
    registry.publish_claim_root(cid, tree.root, caller=ADMIN)
    return cid, tree


class TestClaimReentrancy:

    @pytest.mark.parametrize(
        "guarded,expected",
        [(True, ReentrantCallException), (False, AlreadyClaimedException)],
    )
    def test_double_claim_from_hook(self, host, token, guarded, expected):
        registry = make_registry(host, reentrancy_guard=guarded)
        cid, tree = _batch(registry, token)
        attacker = _Attacker(lambda: registry.claim(cid, 150, tree.proof_for(ALICE), caller=ALICE))
        token.on_receive(ALICE, attacker)

        assert registry.claim(cid, 150, tree.proof_for(ALICE), caller=ALICE) == 150

        assert len(attacker.errors) == 1
        assert isinstance(attacker.errors[0], expected)
        assert token.balance_of(ALICE) == 150
        c = registry.get_competition(cid)
        assert c.pooled_balance == 50
        assert c.total_paid_out == 150
        assert [e.event_type for e in registry.events(cid)].count("PrizeClaimed") == 1

    def test_unhandled_reentry_aborts_claim(self, registry, token):
        cid, tree = _batch(registry, token)
        attacker = _Attacker(
            lambda: registry.claim(cid, 150, tree.proof_for(ALICE), caller=ALICE),
            swallow=False,
        )
        token.on_receive(ALICE, attacker)

        with pytest.raises(TransferFailureException) as exc_info:
            registry.claim(cid, 150, tree.proof_for(ALICE), caller=ALICE)

        assert isinstance(exc_info.value.__cause__, ReentrantCallException)
        assert registry.claimed_amount(cid, ALICE) == 0
        assert registry.get_competition(cid).pooled_balance == 200
        assert token.balance_of(REGISTRY) == 200

    def test_guard_released_after_failure(self, registry, token):
        cid, tree = _batch(registry, token)
        token.frozen.add(ALICE)
        with pytest.raises(TransferFailureException):
            registry.claim(cid, 150, tree.proof_for(ALICE), caller=ALICE)
        token.frozen.discard(ALICE)

        assert registry.claim(cid, 150, tree.proof_for(ALICE), caller=ALICE) == 150

    def test_other_competition_not_blocked(self, registry, token, host):
        cid, tree = _batch(registry, token)
        other = create_native(registry, CompetitionMode.SINGLE_WINNER, 5)
        host.credit(DAVE, 5)
        attacker = _Attacker(lambda: registry.join(other, DAVE, caller=DAVE, value=5))
        token.on_receive(ALICE, attacker)

        registry.claim(cid, 150, tree.proof_for(ALICE), caller=ALICE)

        assert attacker.errors == []
        assert registry.has_joined(other, DAVE)
        assert registry.get_competition(other).pooled_balance == 5


class TestWinnerReentrancy:

    @pytest.mark.parametrize(
        "guarded,expected",
        [(True, ReentrantCallException), (False, InvalidStateException)],
    )
    def test_join_from_winner_hook(self, host, guarded, expected):
        registry = make_registry(host, reentrancy_guard=guarded)
        cid = create_native(registry, CompetitionMode.SINGLE_WINNER, 10)
        join_native(registry, cid, [ALICE, BOB, CAROL])
        host.credit(DAVE, 10)
        attacker = _Attacker(lambda: registry.join(cid, DAVE, caller=DAVE, value=10))
        host.register_receiver(ALICE, attacker)

        assert registry.set_winner(cid, ALICE, caller=ADMIN) == 30

        assert isinstance(attacker.errors[0], expected)
        assert host.balance_of(ALICE) == 30
        assert host.balance_of(DAVE) == 10
        assert not registry.has_joined(cid, DAVE)
        c = registry.get_competition(cid)
        assert c.is_completed
        assert c.pooled_balance == 0

    def test_settle_again_from_winner_hook(self, unguarded_registry, host):
        registry = unguarded_registry
        cid = create_native(registry, CompetitionMode.SINGLE_WINNER, 10)
        join_native(registry, cid, [ALICE, BOB])
        attacker = _Attacker(lambda: registry.set_winner(cid, BOB, caller=ADMIN))
        host.register_receiver(ALICE, attacker)

        registry.set_winner(cid, ALICE, caller=ADMIN)

        assert isinstance(attacker.errors[0], InvalidStateException)
        assert host.balance_of(BOB) == 0
        assert registry.get_competition(cid).single_winner == ALICE


class TestJoinReentrancy:

    def test_join_from_token_hook(self, registry, token):
        cid = create_token(registry, token, CompetitionMode.BATCH_PROOF, 100)
        token.mint(BOB, 100)
        token.approve(BOB, REGISTRY, 100)
        attacker = _Attacker(lambda: registry.join(cid, BOB, caller=BOB))
        token.on_receive(REGISTRY, attacker)

        join_token(registry, token, cid, [ALICE])

        assert isinstance(attacker.errors[0], ReentrantCallException)
        assert not registry.has_joined(cid, BOB)
        c = registry.get_competition(cid)
        assert c.participant_count == 1
        assert c.pooled_balance == 100
        assert token.balance_of(REGISTRY) == 100
