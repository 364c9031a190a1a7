"""
Competition Registry

Owns the lifecycle of competitions and orchestrates join, finalization and
claims over ParticipantLedger, ClaimLedger and PayoutEngine.

Execution rules:
1. Every public mutating operation runs inside one HostLedger.atomic()
   scope. Any exception leaves no observable effect.
2. Checks, then effects, then interactions: all ledger mutations for an
   operation are written before PayoutEngine is asked to move value, so a
   reentrant call made from inside a transfer sees post-mutation state and
   fails the same preconditions a fresh call would.
3. While a competition has an outbound call in flight it is marked busy;
   any reentrant operation on it raises ReentrantCallException. This guard
   is additional to rule 2 and can be disabled in configuration.

Storage is an arena keyed by an incrementing id. Competitions are never
removed, so the arena grows with every create_competition call.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Sequence

from core.crypto.hashing import coerce_digest, is_zero_hash, to_hex
from core.escrow.claims import ClaimLedger
from core.escrow.participants import ParticipantLedger
from core.escrow.payout import PayoutEngine
from core.host.auth import AdminCapability
from core.host.ledger import HostLedger
from core.merkle.merkle_proofs import MerkleVerifier
from core.schemas.competition import (
    Competition,
    CompetitionMode,
    CompetitionStatus,
    SettlementAsset,
    is_null_identity,
)
from core.schemas.errors import (
    CompetitionNotFoundException,
    InsufficientPoolException,
    InvalidAmountException,
    InvalidIdentityException,
    InvalidModeException,
    InvalidProofException,
    InvalidRootException,
    InvalidStateException,
    NotAParticipantException,
    ReentrantCallException,
    RootNotSetException,
    UnexpectedPaymentException,
)
from core.schemas.events import (
    ClaimRootPublished,
    CompetitionCreated,
    EntryJoined,
    EscrowEvent,
    PrizeClaimed,
    WinnerSettled,
)

if TYPE_CHECKING:
    from core.config.runtime import RuntimeConfig


logger = logging.getLogger(__name__)


DEFAULT_REGISTRY_ADDRESS = "0x" + "e5" * 20


def _require_amount(value: object, name: str, competition_id: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidAmountException(
            message=f"{name} must be a non-negative integer, got {value!r}",
            competition_id=competition_id,
            details={name: repr(value)},
        )
    return value


class CompetitionRegistry:
    """
    Escrow and prize-settlement registry.

    Usage:
        host = HostLedger()
        registry = CompetitionRegistry(host, AdminCapability("0xadmin"))
        cid = registry.create_competition(CompetitionMode.SINGLE_WINNER, NativeAsset(), 10, caller="0xadmin")
        registry.join(cid, "0xalice", caller="0xalice", value=10)
        registry.set_winner(cid, "0xalice", caller="0xadmin")
    """

    def __init__(
        self,
        host: HostLedger,
        admin: AdminCapability,
        address: str = DEFAULT_REGISTRY_ADDRESS,
        reentrancy_guard: bool = True,
    ) -> None:
        self._host = host
        self._admin = admin
        self.address = address
        self.reentrancy_guard = reentrancy_guard

        self._competitions: dict[int, Competition] = {}
        self._next_id = 1
        self._busy: set[int] = set()

        self.participants = ParticipantLedger()
        self.claims = ClaimLedger()
        self.payouts = PayoutEngine(host, address)

        host.register(self)
        host.register(self.participants)
        host.register(self.claims)
        host.register_receiver(address, self._reject_unsolicited)

    @classmethod
    def from_config(cls, config: "RuntimeConfig", host: HostLedger | None = None) -> "CompetitionRegistry":
        """Build a registry (and a fresh host if none given) from runtime configuration."""
        if not config.registry.administrator:
            raise ValueError("Registry administrator is not configured")
        return cls(
            host or HostLedger(),
            AdminCapability(config.registry.administrator),
            address=config.registry.address,
            reentrancy_guard=config.registry.reentrancy_guard,
        )

    @property
    def host(self) -> HostLedger:
        return self._host

    @property
    def administrator(self) -> str:
        return self._admin.identity

    # ------------------------------------------------------------------
    # Transactional
    # ------------------------------------------------------------------

    def snapshot(self) -> tuple[dict[int, Competition], int]:
        # Competition fields are immutable values, so a shallow copy suffices
        return {cid: c.model_copy() for cid, c in self._competitions.items()}, self._next_id

    def restore(self, snapshot: tuple[dict[int, Competition], int]) -> None:
        competitions, next_id = snapshot
        self._competitions = {cid: c.model_copy() for cid, c in competitions.items()}
        self._next_id = next_id

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get(self, competition_id: int) -> Competition:
        competition = self._competitions.get(competition_id)
        if competition is None:
            raise CompetitionNotFoundException(
                message=f"Competition {competition_id} does not exist",
                competition_id=competition_id,
            )
        return competition

    def _check_not_busy(self, competition_id: int) -> None:
        if competition_id in self._busy:
            logger.warning("Reentrant call into competition %d rejected", competition_id)
            raise ReentrantCallException(
                message=f"Competition {competition_id} has a transfer in flight",
                competition_id=competition_id,
            )

    @contextmanager
    def _external_call(self, competition_id: int) -> Iterator[None]:
        if not self.reentrancy_guard:
            yield
            return
        self._busy.add(competition_id)
        try:
            yield
        finally:
            self._busy.discard(competition_id)

    def _reject_unsolicited(self, sender: str, amount: int) -> bool:
        raise UnexpectedPaymentException(
            message="Registry does not accept native value outside join",
            details={"sender": sender, "amount": amount},
        )

    def _emit(self, event: EscrowEvent) -> None:
        self._host.emit(event)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_competition(
        self,
        mode: CompetitionMode,
        asset: SettlementAsset,
        entry_fee: int,
        *,
        caller: str,
    ) -> int:
        """
        Create an ACTIVE competition with an empty pool.

        Returns:
            The new competition id

        Raises:
            UnauthorizedException: caller is not the administrator
            InvalidAmountException: entry_fee is not a non-negative integer
        """
        self._admin.require(caller, "create_competition")
        mode = CompetitionMode(mode)
        _require_amount(entry_fee, "entry_fee")

        with self._host.atomic():
            competition_id = self._next_id
            self._next_id += 1
            competition = Competition(
                id=competition_id,
                mode=mode,
                asset=asset,
                entry_fee=entry_fee,
                administrator=caller,
                created_at=self._host.now(),
            )
            self._competitions[competition_id] = competition
            self._emit(CompetitionCreated(
                competition_id=competition_id,
                mode=mode.value,
                asset=competition.asset.label,
                entry_fee=entry_fee,
                administrator=caller,
            ))

        logger.info(
            "Created competition %d (%s, %s, fee=%d)",
            competition_id, mode.value, competition.asset.label, entry_fee,
        )
        return competition_id

    # ------------------------------------------------------------------
    # Join
    # ------------------------------------------------------------------

    def join(self, competition_id: int, identity: str, *, caller: str, value: int = 0) -> None:
        """
        Enter identity into a competition, paid for by caller.

        Native rail: value must equal the entry fee exactly.
        Token rail: value must be 0 and caller must have approved the
        registry for the entry fee.

        Raises:
            CompetitionNotFoundException, InvalidStateException,
            InvalidIdentityException, AlreadyJoinedException,
            InvalidAmountException, PaymentMismatchException,
            UnexpectedPaymentException, TransferFailureException,
            ReentrantCallException
        """
        with self._host.atomic():
            competition = self._get(competition_id)
            self._check_not_busy(competition_id)
            if not competition.is_active:
                raise InvalidStateException(
                    message=f"Competition {competition_id} is not accepting entries",
                    competition_id=competition_id,
                    details={"status": competition.status.value},
                )
            if is_null_identity(identity):
                raise InvalidIdentityException(
                    message="Participant identity must be non-null",
                    competition_id=competition_id,
                )
            _require_amount(value, "value", competition_id)

            self.participants.mark_joined(competition_id, identity)

            with self._external_call(competition_id):
                self.payouts.deposit(
                    competition.asset,
                    payer=caller,
                    value=value,
                    amount=competition.entry_fee,
                    competition_id=competition_id,
                )

            # a failed reentrant scope may have restored the arena
            competition = self._get(competition_id)
            competition.pooled_balance += competition.entry_fee
            competition.total_deposited += competition.entry_fee
            competition.participant_count += 1

            self._emit(EntryJoined(
                competition_id=competition_id,
                participant=identity,
                payer=caller,
                amount=competition.entry_fee,
                pooled_balance=competition.pooled_balance,
            ))

        logger.info(
            "%s joined competition %d (pool=%d)",
            identity, competition_id, competition.pooled_balance,
        )

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def set_winner(self, competition_id: int, winner: str, *, caller: str) -> int:
        """
        Finalize a single-winner competition and pay the whole pool to winner.

        Status, winner and the zeroed pool are committed before the
        transfer is issued.

        Returns:
            The amount paid

        Raises:
            UnauthorizedException, CompetitionNotFoundException,
            InvalidModeException, InvalidStateException,
            InvalidIdentityException, NotAParticipantException,
            TransferFailureException, ReentrantCallException
        """
        self._admin.require(caller, "set_winner")

        with self._host.atomic():
            competition = self._get(competition_id)
            self._check_not_busy(competition_id)
            if competition.mode != CompetitionMode.SINGLE_WINNER:
                raise InvalidModeException(
                    message=f"Competition {competition_id} is not single-winner",
                    competition_id=competition_id,
                    details={"mode": competition.mode.value},
                )
            if not competition.is_active:
                raise InvalidStateException(
                    message=f"Competition {competition_id} is already finalized",
                    competition_id=competition_id,
                    details={"status": competition.status.value},
                )
            if is_null_identity(winner):
                raise InvalidIdentityException(
                    message="Winner identity must be non-null",
                    competition_id=competition_id,
                )
            if not self.participants.has_joined(competition_id, winner):
                raise NotAParticipantException(
                    message=f"{winner} did not join competition {competition_id}",
                    competition_id=competition_id,
                    details={"winner": winner},
                )

            competition.single_winner = winner
            competition.status = CompetitionStatus.COMPLETED
            payout_amount = competition.pooled_balance
            competition.pooled_balance = 0
            competition.total_paid_out += payout_amount

            if payout_amount > 0:
                with self._external_call(competition_id):
                    self.payouts.pay(
                        competition.asset, winner, payout_amount, competition_id=competition_id,
                    )

            self._emit(WinnerSettled(
                competition_id=competition_id,
                winner=winner,
                amount=payout_amount,
            ))

        logger.info("Competition %d settled: %d to %s", competition_id, payout_amount, winner)
        return payout_amount

    def publish_claim_root(self, competition_id: int, root: bytes | str, *, caller: str) -> None:
        """
        Finalize a batch-proof competition by committing to a claim root.

        No funds move; the pool stays available for claims.

        Raises:
            UnauthorizedException, CompetitionNotFoundException,
            InvalidModeException, InvalidStateException,
            InvalidRootException, ReentrantCallException
        """
        self._admin.require(caller, "publish_claim_root")

        with self._host.atomic():
            competition = self._get(competition_id)
            self._check_not_busy(competition_id)
            if competition.mode != CompetitionMode.BATCH_PROOF:
                raise InvalidModeException(
                    message=f"Competition {competition_id} is not batch-proof",
                    competition_id=competition_id,
                    details={"mode": competition.mode.value},
                )
            if not competition.is_active:
                raise InvalidStateException(
                    message=f"Competition {competition_id} is already finalized",
                    competition_id=competition_id,
                    details={"status": competition.status.value},
                )
            try:
                digest = coerce_digest(root)
            except (TypeError, ValueError) as e:
                raise InvalidRootException(
                    message=f"Malformed claim root: {e}",
                    competition_id=competition_id,
                ) from e
            if is_zero_hash(digest):
                raise InvalidRootException(
                    message="Claim root must be non-zero",
                    competition_id=competition_id,
                )

            competition.claim_root = digest
            competition.status = CompetitionStatus.COMPLETED

            self._emit(ClaimRootPublished(
                competition_id=competition_id,
                root=to_hex(digest),
            ))

        logger.info("Competition %d claim root published: %s", competition_id, to_hex(digest))

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    def claim(
        self,
        competition_id: int,
        total_entitlement: int,
        proof: Sequence[bytes | str],
        *,
        caller: str,
    ) -> int:
        """
        Withdraw the unclaimed part of caller's cumulative entitlement.

        Args:
            competition_id: Batch-proof competition
            total_entitlement: Caller's cumulative entitlement under the root
            proof: Sibling hashes (bytes or 0x-hex), bottom-up
            caller: The claimant

        Returns:
            The amount paid by this claim

        Raises:
            CompetitionNotFoundException, InvalidModeException,
            InvalidStateException, RootNotSetException,
            InvalidAmountException, InvalidProofException,
            AlreadyClaimedException, InsufficientPoolException,
            TransferFailureException, ReentrantCallException
        """
        with self._host.atomic():
            competition = self._get(competition_id)
            self._check_not_busy(competition_id)
            if competition.mode != CompetitionMode.BATCH_PROOF:
                raise InvalidModeException(
                    message=f"Competition {competition_id} is not batch-proof",
                    competition_id=competition_id,
                    details={"mode": competition.mode.value},
                )
            if not competition.is_completed:
                raise InvalidStateException(
                    message=f"Competition {competition_id} is not finalized yet",
                    competition_id=competition_id,
                    details={"status": competition.status.value},
                )
            if competition.claim_root is None or is_zero_hash(competition.claim_root):
                raise RootNotSetException(
                    message=f"Competition {competition_id} has no claim root",
                    competition_id=competition_id,
                )
            if _require_amount(total_entitlement, "total_entitlement", competition_id) == 0:
                raise InvalidAmountException(
                    message="total_entitlement must be greater than zero",
                    competition_id=competition_id,
                )

            try:
                siblings = [coerce_digest(s) for s in proof]
            except (TypeError, ValueError) as e:
                raise InvalidProofException(
                    message=f"Malformed proof element: {e}",
                    competition_id=competition_id,
                    details={"claimant": caller},
                ) from e
            if not MerkleVerifier.verify_claim(caller, total_entitlement, siblings, competition.claim_root):
                raise InvalidProofException(
                    message=f"Proof does not match claim root for {caller}",
                    competition_id=competition_id,
                    details={"claimant": caller, "total_entitlement": total_entitlement},
                )

            delta = self.claims.pending_delta(competition_id, caller, total_entitlement)
            if delta > competition.pooled_balance:
                raise InsufficientPoolException(
                    message=(
                        f"Claim of {delta} exceeds pooled balance "
                        f"{competition.pooled_balance} of competition {competition_id}"
                    ),
                    competition_id=competition_id,
                    details={"delta": delta, "pooled_balance": competition.pooled_balance},
                )

            self.claims.record(competition_id, caller, total_entitlement)
            competition.pooled_balance -= delta
            competition.total_paid_out += delta

            with self._external_call(competition_id):
                self.payouts.pay(competition.asset, caller, delta, competition_id=competition_id)

            self._emit(PrizeClaimed(
                competition_id=competition_id,
                claimant=caller,
                amount=delta,
                total_claimed=total_entitlement,
            ))

        logger.info(
            "%s claimed %d from competition %d (total=%d, pool=%d)",
            caller, delta, competition_id, total_entitlement, competition.pooled_balance,
        )
        return delta

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    def get_competition(self, competition_id: int) -> Competition:
        """Detached copy of a competition's full record."""
        return self._get(competition_id).model_copy()

    def has_joined(self, competition_id: int, identity: str) -> bool:
        self._get(competition_id)
        return self.participants.has_joined(competition_id, identity)

    def claimed_amount(self, competition_id: int, identity: str) -> int:
        self._get(competition_id)
        return self.claims.claimed(competition_id, identity)

    def remaining_entitlement(self, competition_id: int, identity: str, total_entitlement: int) -> int:
        """Unclaimed part of an entitlement; does not verify the entitlement."""
        return max(0, total_entitlement - self.claimed_amount(competition_id, identity))

    @property
    def competition_count(self) -> int:
        return len(self._competitions)

    def competition_ids(self) -> list[int]:
        return sorted(self._competitions)

    def events(self, competition_id: int | None = None) -> list[EscrowEvent]:
        return self._host.events(competition_id)
