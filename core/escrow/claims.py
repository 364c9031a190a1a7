"""
Claim Ledger

Cumulative amount withdrawn per (competition, claimant). Values only ever
increase; a claim records the claimant's new cumulative total and the
payout is the difference from the previous one.
"""

from __future__ import annotations

from core.schemas.errors import AlreadyClaimedException


class ClaimLedger:
    """Monotonic claim records, keyed by competition id then claimant."""

    def __init__(self) -> None:
        self._claimed: dict[int, dict[str, int]] = {}

    def snapshot(self) -> dict[int, dict[str, int]]:
        return {cid: dict(records) for cid, records in self._claimed.items()}

    def restore(self, snapshot: dict[int, dict[str, int]]) -> None:
        self._claimed = {cid: dict(records) for cid, records in snapshot.items()}

    def claimed(self, competition_id: int, claimant: str) -> int:
        return self._claimed.get(competition_id, {}).get(claimant, 0)

    def pending_delta(self, competition_id: int, claimant: str, total_entitlement: int) -> int:
        """
        Amount still payable if the claimant is entitled to total_entitlement.

        Raises:
            AlreadyClaimedException: If nothing remains to be paid
        """
        already = self.claimed(competition_id, claimant)
        if already >= total_entitlement:
            raise AlreadyClaimedException(
                message=(
                    f"{claimant} has already claimed {already} of competition "
                    f"{competition_id}, entitlement is {total_entitlement}"
                ),
                competition_id=competition_id,
                details={
                    "claimant": claimant,
                    "claimed": already,
                    "total_entitlement": total_entitlement,
                },
            )
        return total_entitlement - already

    def record(self, competition_id: int, claimant: str, total_entitlement: int) -> int:
        """
        Raise the claimant's cumulative total to total_entitlement.

        Returns:
            The delta between the new and previous totals

        Raises:
            AlreadyClaimedException: If total_entitlement is not above the current total
        """
        delta = self.pending_delta(competition_id, claimant, total_entitlement)
        self._claimed.setdefault(competition_id, {})[claimant] = total_entitlement
        return delta

    def total_claimed(self, competition_id: int) -> int:
        return sum(self._claimed.get(competition_id, {}).values())

    def claimants(self, competition_id: int) -> dict[str, int]:
        return dict(self._claimed.get(competition_id, {}))
