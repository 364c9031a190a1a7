"""
Participant Ledger

Per-competition record of identities that have paid the entry fee.
Entries are write-once and never removed.
"""

from __future__ import annotations

from core.schemas.errors import AlreadyJoinedException


class ParticipantLedger:
    """One-entry-per-identity sets, keyed by competition id."""

    def __init__(self) -> None:
        # dict used as an insertion-ordered set
        self._entries: dict[int, dict[str, None]] = {}

    def snapshot(self) -> dict[int, dict[str, None]]:
        return {cid: dict(members) for cid, members in self._entries.items()}

    def restore(self, snapshot: dict[int, dict[str, None]]) -> None:
        self._entries = {cid: dict(members) for cid, members in snapshot.items()}

    def has_joined(self, competition_id: int, identity: str) -> bool:
        return identity in self._entries.get(competition_id, {})

    def mark_joined(self, competition_id: int, identity: str) -> None:
        """
        Raises:
            AlreadyJoinedException: If identity already has an entry
        """
        members = self._entries.setdefault(competition_id, {})
        if identity in members:
            raise AlreadyJoinedException(
                message=f"{identity} already joined competition {competition_id}",
                competition_id=competition_id,
                details={"identity": identity},
            )
        members[identity] = None

    def count(self, competition_id: int) -> int:
        return len(self._entries.get(competition_id, {}))

    def participants(self, competition_id: int) -> list[str]:
        """Participants in join order."""
        return list(self._entries.get(competition_id, {}))
