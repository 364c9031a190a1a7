"""
Escrow core.

- CompetitionRegistry: lifecycle and orchestration
- PayoutEngine: native / token value movement
- ParticipantLedger: one entry per identity per competition
- ClaimLedger: monotonic cumulative claims
"""

from .claims import ClaimLedger
from .participants import ParticipantLedger
from .payout import PayoutEngine
from .registry import DEFAULT_REGISTRY_ADDRESS, CompetitionRegistry

__all__ = [
    "ClaimLedger",
    "ParticipantLedger",
    "PayoutEngine",
    "CompetitionRegistry",
    "DEFAULT_REGISTRY_ADDRESS",
]
