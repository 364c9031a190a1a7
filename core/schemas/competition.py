"""
Schemas & Canonicalization
File: competition.py

Purpose: Competition entity and settlement-asset schemas.

A Competition is created ACTIVE with an empty pool, grows through joins,
is finalized exactly once (COMPLETED), and in batch-proof mode is then
drained by claims. Competitions are never deleted.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Null identity by convention
ZERO_ADDRESS: str = "0x" + "00" * 20


def is_null_identity(identity: Any) -> bool:
    """Check whether an identity is missing, not a string, or the zero address."""
    if not isinstance(identity, str):
        return True
    stripped = identity.strip()
    return not stripped or stripped.lower() == ZERO_ADDRESS


class CompetitionMode(str, Enum):
    """How a competition's pool is released."""
    SINGLE_WINNER = "single_winner"
    BATCH_PROOF = "batch_proof"


class CompetitionStatus(str, Enum):
    """Lifecycle phase. ACTIVE -> COMPLETED only."""
    ACTIVE = "active"
    COMPLETED = "completed"


class NativeAsset(BaseModel):
    """Settlement in the host's native currency."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["native"] = "native"

    @property
    def label(self) -> str:
        return "native"


class TokenAsset(BaseModel):
    """
    Settlement in a fungible token.

    Holds the token collaborator handle itself; the handle is excluded
    from serialization and only its address is exported.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    kind: Literal["token"] = "token"
    address: str = Field(
        ...,
        description="Address of the token collaborator",
        min_length=1,
    )
    token: Any = Field(
        ...,
        description="FungibleToken handle used for transfers",
        exclude=True,
        repr=False,
    )

    @classmethod
    def of(cls, token: Any) -> "TokenAsset":
        """Build an asset reference from a token handle."""
        return cls(address=token.address, token=token)

    @property
    def label(self) -> str:
        return f"token:{self.address}"


SettlementAsset = Annotated[Union[NativeAsset, TokenAsset], Field(discriminator="kind")]


class Competition(BaseModel):
    """
    One instance of entry-fee collection and prize settlement.

    mode, asset, entry_fee, administrator and created_at never change after
    creation. single_winner and claim_root are each written at most once,
    at finalization, and only in their own mode.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: int = Field(..., ge=1, description="Arena index, never reused")
    mode: CompetitionMode
    status: CompetitionStatus = CompetitionStatus.ACTIVE
    asset: SettlementAsset
    entry_fee: int = Field(..., ge=0)
    pooled_balance: int = Field(default=0, ge=0)
    administrator: str = Field(..., min_length=1)
    created_at: datetime
    single_winner: str | None = None
    claim_root: bytes | None = None

    # Bookkeeping counters; pooled_balance == total_deposited - total_paid_out
    participant_count: int = Field(default=0, ge=0)
    total_deposited: int = Field(default=0, ge=0)
    total_paid_out: int = Field(default=0, ge=0)

    @field_validator("claim_root")
    @classmethod
    def validate_claim_root(cls, v: bytes | None) -> bytes | None:
        if v is not None and len(v) != 32:
            raise ValueError(f"claim_root must be 32 bytes, got {len(v)}")
        return v

    @property
    def is_active(self) -> bool:
        return self.status == CompetitionStatus.ACTIVE

    @property
    def is_completed(self) -> bool:
        return self.status == CompetitionStatus.COMPLETED

    @property
    def is_native(self) -> bool:
        return isinstance(self.asset, NativeAsset)

    def summary(self) -> dict[str, Any]:
        """Flat, JSON-friendly view used by the CLI and logs."""
        return {
            "id": self.id,
            "mode": self.mode.value,
            "status": self.status.value,
            "asset": self.asset.label,
            "entry_fee": self.entry_fee,
            "pooled_balance": self.pooled_balance,
            "participants": self.participant_count,
            "total_deposited": self.total_deposited,
            "total_paid_out": self.total_paid_out,
            "single_winner": self.single_winner,
            "claim_root": "0x" + self.claim_root.hex() if self.claim_root else None,
        }
