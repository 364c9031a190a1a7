"""
Schemas & Canonicalization
File: events.py

Purpose: Append-only event records emitted on every registry state
transition. External indexers consume these; the core never reads them
back to make decisions.

sequence and timestamp are assigned by the host log at emission time.
"""

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .versioning import SCHEMA_VERSION, assert_supported_schema_version


EventType = Literal[
    "CompetitionCreated",
    "EntryJoined",
    "WinnerSettled",
    "ClaimRootPublished",
    "PrizeClaimed",
]


class EscrowEvent(BaseModel):
    """Fields shared by every emitted record."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str = Field(default=SCHEMA_VERSION)
    event_type: EventType
    competition_id: int = Field(..., ge=1)
    sequence: int = Field(
        default=0,
        ge=0,
        description="Position in the host log, 1-based; 0 until emitted",
    )
    timestamp: Optional[datetime] = Field(
        default=None,
        description="Host time at emission",
    )

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, v: str) -> str:
        assert_supported_schema_version(v)
        return v


class CompetitionCreated(EscrowEvent):
    event_type: Literal["CompetitionCreated"] = "CompetitionCreated"
    mode: str
    asset: str = Field(..., description="'native' or 'token:<address>'")
    entry_fee: int = Field(..., ge=0)
    administrator: str


class EntryJoined(EscrowEvent):
    event_type: Literal["EntryJoined"] = "EntryJoined"
    participant: str
    payer: str = Field(..., description="Account that supplied the funds")
    amount: int = Field(..., ge=0)
    pooled_balance: int = Field(..., ge=0)


class WinnerSettled(EscrowEvent):
    event_type: Literal["WinnerSettled"] = "WinnerSettled"
    winner: str
    amount: int = Field(..., ge=0)


class ClaimRootPublished(EscrowEvent):
    event_type: Literal["ClaimRootPublished"] = "ClaimRootPublished"
    root: str = Field(..., description="0x-prefixed claim root")


class PrizeClaimed(EscrowEvent):
    event_type: Literal["PrizeClaimed"] = "PrizeClaimed"
    claimant: str
    amount: int = Field(..., gt=0, description="Amount paid by this claim")
    total_claimed: int = Field(..., gt=0, description="Cumulative amount after this claim")


AnyEscrowEvent = Union[
    CompetitionCreated,
    EntryJoined,
    WinnerSettled,
    ClaimRootPublished,
    PrizeClaimed,
]
