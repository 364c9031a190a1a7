"""
Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Version constants
from .versioning import (
    SCHEMA_VERSION,
    SUPPORTED_SCHEMA_VERSIONS,
    SchemaVersion,
    UnsupportedSchemaVersionError,
    assert_supported_schema_version,
)

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    AlreadyClaimedException,
    AlreadyJoinedException,
    CanonicalizationException,
    CompetitionException,
    CompetitionNotFoundException,
    ErrorCodes,
    EscrowError,
    EscrowException,
    InsufficientPoolException,
    InvalidAmountException,
    InvalidIdentityException,
    InvalidModeException,
    InvalidProofException,
    InvalidRootException,
    InvalidStateException,
    NotAParticipantException,
    PaymentMismatchException,
    ReentrantCallException,
    RootNotSetException,
    TransferFailureException,
    UnauthorizedException,
    UnexpectedPaymentException,
)

# Competition schemas
from .competition import (
    ZERO_ADDRESS,
    Competition,
    CompetitionMode,
    CompetitionStatus,
    NativeAsset,
    SettlementAsset,
    TokenAsset,
    is_null_identity,
)

# Event schemas
from .events import (
    AnyEscrowEvent,
    ClaimRootPublished,
    CompetitionCreated,
    EntryJoined,
    EscrowEvent,
    EventType,
    PrizeClaimed,
    WinnerSettled,
)

__all__ = [
    # Versioning
    "SCHEMA_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
    "SchemaVersion",
    "UnsupportedSchemaVersionError",
    "assert_supported_schema_version",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    "loads_canonical",
    # Errors
    "AlreadyClaimedException",
    "AlreadyJoinedException",
    "CanonicalizationException",
    "CompetitionException",
    "CompetitionNotFoundException",
    "ErrorCodes",
    "EscrowError",
    "EscrowException",
    "InsufficientPoolException",
    "InvalidAmountException",
    "InvalidIdentityException",
    "InvalidModeException",
    "InvalidProofException",
    "InvalidRootException",
    "InvalidStateException",
    "NotAParticipantException",
    "PaymentMismatchException",
    "ReentrantCallException",
    "RootNotSetException",
    "TransferFailureException",
    "UnauthorizedException",
    "UnexpectedPaymentException",
    # Competition
    "ZERO_ADDRESS",
    "Competition",
    "CompetitionMode",
    "CompetitionStatus",
    "NativeAsset",
    "SettlementAsset",
    "TokenAsset",
    "is_null_identity",
    # Events
    "AnyEscrowEvent",
    "ClaimRootPublished",
    "CompetitionCreated",
    "EntryJoined",
    "EscrowEvent",
    "EventType",
    "PrizeClaimed",
    "WinnerSettled",
]
