"""
Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the escrow core.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every exception raised from a registry operation aborts that operation
atomically; none of them are retryable by the core itself.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the escrow core."""

    # Lifecycle
    INVALID_STATE = "INVALID_STATE"
    INVALID_MODE = "INVALID_MODE"
    COMPETITION_NOT_FOUND = "COMPETITION_NOT_FOUND"

    # Authorization
    UNAUTHORIZED = "UNAUTHORIZED"

    # Malformed input
    INVALID_IDENTITY = "INVALID_IDENTITY"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_ROOT = "INVALID_ROOT"

    # Participation
    ALREADY_JOINED = "ALREADY_JOINED"
    NOT_A_PARTICIPANT = "NOT_A_PARTICIPANT"

    # Payment
    PAYMENT_MISMATCH = "PAYMENT_MISMATCH"
    UNEXPECTED_PAYMENT = "UNEXPECTED_PAYMENT"
    TRANSFER_FAILURE = "TRANSFER_FAILURE"

    # Claims
    ROOT_NOT_SET = "ROOT_NOT_SET"
    INVALID_PROOF = "INVALID_PROOF"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    INSUFFICIENT_POOL = "INSUFFICIENT_POOL"

    # Execution
    REENTRANT_CALL = "REENTRANT_CALL"

    # Serialization
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class EscrowError(BaseModel):
    """
    Structured error model.

    Used when an error has to cross a serialization boundary (CLI JSON
    output, scenario reports) instead of being raised.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_STATE],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried unchanged",
    )

    def to_exception(self) -> "EscrowException":
        """Convert this error model to a raisable exception of the right class."""
        exc_cls = _EXCEPTIONS_BY_CODE.get(self.code, EscrowException)
        exc = exc_cls.__new__(exc_cls)
        EscrowException.__init__(
            exc,
            message=self.message,
            code=self.code,
            details=self.details,
            retryable=self.retryable,
        )
        if isinstance(exc, CompetitionException):
            exc.competition_id = self.details.get("competition_id")
        return exc


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class EscrowException(Exception):
    """
    Base exception for all escrow core errors.

    Carries structured error information and can be converted to an
    EscrowError model.
    """

    default_code: str = "ESCROW_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> EscrowError:
        """Convert this exception to an EscrowError model."""
        return EscrowError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CompetitionException(EscrowException):
    """An escrow error scoped to a single competition."""

    def __init__(
        self,
        message: str,
        competition_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = dict(details or {})
        if competition_id is not None:
            full_details["competition_id"] = competition_id
        super().__init__(message=message, details=full_details)
        self.competition_id = competition_id


class CanonicalizationException(EscrowException):
    """Raised when canonical serialization fails."""

    default_code = ErrorCodes.CANONICALIZATION_ERROR


class UnauthorizedException(EscrowException):
    """Raised when a gated operation is called by a non-administrator."""

    default_code = ErrorCodes.UNAUTHORIZED


class CompetitionNotFoundException(CompetitionException):
    default_code = ErrorCodes.COMPETITION_NOT_FOUND


class InvalidStateException(CompetitionException):
    """Operation not allowed in the competition's current lifecycle phase."""

    default_code = ErrorCodes.INVALID_STATE


class InvalidModeException(CompetitionException):
    """Operation does not match the competition's settlement mode."""

    default_code = ErrorCodes.INVALID_MODE


class InvalidIdentityException(CompetitionException):
    default_code = ErrorCodes.INVALID_IDENTITY


class InvalidAmountException(CompetitionException):
    default_code = ErrorCodes.INVALID_AMOUNT


class InvalidRootException(CompetitionException):
    default_code = ErrorCodes.INVALID_ROOT


class AlreadyJoinedException(CompetitionException):
    default_code = ErrorCodes.ALREADY_JOINED


class NotAParticipantException(CompetitionException):
    default_code = ErrorCodes.NOT_A_PARTICIPANT


class PaymentMismatchException(CompetitionException):
    """Native value attached to a join differs from the entry fee."""

    default_code = ErrorCodes.PAYMENT_MISMATCH


class UnexpectedPaymentException(CompetitionException):
    """Native value sent where none is accepted."""

    default_code = ErrorCodes.UNEXPECTED_PAYMENT


class TransferFailureException(CompetitionException):
    """A native or token transfer reported failure or raised."""

    default_code = ErrorCodes.TRANSFER_FAILURE


class RootNotSetException(CompetitionException):
    default_code = ErrorCodes.ROOT_NOT_SET


class InvalidProofException(CompetitionException):
    """Merkle inclusion proof does not reproduce the published root."""

    default_code = ErrorCodes.INVALID_PROOF


class AlreadyClaimedException(CompetitionException):
    default_code = ErrorCodes.ALREADY_CLAIMED


class InsufficientPoolException(CompetitionException):
    default_code = ErrorCodes.INSUFFICIENT_POOL


class ReentrantCallException(CompetitionException):
    """A competition was re-entered while one of its payouts was in flight."""

    default_code = ErrorCodes.REENTRANT_CALL


_EXCEPTIONS_BY_CODE: dict[str, type[EscrowException]] = {
    cls.default_code: cls
    for cls in (
        CanonicalizationException,
        UnauthorizedException,
        CompetitionNotFoundException,
        InvalidStateException,
        InvalidModeException,
        InvalidIdentityException,
        InvalidAmountException,
        InvalidRootException,
        AlreadyJoinedException,
        NotAParticipantException,
        PaymentMismatchException,
        UnexpectedPaymentException,
        TransferFailureException,
        RootNotSetException,
        InvalidProofException,
        AlreadyClaimedException,
        InsufficientPoolException,
        ReentrantCallException,
    )
}
