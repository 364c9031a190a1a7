"""
Administrator capability.

A registry is constructed with exactly one AdminCapability; gated
operations call require() before touching any state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.schemas.competition import is_null_identity
from core.schemas.errors import UnauthorizedException


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminCapability:
    """The single identity allowed to create and finalize competitions."""

    identity: str

    def __post_init__(self) -> None:
        if is_null_identity(self.identity):
            raise ValueError("Administrator identity must be a non-null address")

    def is_admin(self, caller: str | None) -> bool:
        return caller is not None and caller == self.identity

    def require(self, caller: str | None, operation: str) -> None:
        """
        Raises:
            UnauthorizedException: If caller is not the administrator
        """
        if not self.is_admin(caller):
            logger.debug("Rejected %s by non-administrator %s", operation, caller)
            raise UnauthorizedException(
                message=f"{operation} is restricted to the administrator",
                details={"caller": caller, "operation": operation},
            )
