"""
Payout Engine

Dual-rail value movement for the registry account:
- NativeAsset: host native currency
- TokenAsset: fungible-token collaborator

Dispatch is explicit on the asset variant. Every failure raises
TransferFailureException (or a payment-validation error for deposits);
the enclosing atomic scope then discards all of the operation's effects.
There is no deferred or retried payout.
"""

from __future__ import annotations

import logging

from core.host.ledger import HostLedger
from core.schemas.competition import NativeAsset, SettlementAsset, TokenAsset
from core.schemas.errors import (
    PaymentMismatchException,
    TransferFailureException,
    UnexpectedPaymentException,
)


logger = logging.getLogger(__name__)


class PayoutEngine:
    """Moves value in and out of the registry account on a given rail."""

    def __init__(self, host: HostLedger, account: str) -> None:
        self._host = host
        self.account = account

    def escrowed(self, asset: SettlementAsset) -> int:
        """Balance actually held by the registry account on a rail."""
        if isinstance(asset, NativeAsset):
            return self._host.balance_of(self.account)
        if isinstance(asset, TokenAsset):
            return asset.token.balance_of(self.account)
        raise TypeError(f"Unknown settlement asset: {asset!r}")

    def deposit(
        self,
        asset: SettlementAsset,
        payer: str,
        value: int,
        amount: int,
        competition_id: int | None = None,
    ) -> None:
        """
        Pull exactly `amount` from payer into the registry account.

        Args:
            asset: Settlement rail
            payer: Account supplying the funds (the caller)
            value: Native value attached to the call
            amount: Required amount (the entry fee)

        Raises:
            PaymentMismatchException: Native value differs from amount
            UnexpectedPaymentException: Native value attached on the token rail
            TransferFailureException: Funds could not be moved
        """
        if isinstance(asset, NativeAsset):
            if value != amount:
                raise PaymentMismatchException(
                    message=f"Attached value {value} does not equal entry fee {amount}",
                    competition_id=competition_id,
                    details={"value": value, "entry_fee": amount},
                )
            if not self._host.move_value(payer, self.account, value):
                raise TransferFailureException(
                    message=f"{payer} cannot cover attached value {value}",
                    competition_id=competition_id,
                    details={"payer": payer, "amount": value, "rail": "native"},
                )
            return

        if isinstance(asset, TokenAsset):
            if value != 0:
                raise UnexpectedPaymentException(
                    message="Native value sent to a token-settled competition",
                    competition_id=competition_id,
                    details={"value": value, "token": asset.address},
                )
            self._call_token(
                lambda: asset.token.transfer_from(self.account, payer, self.account, amount),
                asset=asset,
                counterparty=payer,
                amount=amount,
                competition_id=competition_id,
            )
            return

        raise TypeError(f"Unknown settlement asset: {asset!r}")

    def pay(
        self,
        asset: SettlementAsset,
        recipient: str,
        amount: int,
        competition_id: int | None = None,
    ) -> None:
        """
        Push `amount` from the registry account to recipient.

        Raises:
            TransferFailureException: The rail reported failure or raised
        """
        if isinstance(asset, NativeAsset):
            try:
                ok = self._host.send_value(self.account, recipient, amount)
            except Exception as e:
                logger.warning("Native payout of %d to %s aborted: %s", amount, recipient, e)
                raise TransferFailureException(
                    message=f"Native transfer to {recipient} aborted: {e}",
                    competition_id=competition_id,
                    details={"recipient": recipient, "amount": amount, "rail": "native"},
                ) from e
            if not ok:
                logger.warning("Native payout of %d to %s rejected", amount, recipient)
                raise TransferFailureException(
                    message=f"Native transfer of {amount} to {recipient} failed",
                    competition_id=competition_id,
                    details={"recipient": recipient, "amount": amount, "rail": "native"},
                )
            return

        if isinstance(asset, TokenAsset):
            self._call_token(
                lambda: asset.token.transfer(self.account, recipient, amount),
                asset=asset,
                counterparty=recipient,
                amount=amount,
                competition_id=competition_id,
            )
            return

        raise TypeError(f"Unknown settlement asset: {asset!r}")

    def _call_token(self, call, *, asset: TokenAsset, counterparty: str, amount: int, competition_id: int | None) -> None:
        details = {"counterparty": counterparty, "amount": amount, "rail": asset.label}
        try:
            result = call()
        except Exception as e:
            logger.warning("Token call on %s with %s aborted: %s", asset.address, counterparty, e)
            raise TransferFailureException(
                message=f"Token transfer with {counterparty} aborted: {e}",
                competition_id=competition_id,
                details=details,
            ) from e
        if result is not True:
            logger.warning("Token call on %s with %s returned %r", asset.address, counterparty, result)
            raise TransferFailureException(
                message=f"Token transfer of {amount} with {counterparty} failed",
                competition_id=competition_id,
                details=details,
            )
