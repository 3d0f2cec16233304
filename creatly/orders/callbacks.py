"""Payment Callback Processor.

Reconciles provider notifications into transaction state. Delivery is
at-least-once and unordered, so every notification is checked against the
stored status and applied with a compare-and-set:

    pending   -> succeeded | failed   applied
    succeeded -> succeeded            duplicate, acknowledged
    failed    -> failed               duplicate, acknowledged
    failed    -> succeeded            ignored, acknowledged with a warning
    succeeded -> failed               rejected (TransactionInvalidError)

A succeeded transaction is what grants access; nothing else is written.
"""

import hashlib
import hmac
import secrets
from enum import Enum
from typing import Any

from pydantic import Field, ValidationError

from creatly.core.dates import utcnow
from creatly.core.logging import get_logger
from creatly.core.schemas import ApiModel

from .models import Transaction, TransactionStatus, parse_reference
from .repository import TransactionRepository
from .service import TransactionInvalidError, UnknownCallbackTypeError


logger = get_logger(__name__)


_SUCCESS_STATUSES = {"success", "succeeded", "approved"}
_FAILURE_STATUSES = {"failure", "failed", "declined"}
_IN_PROGRESS_STATUSES = {"pending", "processing"}

# Bounded re-reads after losing a compare-and-set race
_MAX_ATTEMPTS = 3


class CallbackOutcome(str, Enum):
    APPLIED = "applied"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"


class PaymentCallback(ApiModel):
    transaction_reference: str = Field(..., min_length=1)
    status: str
    amount: int | None = None
    currency: str | None = None


def sign_payload(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    if not secret or not signature:
        return False
    return secrets.compare_digest(sign_payload(secret, body), signature.lower())


def _target_status(raw_status: str) -> TransactionStatus | None:
    """Map the provider's status word; None for in-progress notices.

    Raises:
        UnknownCallbackTypeError: Unrecognized status
    """
    value = raw_status.strip().lower()
    if value in _SUCCESS_STATUSES:
        return TransactionStatus.SUCCEEDED
    if value in _FAILURE_STATUSES:
        return TransactionStatus.FAILED
    if value in _IN_PROGRESS_STATUSES:
        return None
    raise UnknownCallbackTypeError(f"unknown callback status: {raw_status!r}")


class PaymentCallbackProcessor:
    def __init__(self, transactions: TransactionRepository):
        self.transactions = transactions

    async def process(self, payload: Any) -> CallbackOutcome:
        """Apply one provider notification.

        Raises:
            UnknownCallbackTypeError: Payload shape or status not recognized
            TransactionInvalidError: Unknown reference, a failure reported
                for a succeeded transaction, or an amount mismatch on a
                pending one
        """
        try:
            callback = PaymentCallback.model_validate(payload)
        except ValidationError as e:
            raise UnknownCallbackTypeError("malformed callback payload") from e

        target = _target_status(callback.status)

        transaction_id = parse_reference(callback.transaction_reference)
        transaction = (
            await self.transactions.get_by_id(transaction_id)
            if transaction_id
            else None
        )
        if transaction is None or transaction.reference != callback.transaction_reference:
            logger.warning(
                "payment_callback_unknown_reference",
                reference=callback.transaction_reference,
            )
            raise TransactionInvalidError("transaction reference doesn't match")

        if target is None:
            logger.info(
                "payment_callback_in_progress",
                transaction_id=str(transaction.id),
                provider_status=callback.status,
            )
            return CallbackOutcome.IGNORED

        return await self._transition(transaction, callback, target)

    def _check_amount(self, transaction: Transaction, callback: PaymentCallback) -> None:
        currency = (callback.currency or "").upper()
        if (
            callback.amount != transaction.amount.value
            or currency != transaction.amount.currency
        ):
            logger.warning(
                "payment_callback_amount_mismatch",
                transaction_id=str(transaction.id),
                expected_amount=transaction.amount.value,
                expected_currency=transaction.amount.currency,
                amount=callback.amount,
                currency=callback.currency,
            )
            raise TransactionInvalidError("paid amount doesn't match the order")

    async def _transition(
        self,
        transaction: Transaction,
        callback: PaymentCallback,
        target: TransactionStatus,
    ) -> CallbackOutcome:
        """Settle the status first; only a pending transaction has its amount checked."""
        for _ in range(_MAX_ATTEMPTS):
            current = transaction.status

            if current == target:
                logger.info(
                    "payment_callback_duplicate",
                    transaction_id=str(transaction.id),
                    status=current.value,
                )
                return CallbackOutcome.DUPLICATE

            if current == TransactionStatus.SUCCEEDED:
                logger.warning(
                    "payment_callback_rejected",
                    transaction_id=str(transaction.id),
                    status=current.value,
                    requested=target.value,
                )
                raise TransactionInvalidError("transaction has already succeeded")

            if current == TransactionStatus.FAILED:
                logger.warning(
                    "payment_callback_ignored",
                    transaction_id=str(transaction.id),
                    status=current.value,
                    requested=target.value,
                )
                return CallbackOutcome.IGNORED

            if target == TransactionStatus.SUCCEEDED:
                self._check_amount(transaction, callback)

            applied = await self.transactions.transition_status(
                transaction.id,
                expected=TransactionStatus.PENDING,
                new=target,
                updated_at=utcnow(),
            )
            if applied:
                logger.info(
                    "payment_callback_applied",
                    transaction_id=str(transaction.id),
                    status=target.value,
                )
                return CallbackOutcome.APPLIED

            # Lost the race; decide again against what the winner wrote
            reloaded = await self.transactions.get_by_id(transaction.id)
            if reloaded is None:
                raise TransactionInvalidError("transaction disappeared")
            transaction = reloaded

        raise TransactionInvalidError("transaction status keeps changing")
