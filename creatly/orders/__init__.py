"""Orders module.

Pending transactions created by the Order Service and settled by the
Payment Callback Processor.
"""

from .callbacks import (
    CallbackOutcome,
    PaymentCallback,
    PaymentCallbackProcessor,
    sign_payload,
    verify_signature,
)
from .models import Transaction, TransactionStatus, make_reference, parse_reference
from .repository import CassandraTransactionRepository, TransactionRepository
from .router import payments_router, router
from .service import (
    OrderResult,
    OrderService,
    TransactionInvalidError,
    UnknownCallbackTypeError,
)


__all__ = [
    "CallbackOutcome",
    "CassandraTransactionRepository",
    "OrderResult",
    "OrderService",
    "PaymentCallback",
    "PaymentCallbackProcessor",
    "Transaction",
    "TransactionInvalidError",
    "TransactionRepository",
    "TransactionStatus",
    "UnknownCallbackTypeError",
    "make_reference",
    "parse_reference",
    "payments_router",
    "router",
    "sign_payload",
    "verify_signature",
]
