"""Pydantic schemas for orders and payment callbacks."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from creatly.core.schemas import ApiModel
from creatly.offers.schemas import PriceSchema

from .callbacks import CallbackOutcome
from .models import Transaction, TransactionStatus
from .service import OrderResult


class CreateOrderRequest(ApiModel):
    offer_id: UUID
    promo_code: str | None = Field(None, max_length=64)


class OrderResponse(ApiModel):
    transaction_id: UUID
    reference: str
    amount_due: int = Field(..., description="Amount in the currency's minor unit")
    currency: str

    @classmethod
    def from_result(cls, result: OrderResult) -> "OrderResponse":
        return cls(
            transaction_id=result.transaction_id,
            reference=result.reference,
            amount_due=result.amount_due.value,
            currency=result.amount_due.currency,
        )


class TransactionResponse(ApiModel):
    id: UUID
    offer_id: UUID
    promocode_id: UUID | None
    amount: PriceSchema
    reference: str
    status: TransactionStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            offer_id=transaction.offer_id,
            promocode_id=transaction.promocode_id,
            amount=PriceSchema(
                value=transaction.amount.value,
                currency=transaction.amount.currency,
            ),
            reference=transaction.reference,
            status=transaction.status,
            created_at=transaction.created_at,
            updated_at=transaction.updated_at,
        )


class TransactionListResponse(ApiModel):
    data: list[TransactionResponse]


class CallbackResponse(ApiModel):
    outcome: CallbackOutcome
