"""Order Service.

Creates pending transactions. Charging the customer is left to the
payment provider, driven by the returned reference and amount; the
provider later reports the outcome through the payment callback.
"""

from dataclasses import dataclass
from uuid import UUID

from creatly.core.errors import DomainError, ErrorCode
from creatly.core.logging import get_logger
from creatly.offers.models import Price
from creatly.offers.repository import OfferRepository
from creatly.offers.service import OfferNotFoundError
from creatly.promocodes.validator import PromoValidator

from .models import Transaction, make_reference
from .repository import TransactionRepository


logger = get_logger(__name__)


class TransactionInvalidError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.TRANSACTION_INVALID, message)


class UnknownCallbackTypeError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.UNKNOWN_CALLBACK_TYPE, message)


@dataclass(frozen=True)
class OrderResult:
    """What the caller needs to start the external charge."""

    transaction_id: UUID
    reference: str
    amount_due: Price


class OrderService:
    def __init__(
        self,
        offers: OfferRepository,
        transactions: TransactionRepository,
        promo_validator: PromoValidator,
        reference_prefix: str,
    ):
        self.offers = offers
        self.transactions = transactions
        self.promo_validator = promo_validator
        self.reference_prefix = reference_prefix

    async def create_order(
        self,
        student_id: UUID,
        school_id: UUID,
        offer_id: UUID,
        promo_code: str | None = None,
    ) -> OrderResult:
        """Persist a pending transaction for the offer.

        Every call creates a fresh transaction, so a failed purchase is
        retried by ordering again.

        Raises:
            OfferNotFoundError: No such offer in the student's school
            PromoNotFoundError: Unknown or out-of-scope promocode
            PromocodeExpiredError: Expired promocode
        """
        offer = await self.offers.get_by_id(offer_id)
        if offer is None or offer.school_id != school_id:
            raise OfferNotFoundError

        amount = offer.price
        promocode_id = None
        if promo_code:
            application = await self.promo_validator.validate(
                school_id, promo_code, offer
            )
            amount = application.discounted_price
            promocode_id = application.promocode.id

        transaction = Transaction(
            school_id=school_id,
            student_id=student_id,
            offer_id=offer.id,
            promocode_id=promocode_id,
            amount=amount,
            reference="",
        )
        transaction.reference = make_reference(self.reference_prefix, transaction.id)

        if not await self.transactions.create(transaction):
            raise TransactionInvalidError("transaction reference is already taken")

        logger.info(
            "order_created",
            transaction_id=str(transaction.id),
            offer_id=str(offer.id),
            amount=amount.value,
            currency=amount.currency,
            promocode_id=str(promocode_id) if promocode_id else None,
        )
        return OrderResult(
            transaction_id=transaction.id,
            reference=transaction.reference,
            amount_due=amount,
        )

    async def get_student_orders(self, student_id: UUID) -> list[Transaction]:
        return await self.transactions.get_by_student(student_id)
