"""Tests for OrderService."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from creatly.offers.models import Offer, Price
from creatly.offers.service import OfferNotFoundError
from creatly.orders.models import TransactionStatus, make_reference, parse_reference
from creatly.orders.service import OrderService
from creatly.promocodes.models import DiscountType, Promocode
from creatly.promocodes.validator import (
    PromocodeExpiredError,
    PromoNotFoundError,
    PromoValidator,
)
from tests.fakes import (
    FakeOfferRepository,
    FakePromocodeRepository,
    FakeTransactionRepository,
)


@pytest.fixture
def school_id():
    return uuid4()


@pytest.fixture
def student_id():
    return uuid4()


@pytest.fixture
def offer(school_id) -> Offer:
    return Offer(
        school_id=school_id,
        name="Course",
        price=Price(2000, "USD"),
        package_ids=[uuid4()],
    )


@pytest.fixture
def promocodes(school_id) -> FakePromocodeRepository:
    future = datetime.now(UTC) + timedelta(days=1)
    past = datetime.now(UTC) - timedelta(days=1)
    return FakePromocodeRepository(
        Promocode(
            school_id=school_id,
            code="HALF",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=50,
            expires_at=future,
        ),
        Promocode(
            school_id=school_id,
            code="OLD",
            discount_type=DiscountType.FIXED,
            discount_value=100,
            expires_at=past,
        ),
    )


@pytest.fixture
def transactions() -> FakeTransactionRepository:
    return FakeTransactionRepository()


@pytest.fixture
def service(offer, promocodes, transactions) -> OrderService:
    return OrderService(
        offers=FakeOfferRepository(offer),
        transactions=transactions,
        promo_validator=PromoValidator(promocodes),
        reference_prefix="creatly",
    )


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_pending_transaction_at_list_price(
        self, service, transactions, offer, school_id, student_id
    ):
        result = await service.create_order(student_id, school_id, offer.id)

        assert result.amount_due == Price(2000, "USD")
        stored = transactions.transactions[result.transaction_id]
        assert stored.status == TransactionStatus.PENDING
        assert stored.promocode_id is None
        assert stored.reference == result.reference

    @pytest.mark.asyncio
    async def test_promocode_discount(
        self, service, transactions, offer, school_id, student_id
    ):
        result = await service.create_order(
            student_id, school_id, offer.id, promo_code="half"
        )

        assert result.amount_due == Price(1000, "USD")
        assert transactions.transactions[result.transaction_id].promocode_id

    @pytest.mark.asyncio
    async def test_missing_offer_persists_nothing(
        self, service, transactions, school_id, student_id
    ):
        with pytest.raises(OfferNotFoundError):
            await service.create_order(student_id, school_id, uuid4())

        assert transactions.transactions == {}

    @pytest.mark.asyncio
    async def test_offer_of_another_school(
        self, service, transactions, offer, student_id
    ):
        with pytest.raises(OfferNotFoundError):
            await service.create_order(student_id, uuid4(), offer.id)

        assert transactions.transactions == {}

    @pytest.mark.asyncio
    async def test_expired_promocode(
        self, service, transactions, offer, school_id, student_id
    ):
        with pytest.raises(PromocodeExpiredError):
            await service.create_order(
                student_id, school_id, offer.id, promo_code="OLD"
            )

        assert transactions.transactions == {}

    @pytest.mark.asyncio
    async def test_unknown_promocode(self, service, offer, school_id, student_id):
        with pytest.raises(PromoNotFoundError):
            await service.create_order(
                student_id, school_id, offer.id, promo_code="MISSING"
            )

    @pytest.mark.asyncio
    async def test_promocode_is_reusable(self, service, offer, school_id):
        first = await service.create_order(uuid4(), school_id, offer.id, "HALF")
        second = await service.create_order(uuid4(), school_id, offer.id, "HALF")

        assert first.amount_due == second.amount_due == Price(1000, "USD")

    @pytest.mark.asyncio
    async def test_each_order_gets_fresh_reference(
        self, service, offer, school_id, student_id
    ):
        first = await service.create_order(student_id, school_id, offer.id)
        second = await service.create_order(student_id, school_id, offer.id)

        assert first.reference != second.reference
        orders = await service.get_student_orders(student_id)
        assert len(orders) == 2


class TestReferences:
    def test_reference_round_trips_to_transaction_id(self):
        transaction_id = uuid4()

        reference = make_reference("creatly", transaction_id)

        assert reference.startswith("creatly-")
        assert parse_reference(reference) == transaction_id

    def test_prefix_with_dashes(self):
        transaction_id = uuid4()

        assert parse_reference(make_reference("my-shop", transaction_id)) == (
            transaction_id
        )

    @pytest.mark.parametrize("reference", ["", "creatly", "creatly-nothex", "x-123"])
    def test_malformed(self, reference):
        assert parse_reference(reference) is None
