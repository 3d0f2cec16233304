"""Tests for EntitlementChecker and LessonService."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from creatly.catalog.models import Lesson, Module
from creatly.entitlements.service import (
    EntitlementChecker,
    LessonService,
    ModuleIsNotAvailableError,
)
from creatly.offers.models import Offer, Price
from creatly.offers.service import OfferService, UpdateOfferInput
from creatly.orders.models import Transaction, TransactionStatus
from tests.fakes import (
    FakeLessonRepository,
    FakeModuleRepository,
    FakeOfferRepository,
    FakeTransactionRepository,
)


@pytest.fixture
def school_id():
    return uuid4()


@pytest.fixture
def student_id():
    return uuid4()


@pytest.fixture
def package_id():
    return uuid4()


@pytest.fixture
def paid_module(package_id) -> Module:
    return Module(package_id=package_id, course_id=uuid4(), name="Paid")


@pytest.fixture
def free_module(package_id) -> Module:
    return Module(package_id=package_id, course_id=uuid4(), name="Intro", is_free=True)


@pytest.fixture
def offer(school_id, package_id) -> Offer:
    return Offer(
        school_id=school_id,
        name="Full",
        price=Price(1000, "USD"),
        package_ids=[package_id],
    )


def purchase(school_id, student_id, offer, status) -> Transaction:
    return Transaction(
        school_id=school_id,
        student_id=student_id,
        offer_id=offer.id,
        amount=offer.price,
        reference=f"creatly-{uuid4().hex}",
        status=status,
    )


def make_checker(modules, transactions=(), offers=(), redis=None):
    return EntitlementChecker(
        modules=FakeModuleRepository(*modules),
        transactions=FakeTransactionRepository(*transactions),
        offers=FakeOfferRepository(*offers),
        redis=redis,
        cache_ttl=60,
    )


@pytest.fixture
def redis():
    client = AsyncMock()
    client.get.return_value = None
    return client


class TestCanAccess:
    @pytest.mark.asyncio
    async def test_free_module_without_purchase(self, free_module, student_id):
        checker = make_checker([free_module])

        assert await checker.can_access(student_id, free_module.id) is True

    @pytest.mark.asyncio
    async def test_nothing_bought(self, paid_module, student_id):
        checker = make_checker([paid_module])

        assert await checker.can_access(student_id, paid_module.id) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status", [TransactionStatus.PENDING, TransactionStatus.FAILED]
    )
    async def test_unsettled_purchase_grants_nothing(
        self, paid_module, offer, school_id, student_id, status
    ):
        checker = make_checker(
            [paid_module],
            transactions=[purchase(school_id, student_id, offer, status)],
            offers=[offer],
        )

        assert await checker.can_access(student_id, paid_module.id) is False

    @pytest.mark.asyncio
    async def test_succeeded_purchase_grants(
        self, paid_module, offer, school_id, student_id
    ):
        checker = make_checker(
            [paid_module],
            transactions=[
                purchase(school_id, student_id, offer, TransactionStatus.SUCCEEDED)
            ],
            offers=[offer],
        )

        assert await checker.can_access(student_id, paid_module.id) is True

    @pytest.mark.asyncio
    async def test_other_students_purchase(
        self, paid_module, offer, school_id, student_id
    ):
        checker = make_checker(
            [paid_module],
            transactions=[
                purchase(school_id, uuid4(), offer, TransactionStatus.SUCCEEDED)
            ],
            offers=[offer],
        )

        assert await checker.can_access(student_id, paid_module.id) is False

    @pytest.mark.asyncio
    async def test_offer_for_other_package(self, paid_module, school_id, student_id):
        other = Offer(
            school_id=school_id,
            name="Other",
            price=Price(10, "USD"),
            package_ids=[uuid4()],
        )
        checker = make_checker(
            [paid_module],
            transactions=[
                purchase(school_id, student_id, other, TransactionStatus.SUCCEEDED)
            ],
            offers=[other],
        )

        assert await checker.can_access(student_id, paid_module.id) is False

    @pytest.mark.asyncio
    async def test_missing_module(self, student_id):
        checker = make_checker([])

        with pytest.raises(ModuleIsNotAvailableError):
            await checker.can_access(student_id, uuid4())

    @pytest.mark.asyncio
    async def test_unpublished_module(self, package_id, student_id):
        hidden = Module(
            package_id=package_id, course_id=uuid4(), name="Draft", published=False
        )
        checker = make_checker([hidden])

        with pytest.raises(ModuleIsNotAvailableError):
            await checker.can_access(student_id, hidden.id)


class InMemoryRedis:
    """Just enough of redis.asyncio.Redis for the grant cache."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value

    async def delete(self, key):
        self.store.pop(key, None)


class TestCache:
    @pytest.mark.asyncio
    async def test_grant_is_cached(
        self, paid_module, offer, school_id, student_id, redis
    ):
        checker = make_checker(
            [paid_module],
            transactions=[
                purchase(school_id, student_id, offer, TransactionStatus.SUCCEEDED)
            ],
            offers=[offer],
            redis=redis,
        )

        assert await checker.can_access(student_id, paid_module.id) is True

        redis.setex.assert_awaited_once_with(
            f"entitlement:{student_id}:{paid_module.id}", 60, str(offer.id)
        )

    @pytest.mark.asyncio
    async def test_denial_is_not_cached(self, paid_module, student_id, redis):
        checker = make_checker([paid_module], redis=redis)

        assert await checker.can_access(student_id, paid_module.id) is False

        redis.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cached_grant_skips_transaction_lookup(
        self, paid_module, offer, student_id, redis
    ):
        redis.get.return_value = str(offer.id)
        checker = make_checker([paid_module], offers=[offer], redis=redis)

        assert await checker.can_access(student_id, paid_module.id) is True

    @pytest.mark.asyncio
    async def test_cached_offer_no_longer_granting_is_dropped(
        self, paid_module, school_id, student_id, redis
    ):
        other = Offer(
            school_id=school_id,
            name="Other",
            price=Price(10, "USD"),
            package_ids=[uuid4()],
        )
        redis.get.return_value = str(other.id)
        checker = make_checker([paid_module], offers=[other], redis=redis)

        assert await checker.can_access(student_id, paid_module.id) is False

        redis.delete.assert_awaited_once_with(
            f"entitlement:{student_id}:{paid_module.id}"
        )

    @pytest.mark.asyncio
    async def test_unreadable_cache_value_is_dropped(
        self, paid_module, student_id, redis
    ):
        redis.get.return_value = "1"
        checker = make_checker([paid_module], redis=redis)

        assert await checker.can_access(student_id, paid_module.id) is False

        redis.delete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_redis_failure_falls_back_to_lookup(
        self, paid_module, offer, school_id, student_id, redis
    ):
        redis.get.side_effect = RedisConnectionError("down")
        redis.setex.side_effect = RedisConnectionError("down")
        checker = make_checker(
            [paid_module],
            transactions=[
                purchase(school_id, student_id, offer, TransactionStatus.SUCCEEDED)
            ],
            offers=[offer],
            redis=redis,
        )

        assert await checker.can_access(student_id, paid_module.id) is True


class TestOfferChangesRevokeCachedGrants:
    @pytest.fixture
    def offers(self, offer) -> FakeOfferRepository:
        return FakeOfferRepository(offer)

    @pytest.fixture
    def checker(self, paid_module, offer, offers, school_id, student_id):
        return EntitlementChecker(
            modules=FakeModuleRepository(paid_module),
            transactions=FakeTransactionRepository(
                purchase(school_id, student_id, offer, TransactionStatus.SUCCEEDED)
            ),
            offers=offers,
            redis=InMemoryRedis(),
            cache_ttl=60,
        )

    @pytest.fixture
    def offer_service(self, offers) -> OfferService:
        return OfferService(offers, resolver=None)

    @pytest.mark.asyncio
    async def test_clearing_packages_revokes_cached_grant(
        self, checker, offer_service, offer, paid_module, school_id, student_id
    ):
        assert await checker.can_access(student_id, paid_module.id) is True

        await offer_service.update(
            UpdateOfferInput(id=offer.id, school_id=school_id, package_ids=[])
        )

        assert await checker.can_access(student_id, paid_module.id) is False
        assert checker.redis.store == {}

    @pytest.mark.asyncio
    async def test_deleting_offer_revokes_cached_grant(
        self, checker, offer_service, offer, paid_module, school_id, student_id
    ):
        assert await checker.can_access(student_id, paid_module.id) is True

        await offer_service.delete(school_id, offer.id)

        assert await checker.can_access(student_id, paid_module.id) is False

    @pytest.mark.asyncio
    async def test_unrelated_edit_keeps_grant(
        self, checker, offer_service, offer, paid_module, school_id, student_id
    ):
        assert await checker.can_access(student_id, paid_module.id) is True

        await offer_service.update(
            UpdateOfferInput(id=offer.id, school_id=school_id, name="Renamed")
        )

        assert await checker.can_access(student_id, paid_module.id) is True


class TestLessonService:
    @pytest.mark.asyncio
    async def test_lessons_of_accessible_module(self, free_module, student_id):
        lessons = [
            Lesson(module_id=free_module.id, name="One", position=1),
            Lesson(module_id=uuid4(), name="Elsewhere"),
        ]
        service = LessonService(
            make_checker([free_module]), FakeLessonRepository(*lessons)
        )

        result = await service.get_for_student(student_id, free_module.id)

        assert [lesson.name for lesson in result] == ["One"]

    @pytest.mark.asyncio
    async def test_denied(self, paid_module, student_id):
        service = LessonService(make_checker([paid_module]), FakeLessonRepository())

        assert await service.get_for_student(student_id, paid_module.id) is None
