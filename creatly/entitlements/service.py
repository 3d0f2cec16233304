"""Entitlement Checker.

Access is derived, never stored: a student may open a module when the
module is free, or when one of the student's succeeded transactions is
for an offer whose package set contains the module's package.

Redis remembers which offer granted a module, so a repeat check skips
enumerating the student's transactions. The offer's current package set
is re-checked on every hit; an offer edited or deleted since then drops
the cached entry and falls back to the full lookup. Denials are never
cached, so a purchase is visible immediately.
"""

from typing import TYPE_CHECKING
from uuid import UUID

from redis.exceptions import RedisError

from creatly.catalog.models import Lesson
from creatly.catalog.repository import LessonRepository, ModuleRepository
from creatly.core.errors import DomainError, ErrorCode
from creatly.core.logging import get_logger
from creatly.offers.repository import OfferRepository
from creatly.orders.models import TransactionStatus
from creatly.orders.repository import TransactionRepository


if TYPE_CHECKING:
    from redis.asyncio import Redis


logger = get_logger(__name__)


class ModuleIsNotAvailableError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.MODULE_IS_NOT_AVAILABLE, message)


class EntitlementChecker:
    def __init__(
        self,
        modules: ModuleRepository,
        transactions: TransactionRepository,
        offers: OfferRepository,
        redis: "Redis | None" = None,
        cache_ttl: int = 300,
    ):
        self.modules = modules
        self.transactions = transactions
        self.offers = offers
        self.redis = redis
        self.cache_ttl = cache_ttl

    @staticmethod
    def _cache_key(student_id: UUID, module_id: UUID) -> str:
        return f"entitlement:{student_id}:{module_id}"

    async def can_access(self, student_id: UUID, module_id: UUID) -> bool:
        """Check whether the student may open the module. Never writes to Cassandra.

        Raises:
            ModuleIsNotAvailableError: Module missing or unpublished
        """
        module = await self.modules.get_by_id(module_id)
        if module is None or not module.published:
            raise ModuleIsNotAvailableError

        if module.is_free:
            return True

        cache_key = self._cache_key(student_id, module_id)
        if await self._cached_grant(cache_key, module.package_id):
            return True

        offer_id = await self._granting_offer(student_id, module.package_id)
        if offer_id is None:
            return False

        await self._cache_grant(cache_key, offer_id)
        return True

    async def _granting_offer(self, student_id: UUID, package_id: UUID) -> UUID | None:
        """A purchased offer that currently grants the package, if any."""
        transactions = await self.transactions.get_by_student(student_id)
        offer_ids = {
            t.offer_id for t in transactions if t.status == TransactionStatus.SUCCEEDED
        }

        for offer_id in offer_ids:
            offer = await self.offers.get_by_id(offer_id)
            if offer and offer.grants(package_id):
                return offer_id
        return None

    async def _cached_grant(self, cache_key: str, package_id: UUID) -> bool:
        """Check the remembered offer against its current package set."""
        if not self.redis:
            return False
        try:
            cached = await self.redis.get(cache_key)
        except RedisError as e:
            logger.warning("entitlement_cache_read_failed", error=str(e))
            return False
        if not cached:
            return False

        try:
            offer_id = UUID(cached)
        except ValueError:
            offer_id = None
        offer = await self.offers.get_by_id(offer_id) if offer_id else None
        if offer and offer.grants(package_id):
            return True

        logger.info("entitlement_cache_stale", cache_key=cache_key)
        try:
            await self.redis.delete(cache_key)
        except RedisError as e:
            logger.warning("entitlement_cache_delete_failed", error=str(e))
        return False

    async def _cache_grant(self, cache_key: str, offer_id: UUID) -> None:
        if not self.redis:
            return
        try:
            await self.redis.setex(cache_key, self.cache_ttl, str(offer_id))
        except RedisError as e:
            logger.warning("entitlement_cache_write_failed", error=str(e))


class LessonService:
    """Serves module content behind the Entitlement Checker."""

    def __init__(self, checker: EntitlementChecker, lessons: LessonRepository):
        self.checker = checker
        self.lessons = lessons

    async def get_for_student(
        self, student_id: UUID, module_id: UUID
    ) -> list[Lesson] | None:
        """The module's lessons, or None when the student has no access.

        Raises:
            ModuleIsNotAvailableError: Module missing or unpublished
        """
        if not await self.checker.can_access(student_id, module_id):
            logger.info(
                "module_access_denied",
                student_id=str(student_id),
                module_id=str(module_id),
            )
            return None
        return await self.lessons.get_by_module(module_id)
