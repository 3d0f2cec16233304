"""Promocode administration and storefront lookup."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from creatly.core.dates import ensure_utc_aware, utcnow
from creatly.core.errors import DomainError, ErrorCode
from creatly.core.logging import get_logger
from creatly.core.types import UNSET, Maybe, is_set
from creatly.offers.models import unique_ids

from .models import DiscountType, Promocode
from .repository import PromocodeRepository
from .validator import PromocodeExpiredError, PromoNotFoundError


logger = get_logger(__name__)


class PromoAlreadyExistsError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.PROMO_ALREADY_EXISTS, message)


class InvalidPromocodeError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.PROMO_INVALID, message)


MAX_PERCENTAGE = 100


def _validate_rule(discount_type: DiscountType, discount_value: int) -> None:
    """Percentages run 1..100; fixed amounts must be positive."""
    if discount_value <= 0:
        raise InvalidPromocodeError("discount value must be positive")
    if discount_type == DiscountType.PERCENTAGE and discount_value > MAX_PERCENTAGE:
        raise InvalidPromocodeError("percentage discount cannot exceed 100")


@dataclass
class CreatePromocodeInput:
    school_id: UUID
    code: str
    discount_type: DiscountType
    discount_value: int
    expires_at: datetime
    offer_ids: list[UUID] = field(default_factory=list)


@dataclass
class UpdatePromocodeInput:
    """Partial update; the code itself is immutable."""

    id: UUID
    school_id: UUID
    discount_type: Maybe[DiscountType] = UNSET
    discount_value: Maybe[int] = UNSET
    expires_at: Maybe[datetime] = UNSET
    offer_ids: Maybe[list[UUID]] = UNSET


class PromocodeService:
    def __init__(self, repo: PromocodeRepository):
        self.repo = repo

    async def create(self, inp: CreatePromocodeInput) -> Promocode:
        """Create a promocode.

        Raises:
            InvalidPromocodeError: If the discount rule is out of range
            PromoAlreadyExistsError: If the school already uses the code
        """
        _validate_rule(inp.discount_type, inp.discount_value)

        promocode = Promocode(
            school_id=inp.school_id,
            code=inp.code,
            discount_type=inp.discount_type,
            discount_value=inp.discount_value,
            expires_at=ensure_utc_aware(inp.expires_at),
            offer_ids=unique_ids(inp.offer_ids),
        )
        if not await self.repo.create(promocode):
            raise PromoAlreadyExistsError

        logger.info(
            "promocode_created",
            promocode_id=str(promocode.id),
            school_id=str(promocode.school_id),
            discount_type=promocode.discount_type.value,
        )
        return promocode

    async def get_for_school(self, school_id: UUID, promocode_id: UUID) -> Promocode:
        promocode = await self.repo.get_by_id(promocode_id)
        if promocode is None or promocode.school_id != school_id:
            raise PromoNotFoundError
        return promocode

    async def get_all(self, school_id: UUID) -> list[Promocode]:
        return await self.repo.get_by_school(school_id)

    async def get_active_by_code(
        self, school_id: UUID, code: str, now: datetime | None = None
    ) -> Promocode:
        """Storefront lookup; an expired code is as good as missing.

        Raises:
            PromoNotFoundError: Unknown code
            PromocodeExpiredError: Expired code
        """
        promocode = await self.repo.get_by_code(school_id, code)
        if promocode is None:
            raise PromoNotFoundError
        if promocode.is_expired(now or utcnow()):
            raise PromocodeExpiredError
        return promocode

    async def update(self, inp: UpdatePromocodeInput) -> Promocode:
        promocode = await self.get_for_school(inp.school_id, inp.id)

        if is_set(inp.discount_type):
            promocode.discount_type = inp.discount_type
        if is_set(inp.discount_value):
            promocode.discount_value = inp.discount_value
        if is_set(inp.expires_at):
            promocode.expires_at = ensure_utc_aware(inp.expires_at)
        if is_set(inp.offer_ids):
            promocode.offer_ids = unique_ids(inp.offer_ids)

        _validate_rule(promocode.discount_type, promocode.discount_value)

        promocode.updated_at = utcnow()
        await self.repo.update(promocode)

        logger.info("promocode_updated", promocode_id=str(promocode.id))
        return promocode

    async def delete(self, school_id: UUID, promocode_id: UUID) -> None:
        promocode = await self.get_for_school(school_id, promocode_id)
        await self.repo.delete(promocode)
        logger.info("promocode_deleted", promocode_id=str(promocode_id))
