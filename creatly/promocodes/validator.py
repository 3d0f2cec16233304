"""Promo Validator.

Decides whether a code may discount a given offer right now, and what the
discounted price is. Usage is not counted: a valid code can be redeemed
any number of times until it expires.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from creatly.core.dates import utcnow
from creatly.core.errors import DomainError, ErrorCode
from creatly.core.logging import get_logger
from creatly.offers.models import Offer, Price

from .models import Promocode
from .repository import PromocodeRepository


logger = get_logger(__name__)


class PromoNotFoundError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.PROMO_NOT_FOUND, message)


class PromocodeExpiredError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.PROMOCODE_EXPIRED, message)


@dataclass(frozen=True)
class PromoApplication:
    promocode: Promocode
    discounted_price: Price


class PromoValidator:
    def __init__(self, repo: PromocodeRepository):
        self.repo = repo

    async def validate(
        self,
        school_id: UUID,
        code: str,
        offer: Offer,
        now: datetime | None = None,
    ) -> PromoApplication:
        """Check a code against a target offer.

        Checks run in order: existence in the school, expiry, offer scope.
        A code scoped to other offers is reported as not found.

        Raises:
            PromoNotFoundError: Unknown code, or the offer is out of scope
            PromocodeExpiredError: now is at or past the expiry
        """
        now = now or utcnow()

        promocode = await self.repo.get_by_code(school_id, code)
        if promocode is None:
            raise PromoNotFoundError

        if promocode.is_expired(now):
            raise PromocodeExpiredError

        if not promocode.applies_to(offer.id):
            logger.info(
                "promocode_out_of_scope",
                promocode_id=str(promocode.id),
                offer_id=str(offer.id),
            )
            raise PromoNotFoundError("promocode doesn't apply to this offer")

        return PromoApplication(
            promocode=promocode,
            discounted_price=promocode.apply(offer.price),
        )
