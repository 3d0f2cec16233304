"""Offer Catalog Service.

CRUD over a school's offers plus the storefront lookup projections
(by package, by module, by course), which are delegated to the
CatalogResolver.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

from creatly.core.dates import utcnow
from creatly.core.errors import DomainError, ErrorCode
from creatly.core.logging import get_logger
from creatly.core.types import UNSET, Maybe, is_set

from .models import Offer, Price, unique_ids
from .repository import OfferRepository


if TYPE_CHECKING:
    from creatly.catalog.resolver import CatalogResolver


logger = get_logger(__name__)


# ==============================================================================
# Exceptions
# ==============================================================================


class OfferNotFoundError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.OFFER_NOT_FOUND, message)


class InvalidOfferError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.OFFER_INVALID, message)


# ==============================================================================
# Inputs
# ==============================================================================


@dataclass
class CreateOfferInput:
    school_id: UUID
    name: str
    price: Price
    description: str = ""
    benefits: list[str] = field(default_factory=list)
    package_ids: list[UUID] = field(default_factory=list)


@dataclass
class UpdateOfferInput:
    """Partial update; UNSET fields keep their stored value.

    ``package_ids`` replaces the whole package set when supplied, and an
    explicit empty list clears it.
    """

    id: UUID
    school_id: UUID
    name: Maybe[str] = UNSET
    description: Maybe[str] = UNSET
    benefits: Maybe[list[str]] = UNSET
    price: Maybe[Price] = UNSET
    package_ids: Maybe[list[UUID]] = UNSET


def _validate_price(price: Price) -> None:
    if not price.currency.strip():
        raise InvalidOfferError("price currency must not be empty")
    if price.value < 0:
        raise InvalidOfferError("price amount must not be negative")


# ==============================================================================
# Service
# ==============================================================================


class OfferService:
    """Offer CRUD scoped by school, plus the storefront projections."""

    def __init__(self, repo: OfferRepository, resolver: "CatalogResolver"):
        self.repo = repo
        self.resolver = resolver

    async def create(self, inp: CreateOfferInput) -> Offer:
        """Create an offer.

        Raises:
            InvalidOfferError: If the currency is empty or the amount negative
        """
        _validate_price(inp.price)

        offer = Offer(
            school_id=inp.school_id,
            name=inp.name,
            description=inp.description,
            benefits=list(inp.benefits),
            price=inp.price,
            package_ids=unique_ids(inp.package_ids),
        )
        await self.repo.create(offer)

        if not offer.package_ids:
            logger.warning("offer_grants_nothing", offer_id=str(offer.id))
        logger.info(
            "offer_created",
            offer_id=str(offer.id),
            school_id=str(offer.school_id),
            packages=len(offer.package_ids),
        )
        return offer

    async def get_for_school(self, school_id: UUID, offer_id: UUID) -> Offer:
        """Load an offer owned by the school.

        An offer of another school is reported as missing so its existence
        does not leak across tenants.
        """
        offer = await self.repo.get_by_id(offer_id)
        if offer is None or offer.school_id != school_id:
            raise OfferNotFoundError
        return offer

    async def get_all(self, school_id: UUID) -> list[Offer]:
        return await self.repo.get_by_school(school_id)

    async def update(self, inp: UpdateOfferInput) -> Offer:
        """Apply a partial update.

        Raises:
            OfferNotFoundError: If the school has no such offer
            InvalidOfferError: If a supplied price is invalid
        """
        offer = await self.get_for_school(inp.school_id, inp.id)

        if is_set(inp.name):
            offer.name = inp.name
        if is_set(inp.description):
            offer.description = inp.description
        if is_set(inp.benefits):
            offer.benefits = list(inp.benefits)
        if is_set(inp.price):
            _validate_price(inp.price)
            offer.price = inp.price
        if is_set(inp.package_ids):
            offer.package_ids = unique_ids(inp.package_ids)

        offer.updated_at = utcnow()
        await self.repo.update(offer)

        logger.info("offer_updated", offer_id=str(offer.id))
        return offer

    async def delete(self, school_id: UUID, offer_id: UUID) -> None:
        """Raises OfferNotFoundError if the school owns no such offer."""
        if not await self.repo.delete(school_id, offer_id):
            raise OfferNotFoundError
        logger.info("offer_deleted", offer_id=str(offer_id), school_id=str(school_id))

    # ==========================================================================
    # Storefront projections
    # ==========================================================================

    async def get_by_package(self, school_id: UUID, package_id: UUID) -> list[Offer]:
        return await self.resolver.offers_for_package(school_id, package_id)

    async def get_by_module(self, school_id: UUID, module_id: UUID) -> list[Offer]:
        return await self.resolver.offers_for_module(school_id, module_id)

    async def get_by_course(self, course_id: UUID) -> list[Offer]:
        return await self.resolver.offers_for_course(course_id)
