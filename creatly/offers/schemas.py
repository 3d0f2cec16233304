"""Pydantic schemas for offers."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from creatly.core.schemas import ApiModel

from .models import Offer, Price


class PriceSchema(ApiModel):
    value: int = Field(..., description="Amount in the currency's minor unit")
    currency: str = Field(..., max_length=3, description="ISO 4217 currency code")

    def to_price(self) -> Price:
        return Price(value=self.value, currency=self.currency.upper())


class CreateOfferRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    benefits: list[str] = Field(default_factory=list)
    price: PriceSchema
    packages: list[UUID] = Field(default_factory=list)


class UpdateOfferRequest(ApiModel):
    """Partial update: only fields present in the body are applied.

    ``packages`` present with ``[]`` clears the package set; ``packages``
    absent leaves it alone.
    """

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    benefits: list[str] | None = None
    price: PriceSchema | None = None
    packages: list[UUID] | None = None


class OfferResponse(ApiModel):
    id: UUID
    school_id: UUID
    name: str
    description: str
    benefits: list[str]
    price: PriceSchema
    packages: list[UUID]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_offer(cls, offer: Offer) -> "OfferResponse":
        return cls(
            id=offer.id,
            school_id=offer.school_id,
            name=offer.name,
            description=offer.description,
            benefits=offer.benefits,
            price=PriceSchema(value=offer.price.value, currency=offer.price.currency),
            packages=offer.package_ids,
            created_at=offer.created_at,
            updated_at=offer.updated_at,
        )


class OfferListResponse(ApiModel):
    data: list[OfferResponse]

    @classmethod
    def from_offers(cls, offers: list[Offer]) -> "OfferListResponse":
        return cls(data=[OfferResponse.from_offer(o) for o in offers])


class IdResponse(ApiModel):
    id: UUID
