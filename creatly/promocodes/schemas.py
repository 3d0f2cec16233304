"""Pydantic schemas for promocodes."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from creatly.core.schemas import ApiModel

from .models import DiscountType, Promocode


class CreatePromocodeRequest(ApiModel):
    code: str = Field(..., min_length=1, max_length=64)
    discount_type: DiscountType
    discount_value: int = Field(
        ..., gt=0, description="Percent (1-100) or amount in minor units"
    )
    expires_at: datetime
    offer_ids: list[UUID] = Field(default_factory=list)


class UpdatePromocodeRequest(ApiModel):
    """Partial update; ``offerIds: []`` widens the code to every offer."""

    discount_type: DiscountType | None = None
    discount_value: int | None = Field(None, gt=0)
    expires_at: datetime | None = None
    offer_ids: list[UUID] | None = None


class PromocodeResponse(ApiModel):
    id: UUID
    school_id: UUID
    code: str
    discount_type: DiscountType
    discount_value: int
    expires_at: datetime
    offer_ids: list[UUID]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_promocode(cls, promocode: Promocode) -> "PromocodeResponse":
        return cls(
            id=promocode.id,
            school_id=promocode.school_id,
            code=promocode.code,
            discount_type=promocode.discount_type,
            discount_value=promocode.discount_value,
            expires_at=promocode.expires_at,
            offer_ids=promocode.offer_ids,
            created_at=promocode.created_at,
            updated_at=promocode.updated_at,
        )


class PromocodeListResponse(ApiModel):
    data: list[PromocodeResponse]
