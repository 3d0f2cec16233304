"""HTTP endpoints for offer administration.

Provides:
- POST   /v1/admins/offers - Create offer
- GET    /v1/admins/offers - List the school's offers
- GET    /v1/admins/offers/{offer_id} - Get offer
- PUT    /v1/admins/offers/{offer_id} - Partial update
- DELETE /v1/admins/offers/{offer_id} - Delete offer

All endpoints act on the school named in the admin's token.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from creatly.auth.dependencies import SchoolAdmin
from creatly.core.errors import DomainError, ErrorCode
from creatly.core.schemas import MessageResponse
from creatly.core.types import UNSET

from .dependencies import OfferServiceDep
from .schemas import (
    CreateOfferRequest,
    IdResponse,
    OfferListResponse,
    OfferResponse,
    UpdateOfferRequest,
)
from .service import CreateOfferInput, UpdateOfferInput


admin_router = APIRouter(prefix="/v1/admins/offers", tags=["admin-offers"])


def handle_offer_error(error: DomainError) -> HTTPException:
    """Convert DomainError to HTTPException."""
    status_map = {
        ErrorCode.OFFER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
        ErrorCode.OFFER_INVALID: status.HTTP_400_BAD_REQUEST,
    }
    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )


def _update_input(
    offer_id: UUID, school_id: UUID, data: UpdateOfferRequest
) -> UpdateOfferInput:
    """Keep only the fields the client actually sent.

    A field sent as null counts as absent, except ``packages`` where an
    explicit empty list clears the set.
    """
    sent = data.model_fields_set

    def pick(name: str):
        value = getattr(data, name)
        return value if name in sent and value is not None else UNSET

    price = pick("price")
    return UpdateOfferInput(
        id=offer_id,
        school_id=school_id,
        name=pick("name"),
        description=pick("description"),
        benefits=pick("benefits"),
        price=price.to_price() if price else UNSET,
        package_ids=pick("packages"),
    )


@admin_router.post(
    "",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create offer",
)
async def create_offer(
    data: CreateOfferRequest,
    service: OfferServiceDep,
    admin: SchoolAdmin,
) -> IdResponse:
    try:
        offer = await service.create(
            CreateOfferInput(
                school_id=admin.school_id,
                name=data.name,
                description=data.description,
                benefits=data.benefits,
                price=data.price.to_price(),
                package_ids=data.packages,
            )
        )
    except DomainError as e:
        raise handle_offer_error(e) from e
    return IdResponse(id=offer.id)


@admin_router.get(
    "",
    response_model=OfferListResponse,
    summary="List offers",
)
async def list_offers(
    service: OfferServiceDep,
    admin: SchoolAdmin,
) -> OfferListResponse:
    offers = await service.get_all(admin.school_id)
    return OfferListResponse.from_offers(offers)


@admin_router.get(
    "/{offer_id}",
    response_model=OfferResponse,
    summary="Get offer",
)
async def get_offer(
    offer_id: UUID,
    service: OfferServiceDep,
    admin: SchoolAdmin,
) -> OfferResponse:
    try:
        offer = await service.get_for_school(admin.school_id, offer_id)
    except DomainError as e:
        raise handle_offer_error(e) from e
    return OfferResponse.from_offer(offer)


@admin_router.put(
    "/{offer_id}",
    response_model=OfferResponse,
    summary="Update offer",
)
async def update_offer(
    offer_id: UUID,
    data: UpdateOfferRequest,
    service: OfferServiceDep,
    admin: SchoolAdmin,
) -> OfferResponse:
    """Partial update: fields missing from the body keep their value."""
    try:
        offer = await service.update(_update_input(offer_id, admin.school_id, data))
    except DomainError as e:
        raise handle_offer_error(e) from e
    return OfferResponse.from_offer(offer)


@admin_router.delete(
    "/{offer_id}",
    response_model=MessageResponse,
    summary="Delete offer",
)
async def delete_offer(
    offer_id: UUID,
    service: OfferServiceDep,
    admin: SchoolAdmin,
) -> MessageResponse:
    try:
        await service.delete(admin.school_id, offer_id)
    except DomainError as e:
        raise handle_offer_error(e) from e
    return MessageResponse(message="offer deleted")
