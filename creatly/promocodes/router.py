"""HTTP endpoints for promocodes.

Provides:
- GET    /v1/promocodes/{code} - Storefront lookup of an active code
- POST   /v1/admins/promocodes - Create promocode
- GET    /v1/admins/promocodes - List the school's promocodes
- GET    /v1/admins/promocodes/{promocode_id} - Get promocode
- PUT    /v1/admins/promocodes/{promocode_id} - Partial update
- DELETE /v1/admins/promocodes/{promocode_id} - Delete promocode
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from creatly.auth.dependencies import SchoolAdmin
from creatly.catalog.dependencies import RequestSchoolId
from creatly.core.errors import DomainError, ErrorCode
from creatly.core.schemas import MessageResponse
from creatly.core.types import UNSET
from creatly.offers.schemas import IdResponse

from .dependencies import PromocodeServiceDep
from .schemas import (
    CreatePromocodeRequest,
    PromocodeListResponse,
    PromocodeResponse,
    UpdatePromocodeRequest,
)
from .service import CreatePromocodeInput, UpdatePromocodeInput


router = APIRouter(prefix="/v1/promocodes", tags=["promocodes"])
admin_router = APIRouter(prefix="/v1/admins/promocodes", tags=["admin-promocodes"])


def handle_promocode_error(error: DomainError) -> HTTPException:
    """Convert DomainError to HTTPException."""
    status_map = {
        ErrorCode.PROMO_NOT_FOUND: status.HTTP_404_NOT_FOUND,
        # Expired codes are invisible to the storefront
        ErrorCode.PROMOCODE_EXPIRED: status.HTTP_404_NOT_FOUND,
        ErrorCode.PROMO_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
        ErrorCode.PROMO_INVALID: status.HTTP_400_BAD_REQUEST,
    }
    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )


# ==============================================================================
# Storefront
# ==============================================================================


@router.get(
    "/{code}",
    response_model=PromocodeResponse,
    summary="Look up an active promocode",
)
async def get_promocode_by_code(
    code: str,
    service: PromocodeServiceDep,
    school_id: RequestSchoolId,
) -> PromocodeResponse:
    try:
        promocode = await service.get_active_by_code(school_id, code)
    except DomainError as e:
        raise handle_promocode_error(e) from e
    return PromocodeResponse.from_promocode(promocode)


# ==============================================================================
# Admin
# ==============================================================================


@admin_router.post(
    "",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create promocode",
)
async def create_promocode(
    data: CreatePromocodeRequest,
    service: PromocodeServiceDep,
    admin: SchoolAdmin,
) -> IdResponse:
    try:
        promocode = await service.create(
            CreatePromocodeInput(
                school_id=admin.school_id,
                code=data.code,
                discount_type=data.discount_type,
                discount_value=data.discount_value,
                expires_at=data.expires_at,
                offer_ids=data.offer_ids,
            )
        )
    except DomainError as e:
        raise handle_promocode_error(e) from e
    return IdResponse(id=promocode.id)


@admin_router.get(
    "",
    response_model=PromocodeListResponse,
    summary="List promocodes",
)
async def list_promocodes(
    service: PromocodeServiceDep,
    admin: SchoolAdmin,
) -> PromocodeListResponse:
    promocodes = await service.get_all(admin.school_id)
    return PromocodeListResponse(
        data=[PromocodeResponse.from_promocode(p) for p in promocodes]
    )


@admin_router.get(
    "/{promocode_id}",
    response_model=PromocodeResponse,
    summary="Get promocode",
)
async def get_promocode(
    promocode_id: UUID,
    service: PromocodeServiceDep,
    admin: SchoolAdmin,
) -> PromocodeResponse:
    try:
        promocode = await service.get_for_school(admin.school_id, promocode_id)
    except DomainError as e:
        raise handle_promocode_error(e) from e
    return PromocodeResponse.from_promocode(promocode)


@admin_router.put(
    "/{promocode_id}",
    response_model=PromocodeResponse,
    summary="Update promocode",
)
async def update_promocode(
    promocode_id: UUID,
    data: UpdatePromocodeRequest,
    service: PromocodeServiceDep,
    admin: SchoolAdmin,
) -> PromocodeResponse:
    sent = data.model_fields_set

    def pick(name: str):
        value = getattr(data, name)
        return value if name in sent and value is not None else UNSET

    try:
        promocode = await service.update(
            UpdatePromocodeInput(
                id=promocode_id,
                school_id=admin.school_id,
                discount_type=pick("discount_type"),
                discount_value=pick("discount_value"),
                expires_at=pick("expires_at"),
                offer_ids=pick("offer_ids"),
            )
        )
    except DomainError as e:
        raise handle_promocode_error(e) from e
    return PromocodeResponse.from_promocode(promocode)


@admin_router.delete(
    "/{promocode_id}",
    response_model=MessageResponse,
    summary="Delete promocode",
)
async def delete_promocode(
    promocode_id: UUID,
    service: PromocodeServiceDep,
    admin: SchoolAdmin,
) -> MessageResponse:
    try:
        await service.delete(admin.school_id, promocode_id)
    except DomainError as e:
        raise handle_promocode_error(e) from e
    return MessageResponse(message="promocode deleted")
