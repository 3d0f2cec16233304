"""Storefront endpoints listing the offers that unlock catalog content.

Provides:
- GET /v1/courses/{course_id}/offers - Offers granting any package of a course
- GET /v1/packages/{package_id}/offers - The school's offers granting a package
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from creatly.offers.dependencies import OfferServiceDep
from creatly.offers.schemas import OfferListResponse

from .dependencies import RequestSchoolId
from .resolver import CourseNotFoundError


router = APIRouter(prefix="/v1", tags=["catalog"])


@router.get(
    "/courses/{course_id}/offers",
    response_model=OfferListResponse,
    summary="List offers for a course",
)
async def get_course_offers(
    course_id: UUID,
    service: OfferServiceDep,
) -> OfferListResponse:
    try:
        offers = await service.get_by_course(course_id)
    except CourseNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e
    return OfferListResponse.from_offers(offers)


@router.get(
    "/packages/{package_id}/offers",
    response_model=OfferListResponse,
    summary="List offers for a package",
)
async def get_package_offers(
    package_id: UUID,
    service: OfferServiceDep,
    school_id: RequestSchoolId,
) -> OfferListResponse:
    offers = await service.get_by_package(school_id, package_id)
    return OfferListResponse.from_offers(offers)
