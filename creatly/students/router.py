"""Student API endpoints.

Provides routes for:
- Sign-up, email verification and sign-in
- Module content behind the Entitlement Checker
- Offers that unlock a module
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from creatly.auth.dependencies import CurrentStudent
from creatly.auth.schemas import TokenResponse
from creatly.catalog.dependencies import RequestSchoolId
from creatly.core.errors import DomainError, ErrorCode
from creatly.core.schemas import MessageResponse
from creatly.entitlements.dependencies import LessonServiceDep
from creatly.offers.dependencies import OfferServiceDep
from creatly.offers.schemas import OfferListResponse

from .dependencies import StudentServiceDep
from .schemas import LessonListResponse, LessonResponse, SignInRequest, SignUpRequest


router = APIRouter(prefix="/v1/students", tags=["students"])


def handle_student_error(error: DomainError) -> HTTPException:
    """Convert DomainError to HTTPException.

    Credential failures are plain client errors so sign-in does not tell
    a missing account apart from a wrong password.
    """
    status_map = {
        ErrorCode.USER_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
        ErrorCode.USER_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
        ErrorCode.STUDENT_NOT_VERIFIED: status.HTTP_400_BAD_REQUEST,
        ErrorCode.VERIFICATION_CODE_INVALID: status.HTTP_400_BAD_REQUEST,
        ErrorCode.MODULE_IS_NOT_AVAILABLE: status.HTTP_400_BAD_REQUEST,
        ErrorCode.MODULE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    }
    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )


# ==============================================================================
# Public Endpoints (No Auth Required)
# ==============================================================================


@router.post(
    "/sign-up",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a student",
    responses={409: {"description": "Email already registered"}},
)
async def sign_up(
    data: SignUpRequest,
    service: StudentServiceDep,
    school_id: RequestSchoolId,
) -> MessageResponse:
    """Register and mail a verification code."""
    try:
        await service.sign_up(school_id, data.name, data.email, data.password)
    except DomainError as e:
        raise handle_student_error(e) from e
    return MessageResponse(message="verification code sent")


@router.post(
    "/sign-in",
    response_model=TokenResponse,
    summary="Student sign-in",
    responses={400: {"description": "Bad credentials or unverified account"}},
)
async def sign_in(
    data: SignInRequest,
    service: StudentServiceDep,
    school_id: RequestSchoolId,
) -> TokenResponse:
    try:
        token = await service.sign_in(school_id, data.email, data.password)
    except DomainError as e:
        raise handle_student_error(e) from e
    return TokenResponse(access_token=token.token, expires_in=token.expires_in)


@router.post(
    "/verify/{code}",
    response_model=MessageResponse,
    summary="Verify email",
    responses={400: {"description": "Invalid or used code"}},
)
async def verify(
    code: str,
    service: StudentServiceDep,
) -> MessageResponse:
    try:
        await service.verify(code)
    except DomainError as e:
        raise handle_student_error(e) from e
    return MessageResponse(message="account verified")


# ==============================================================================
# Authenticated Endpoints
# ==============================================================================


@router.get(
    "/modules/{module_id}/lessons",
    response_model=LessonListResponse,
    summary="Get module lessons",
    responses={
        400: {"description": "Module not available"},
        403: {"description": "Module not purchased"},
    },
)
async def get_module_lessons(
    module_id: UUID,
    service: LessonServiceDep,
    student: CurrentStudent,
) -> LessonListResponse:
    try:
        lessons = await service.get_for_student(student.id, module_id)
    except DomainError as e:
        raise handle_student_error(e) from e

    if lessons is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="module is not purchased",
        )
    return LessonListResponse(
        data=[LessonResponse.from_lesson(lesson) for lesson in lessons]
    )


@router.get(
    "/modules/{module_id}/offers",
    response_model=OfferListResponse,
    summary="List offers unlocking a module",
)
async def get_module_offers(
    module_id: UUID,
    service: OfferServiceDep,
    student: CurrentStudent,
) -> OfferListResponse:
    try:
        offers = await service.get_by_module(student.school_id, module_id)
    except DomainError as e:
        raise handle_student_error(e) from e
    return OfferListResponse.from_offers(offers)
