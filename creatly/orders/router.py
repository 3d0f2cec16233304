"""HTTP endpoints for orders and the payment provider webhook.

Provides:
- POST /v1/students/order - Create a pending order
- GET  /v1/students/orders - List the student's orders
- POST /v1/payments/callback - Provider notification (HMAC signed)
"""

from typing import Annotated

import orjson
from fastapi import APIRouter, Depends, HTTPException, Request, status

from creatly.auth.dependencies import CurrentStudent
from creatly.config.settings import Settings, get_settings
from creatly.core.errors import DomainError, ErrorCode
from creatly.core.logging import get_logger

from .callbacks import verify_signature
from .dependencies import CallbackProcessorDep, OrderServiceDep
from .schemas import (
    CallbackResponse,
    CreateOrderRequest,
    OrderResponse,
    TransactionListResponse,
    TransactionResponse,
)
from .service import UnknownCallbackTypeError


logger = get_logger(__name__)

router = APIRouter(prefix="/v1/students", tags=["orders"])
payments_router = APIRouter(prefix="/v1/payments", tags=["payments"])


def handle_order_error(error: DomainError) -> HTTPException:
    """Convert DomainError to HTTPException.

    Every order failure is the client's to fix, so all of them are 400.
    """
    status_map = {
        ErrorCode.OFFER_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
        ErrorCode.PROMO_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
        ErrorCode.PROMOCODE_EXPIRED: status.HTTP_400_BAD_REQUEST,
        ErrorCode.TRANSACTION_INVALID: status.HTTP_400_BAD_REQUEST,
        ErrorCode.UNKNOWN_CALLBACK_TYPE: status.HTTP_400_BAD_REQUEST,
    }
    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )


# ==============================================================================
# Student Endpoints
# ==============================================================================


@router.post(
    "/order",
    response_model=OrderResponse,
    summary="Create an order",
    responses={400: {"description": "Invalid offer or promocode"}},
)
async def create_order(
    data: CreateOrderRequest,
    service: OrderServiceDep,
    student: CurrentStudent,
) -> OrderResponse:
    """Create a pending transaction and return what the provider must charge."""
    try:
        result = await service.create_order(
            student_id=student.id,
            school_id=student.school_id,
            offer_id=data.offer_id,
            promo_code=data.promo_code,
        )
    except DomainError as e:
        raise handle_order_error(e) from e
    return OrderResponse.from_result(result)


@router.get(
    "/orders",
    response_model=TransactionListResponse,
    summary="List my orders",
)
async def list_my_orders(
    service: OrderServiceDep,
    student: CurrentStudent,
) -> TransactionListResponse:
    transactions = await service.get_student_orders(student.id)
    return TransactionListResponse(
        data=[TransactionResponse.from_transaction(t) for t in transactions]
    )


# ==============================================================================
# Provider Webhook
# ==============================================================================


@payments_router.post(
    "/callback",
    response_model=CallbackResponse,
    summary="Payment provider callback",
    responses={
        400: {"description": "Unknown callback type or invalid transaction"},
        403: {"description": "Missing or invalid signature"},
    },
)
async def payment_callback(
    request: Request,
    processor: CallbackProcessorDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> CallbackResponse:
    """Apply a provider notification.

    Re-deliveries of already processed notifications return 200 so the
    provider stops retrying.
    """
    body = await request.body()
    signature = request.headers.get(settings.payment_signature_header)

    if not verify_signature(settings.payment_callback_secret, body, signature):
        logger.warning("payment_callback_bad_signature")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="invalid callback signature",
        )

    try:
        try:
            payload = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise UnknownCallbackTypeError("callback body is not JSON") from e

        outcome = await processor.process(payload)
    except DomainError as e:
        raise handle_order_error(e) from e

    return CallbackResponse(outcome=outcome)
