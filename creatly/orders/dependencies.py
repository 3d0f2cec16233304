"""Dependency injection for orders module."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from .callbacks import PaymentCallbackProcessor
from .service import OrderService


# Module-level references to be overridden by main.py
_order_service_getter: Callable[[], OrderService] | None = None
_callback_processor_getter: Callable[[], PaymentCallbackProcessor] | None = None


def set_order_service_getter(getter: Callable[[], OrderService]) -> None:
    """Set the order service getter function.

    Called by main.py during app initialization.
    """
    global _order_service_getter  # noqa: PLW0603 - Required for DI pattern
    _order_service_getter = getter


def get_order_service() -> OrderService:
    if _order_service_getter is None:
        raise RuntimeError(
            "OrderService not configured - call set_order_service_getter first"
        )
    return _order_service_getter()


def set_callback_processor_getter(
    getter: Callable[[], PaymentCallbackProcessor],
) -> None:
    """Set the payment callback processor getter function."""
    global _callback_processor_getter  # noqa: PLW0603 - Required for DI pattern
    _callback_processor_getter = getter


def get_callback_processor() -> PaymentCallbackProcessor:
    if _callback_processor_getter is None:
        raise RuntimeError(
            "PaymentCallbackProcessor not configured - "
            "call set_callback_processor_getter first"
        )
    return _callback_processor_getter()


OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
CallbackProcessorDep = Annotated[
    PaymentCallbackProcessor, Depends(get_callback_processor)
]
