"""Dependency injection for promocodes module."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from .service import PromocodeService


# Module-level reference to be overridden by main.py
_promocode_service_getter: Callable[[], PromocodeService] | None = None


def set_promocode_service_getter(getter: Callable[[], PromocodeService]) -> None:
    """Set the promocode service getter function.

    Called by main.py during app initialization.
    """
    global _promocode_service_getter  # noqa: PLW0603 - Required for DI pattern
    _promocode_service_getter = getter


def get_promocode_service() -> PromocodeService:
    if _promocode_service_getter is None:
        raise RuntimeError(
            "PromocodeService not configured - call set_promocode_service_getter first"
        )
    return _promocode_service_getter()


PromocodeServiceDep = Annotated[PromocodeService, Depends(get_promocode_service)]
