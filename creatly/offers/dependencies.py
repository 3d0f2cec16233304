"""Dependency injection for offers module."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from .service import OfferService


# Module-level reference to be overridden by main.py
_offer_service_getter: Callable[[], OfferService] | None = None


def set_offer_service_getter(getter: Callable[[], OfferService]) -> None:
    """Set the offer service getter function.

    Called by main.py during app initialization.
    """
    global _offer_service_getter  # noqa: PLW0603 - Required for DI pattern
    _offer_service_getter = getter


def get_offer_service() -> OfferService:
    """Get OfferService instance."""
    if _offer_service_getter is None:
        raise RuntimeError(
            "OfferService not configured - call set_offer_service_getter first"
        )
    return _offer_service_getter()


OfferServiceDep = Annotated[OfferService, Depends(get_offer_service)]
