"""Offers module.

An offer sells access to a set of packages at a price. This package holds
the offer storage, the Offer Catalog Service and the admin endpoints; the
storefront lookups live in creatly.catalog.
"""

from .models import Offer, Price
from .repository import CassandraOfferRepository, OfferRepository
from .router import admin_router
from .service import (
    CreateOfferInput,
    InvalidOfferError,
    OfferNotFoundError,
    OfferService,
    UpdateOfferInput,
)


__all__ = [
    "CassandraOfferRepository",
    "CreateOfferInput",
    "InvalidOfferError",
    "Offer",
    "OfferNotFoundError",
    "OfferRepository",
    "OfferService",
    "Price",
    "UpdateOfferInput",
    "admin_router",
]
