"""Promocodes module.

Discount codes scoped to a school: admin CRUD, storefront lookup and the
Promo Validator used when an order is placed.
"""

from .models import DiscountType, Promocode
from .repository import CassandraPromocodeRepository, PromocodeRepository
from .router import admin_router, router
from .service import (
    CreatePromocodeInput,
    InvalidPromocodeError,
    PromoAlreadyExistsError,
    PromocodeService,
    UpdatePromocodeInput,
)
from .validator import (
    PromoApplication,
    PromocodeExpiredError,
    PromoNotFoundError,
    PromoValidator,
)


__all__ = [
    "CassandraPromocodeRepository",
    "CreatePromocodeInput",
    "DiscountType",
    "InvalidPromocodeError",
    "PromoAlreadyExistsError",
    "PromoApplication",
    "PromoNotFoundError",
    "PromoValidator",
    "Promocode",
    "PromocodeExpiredError",
    "PromocodeRepository",
    "PromocodeService",
    "UpdatePromocodeInput",
    "admin_router",
    "router",
]
