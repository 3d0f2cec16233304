"""Promocode models and Cassandra schema.

A promocode belongs to a school, expires at a fixed instant and carries one
discount rule: a percentage of the list price or a fixed amount in the
currency's minor unit. An optional set of offer ids restricts which offers
it applies to; an empty set means every offer of the school.

Codes are matched case-insensitively and stored upper-cased. Uniqueness per
school is enforced by the promocodes_by_code lookup table.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from creatly.core.dates import ensure_utc_aware, utcnow
from creatly.offers.models import Price


if TYPE_CHECKING:
    from cassandra.cluster import Row


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

PROMOCODE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.promocodes (
    id UUID PRIMARY KEY,
    school_id UUID,
    code TEXT,
    discount_type TEXT,
    discount_value BIGINT,
    expires_at TIMESTAMP,
    offer_ids LIST<UUID>,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

PROMOCODE_SCHOOL_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS promocodes_school_id_idx ON {keyspace}.promocodes (school_id)
"""

# Lookup table: one row per (school, code), claimed with IF NOT EXISTS
PROMOCODES_BY_CODE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.promocodes_by_code (
    school_id UUID,
    code TEXT,
    promocode_id UUID,
    PRIMARY KEY ((school_id, code))
)
"""

PROMOCODES_TABLES_CQL = [
    PROMOCODE_TABLE_CQL,
    PROMOCODE_SCHOOL_INDEX_CQL,
    PROMOCODES_BY_CODE_TABLE_CQL,
]


# ==============================================================================
# Enums
# ==============================================================================


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


# ==============================================================================
# Entities
# ==============================================================================


def normalize_code(code: str) -> str:
    return code.strip().upper()


@dataclass
class Promocode:
    """A time-bounded, optionally offer-scoped discount rule."""

    school_id: UUID
    code: str
    discount_type: DiscountType
    discount_value: int
    expires_at: datetime
    id: UUID = field(default_factory=uuid4)
    offer_ids: list[UUID] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.code = normalize_code(self.code)

    def is_expired(self, now: datetime) -> bool:
        """Usable only while now is strictly before the expiry."""
        return now >= self.expires_at

    def applies_to(self, offer_id: UUID) -> bool:
        return not self.offer_ids or offer_id in self.offer_ids

    def apply(self, price: Price) -> Price:
        """Discounted price, never below zero.

        Percentages floor to the minor unit: 15% off 999 is 849.
        """
        if self.discount_type == DiscountType.PERCENTAGE:
            percent = min(max(self.discount_value, 0), 100)
            value = price.value * (100 - percent) // 100
        else:
            value = max(price.value - self.discount_value, 0)
        return Price(value=value, currency=price.currency)

    @classmethod
    def from_row(cls, row: "Row") -> "Promocode":
        return cls(
            id=row.id,
            school_id=row.school_id,
            code=row.code,
            discount_type=DiscountType(row.discount_type),
            discount_value=row.discount_value or 0,
            expires_at=ensure_utc_aware(row.expires_at),
            offer_ids=list(row.offer_ids or []),
            created_at=ensure_utc_aware(row.created_at) or utcnow(),
            updated_at=ensure_utc_aware(row.updated_at) or utcnow(),
        )
