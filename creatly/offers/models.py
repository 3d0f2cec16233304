"""Offer models and Cassandra schema.

An offer belongs to a school, has a price (integer amount in the currency's
minor unit plus an ISO currency code), a list of benefit descriptions and
the ids of the packages it grants access to. An offer whose package list
is empty grants nothing; that is a configuration problem, not an error.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from creatly.core.dates import ensure_utc_aware, utcnow


if TYPE_CHECKING:
    from cassandra.cluster import Row


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

OFFER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.offers (
    id UUID PRIMARY KEY,
    school_id UUID,
    name TEXT,
    description TEXT,
    benefits LIST<TEXT>,
    price_value BIGINT,
    price_currency TEXT,
    package_ids LIST<UUID>,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

OFFER_SCHOOL_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS offers_school_id_idx ON {keyspace}.offers (school_id)
"""

OFFER_PACKAGES_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS offers_package_ids_idx ON {keyspace}.offers (VALUES(package_ids))
"""

OFFERS_TABLES_CQL = [
    OFFER_TABLE_CQL,
    OFFER_SCHOOL_INDEX_CQL,
    OFFER_PACKAGES_INDEX_CQL,
]


# ==============================================================================
# Entities
# ==============================================================================


@dataclass(frozen=True)
class Price:
    """Amount in the currency's minor unit (cents, kopecks) plus currency code."""

    value: int
    currency: str


def unique_ids(ids: list[UUID]) -> list[UUID]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


@dataclass
class Offer:
    """A purchasable bundle of packages at a price."""

    school_id: UUID
    name: str
    price: Price
    id: UUID = field(default_factory=uuid4)
    description: str = ""
    benefits: list[str] = field(default_factory=list)
    package_ids: list[UUID] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def grants(self, package_id: UUID) -> bool:
        """Check whether buying this offer unlocks the given package."""
        return package_id in self.package_ids

    @classmethod
    def from_row(cls, row: "Row") -> "Offer":
        return cls(
            id=row.id,
            school_id=row.school_id,
            name=row.name,
            description=row.description or "",
            benefits=list(row.benefits or []),
            price=Price(value=row.price_value or 0, currency=row.price_currency or ""),
            package_ids=list(row.package_ids or []),
            created_at=ensure_utc_aware(row.created_at) or utcnow(),
            updated_at=ensure_utc_aware(row.updated_at) or utcnow(),
        )
