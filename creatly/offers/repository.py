# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Offer storage contract and Cassandra implementation."""

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from .models import Offer


if TYPE_CHECKING:
    from cassandra.cluster import Session


class OfferRepository(Protocol):
    async def create(self, offer: Offer) -> None: ...

    async def get_by_id(self, offer_id: UUID) -> Offer | None: ...

    async def get_by_school(self, school_id: UUID) -> list[Offer]: ...

    async def get_by_packages(self, package_ids: list[UUID]) -> list[Offer]:
        """Offers granting any of the packages, each offer at most once."""
        ...

    async def update(self, offer: Offer) -> None: ...

    async def delete(self, school_id: UUID, offer_id: UUID) -> bool:
        """Delete an offer owned by the school; False when there is none."""
        ...


class CassandraOfferRepository:
    """Offers stored in a single table with school and package indexes."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.offers
            (id, school_id, name, description, benefits, price_value,
             price_currency, package_ids, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._get_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.offers WHERE id = ?"
        )
        self._get_by_school = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.offers WHERE school_id = ?"
        )
        self._get_by_package = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.offers WHERE package_ids CONTAINS ?"
        )
        self._update = self.session.prepare(f"""
            UPDATE {self.keyspace}.offers
            SET name = ?, description = ?, benefits = ?, price_value = ?,
                price_currency = ?, package_ids = ?, updated_at = ?
            WHERE id = ?
        """)
        # Conditional delete keeps tenants from deleting each other's offers
        self._delete = self.session.prepare(
            f"DELETE FROM {self.keyspace}.offers WHERE id = ? IF school_id = ?"
        )

    async def create(self, offer: Offer) -> None:
        await self.session.aexecute(
            self._insert,
            [
                offer.id,
                offer.school_id,
                offer.name,
                offer.description,
                offer.benefits,
                offer.price.value,
                offer.price.currency,
                offer.package_ids,
                offer.created_at,
                offer.updated_at,
            ],
        )

    async def get_by_id(self, offer_id: UUID) -> Offer | None:
        result = await self.session.aexecute(self._get_by_id, [offer_id])
        row = result.one()
        return Offer.from_row(row) if row else None

    async def get_by_school(self, school_id: UUID) -> list[Offer]:
        rows = await self.session.aexecute(self._get_by_school, [school_id])
        return [Offer.from_row(row) for row in rows]

    async def get_by_packages(self, package_ids: list[UUID]) -> list[Offer]:
        offers: dict[UUID, Offer] = {}
        for package_id in package_ids:
            rows = await self.session.aexecute(self._get_by_package, [package_id])
            for row in rows:
                offers.setdefault(row.id, Offer.from_row(row))
        return list(offers.values())

    async def update(self, offer: Offer) -> None:
        await self.session.aexecute(
            self._update,
            [
                offer.name,
                offer.description,
                offer.benefits,
                offer.price.value,
                offer.price.currency,
                offer.package_ids,
                offer.updated_at,
                offer.id,
            ],
        )

    async def delete(self, school_id: UUID, offer_id: UUID) -> bool:
        result = await self.session.aexecute(self._delete, [offer_id, school_id])
        return bool(result.was_applied)
